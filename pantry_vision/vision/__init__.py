"""Vision provider access."""

from .azure_client import AzureVisionClient, VisionServiceError, client_from_config

__all__ = ["AzureVisionClient", "VisionServiceError", "client_from_config"]
