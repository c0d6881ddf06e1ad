"""Client for the Azure AI Vision image-analysis endpoint."""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.types import RawSignal

logger = logging.getLogger(__name__)

DEFAULT_FEATURES = ("tags", "objects", "denseCaptions")
ANALYZE_PATH = "/computervision/imageanalysis:analyze"


class VisionServiceError(RuntimeError):
    """Raised when the vision service cannot be reached or rejects a request."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class AzureVisionClient:
    """Post image bytes to the analyze endpoint and parse the response."""

    def __init__(
        self,
        endpoint: str,
        key: str,
        features: Sequence[str] = DEFAULT_FEATURES,
        api_version: str = "2023-10-01",
        model_version: str = "latest",
        timeout: float = 30.0,
    ) -> None:
        if not endpoint or not key:
            raise VisionServiceError("Azure Vision credentials not configured")
        self.endpoint = endpoint.rstrip("/")
        self.key = key
        self.features = tuple(features)
        self.api_version = api_version
        self.model_version = model_version
        self.timeout = float(timeout)

    def build_url(self, features: Sequence[str] | None = None) -> str:
        params = {
            "api-version": self.api_version,
            "features": ",".join(features or self.features),
            "model-version": self.model_version,
        }
        return f"{self.endpoint}{ANALYZE_PATH}?{urllib.parse.urlencode(params)}"

    def analyze_bytes(self, data: bytes, features: Sequence[str] | None = None) -> Dict[str, Any]:
        """Send raw image bytes and return the decoded JSON payload."""
        req = urllib.request.Request(self.build_url(features), data=data, method="POST")
        req.add_header("Content-Type", "application/octet-stream")
        req.add_header("Ocp-Apim-Subscription-Key", self.key)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                payload = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")[:500]
            raise VisionServiceError(
                f"Azure Vision API error: {exc.code} {detail}".strip(), status=exc.code
            ) from exc
        except (urllib.error.URLError, OSError) as exc:
            raise VisionServiceError(f"Azure Vision request failed: {exc}") from exc
        except ValueError as exc:
            raise VisionServiceError(f"Azure Vision returned invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise VisionServiceError("Azure Vision returned a non-object payload")
        return payload

    def analyze_file(self, path: str | Path, features: Sequence[str] | None = None) -> RawSignal:
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise VisionServiceError(f"Cannot read image {path}: {exc}") from exc
        payload = self.analyze_bytes(data, features)
        signal = RawSignal.from_response(payload)
        logger.debug(
            "Analyzed %s: %d tags, %d captions, %d objects",
            path, len(signal.tags), len(signal.captions), len(signal.objects),
        )
        return signal

    async def analyze(self, uri: str) -> RawSignal:
        return await asyncio.to_thread(self.analyze_file, uri)

    def with_features(self, features: Sequence[str]) -> "AzureVisionClient":
        """Same credentials, different feature list (used for crop calls)."""
        return AzureVisionClient(
            self.endpoint,
            self.key,
            features=features,
            api_version=self.api_version,
            model_version=self.model_version,
            timeout=self.timeout,
        )


def client_from_config(cfg: Mapping[str, Any]) -> AzureVisionClient:
    """Build a client from the ``vision`` config section."""
    vision = cfg.get("vision") or {}
    return AzureVisionClient(
        endpoint=str(vision.get("endpoint") or ""),
        key=str(vision.get("key") or ""),
        features=vision.get("features") or DEFAULT_FEATURES,
        api_version=str(vision.get("api_version", "2023-10-01")),
        model_version=str(vision.get("model_version", "latest")),
        timeout=float(vision.get("timeout", 30.0)),
    )


__all__ = ["AzureVisionClient", "VisionServiceError", "client_from_config"]
