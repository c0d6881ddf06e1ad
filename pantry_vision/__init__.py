"""Ingredient identification from noisy vision-provider signals."""

from .core.pipeline import (
    IngredientPipeline,
    detect_ingredients,
    extract_candidates,
    pick_best_one,
)
from .core.types import BoundingBox, Candidate, RawSignal
from .utils import load_config
from .vision import AzureVisionClient, VisionServiceError

__all__ = [
    "AzureVisionClient",
    "BoundingBox",
    "Candidate",
    "IngredientPipeline",
    "RawSignal",
    "VisionServiceError",
    "detect_ingredients",
    "extract_candidates",
    "load_config",
    "pick_best_one",
]
