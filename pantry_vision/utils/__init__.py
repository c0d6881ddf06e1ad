"""Shared utilities: configuration, label normalization and filtering."""

from .config import RefinementConfig, ScoringConfig, load_config
from .ingredient_filter import IngredientFilter, is_generic
from .labels import normalize, normalize_words

__all__ = [
    "IngredientFilter",
    "RefinementConfig",
    "ScoringConfig",
    "is_generic",
    "load_config",
    "normalize",
    "normalize_words",
]
