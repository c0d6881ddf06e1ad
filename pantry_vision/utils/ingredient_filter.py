"""Generic/stopword filtering so only actual ingredients are reported."""

from __future__ import annotations

from typing import Iterable, List

from .labels import MIN_TOKEN_LENGTH

# Umbrella categories: never an ingredient on their own.
UMBRELLA_TERMS = frozenset(
    {
        "food", "produce", "fruit", "vegetable", "meat", "seafood", "dairy",
        "drink", "animal", "crustacean", "invertebrate", "mollusk", "mollusc",
        "shellfish", "poultry", "beverage", "ingredient", "cuisine", "dish",
        "meal", "snack", "superfood", "staple", "plant", "recipe",
    }
)

# Scene noise reported by the vision provider alongside the food itself.
SCENE_NOISE_TERMS = frozenset(
    {
        "close", "closeup", "local", "natural", "raw", "diet", "nutrition",
        "indoor", "outdoor", "wood", "wooden", "surface", "flesh", "fat", "skin",
        "table", "plate", "bowl", "tray", "background", "healthy", "still",
        "life", "photography", "image", "photo", "picture", "view", "top",
    }
)

GENERIC_TERMS = UMBRELLA_TERMS | SCENE_NOISE_TERMS


def is_generic(token: str) -> bool:
    """True when ``token`` is an umbrella category or scene-noise word."""
    return token in GENERIC_TERMS


class IngredientFilter:
    """Filter out non-ingredient tokens from candidate lists."""

    def __init__(self, extra_terms: Iterable[str] | None = None):
        extra = frozenset(t.strip().lower() for t in (extra_terms or ()) if t and t.strip())
        self.generic_terms = GENERIC_TERMS | extra

    def is_generic(self, token: str) -> bool:
        return token in self.generic_terms

    def is_valid_ingredient(self, token: str) -> bool:
        """Check if a normalized token can stand as an ingredient."""
        if not token or len(token) < MIN_TOKEN_LENGTH:
            return False
        return not self.is_generic(token)

    def filter_tokens(self, tokens: Iterable[str]) -> List[str]:
        return [token for token in tokens if self.is_valid_ingredient(token)]


__all__ = ["GENERIC_TERMS", "IngredientFilter", "is_generic"]
