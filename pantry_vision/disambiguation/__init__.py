"""Category disambiguation and the meat-signal fallback."""

from .categories import CATEGORY_MEMBERS, PARENTS, category_of
from .collapse import collapse, collapse_hierarchy, collapse_siblings
from .non_veg import MeatResolution, resolve_meat_fallback, resolve_meat_signal

__all__ = [
    "CATEGORY_MEMBERS",
    "MeatResolution",
    "PARENTS",
    "category_of",
    "collapse",
    "collapse_hierarchy",
    "collapse_siblings",
    "resolve_meat_fallback",
    "resolve_meat_signal",
]
