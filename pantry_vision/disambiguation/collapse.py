"""Hierarchy and sibling collapse over ranked candidates."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..core.types import Candidate
from .categories import PARENTS, category_of

logger = logging.getLogger(__name__)


def collapse_hierarchy(candidates: Sequence[Candidate]) -> List[Candidate]:
    """Drop parent words ("fish", "seafood", ...) once a specific child survives.

    Boxes play no part here: "octopus" removes "fish" even when the two
    were seen in different regions.
    """
    present = {category_of(c.token) for c in candidates} - {None}
    if not present:
        return list(candidates)
    kept: List[Candidate] = []
    for candidate in candidates:
        children = PARENTS.get(candidate.token)
        if children and children & present:
            logger.debug("Removed parent %r (specific protein present)", candidate.token)
            continue
        kept.append(candidate)
    return kept


def _separated(candidate: Candidate, kept: Sequence[Candidate]) -> bool:
    if not candidate.bounding_boxes:
        return False
    for other in kept:
        if not other.bounding_boxes:
            return False
        for box in candidate.bounding_boxes:
            if any(box.intersects(o) for o in other.bounding_boxes):
                return False
    return True


def collapse_siblings(candidates: Sequence[Candidate]) -> List[Candidate]:
    """Keep one member per category unless members sit in disjoint regions.

    ``candidates`` must already be in rank order. The first member of each
    category always survives; later members survive only when every one of
    their boxes is disjoint from every box of the members kept so far.
    """
    kept_by_category: Dict[str, List[Candidate]] = {}
    result: List[Candidate] = []
    for candidate in candidates:
        category = category_of(candidate.token)
        if category is None:
            result.append(candidate)
            continue
        kept = kept_by_category.setdefault(category, [])
        if kept and not _separated(candidate, kept):
            logger.debug("Collapsed %r into %r (%s)", candidate.token, kept[0].token, category)
            continue
        kept.append(candidate)
        result.append(candidate)
    return result


def collapse(candidates: Sequence[Candidate]) -> List[Candidate]:
    """Hierarchy collapse followed by sibling collapse."""
    return collapse_siblings(collapse_hierarchy(candidates))


__all__ = ["collapse", "collapse_hierarchy", "collapse_siblings"]
