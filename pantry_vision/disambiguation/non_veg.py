"""Meat-signal resolver: recover a specific protein (or plain "meat") from a scene."""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Sequence, Set

from ..core.types import SOURCE_CAPTION, SOURCE_TAG, Caption, Tag
from ..utils.ingredient_filter import IngredientFilter
from ..utils.labels import normalize_words
from .categories import MEAT_SIGNAL_WORDS

logger = logging.getLogger(__name__)

MEAT = "meat"
FROM_CANDIDATE = 1.0
FROM_TAG = 0.8
FROM_CAPTION = 0.6
MIN_SUPPORT = 0.8

_DEFAULT_FILTER = IngredientFilter()


class MeatResolution(NamedTuple):
    token: str
    support: float
    sources: FrozenSet[str]

    @property
    def is_generic(self) -> bool:
        return self.token == MEAT


def _words(texts: Iterable[str]) -> List[str]:
    return [w for text in texts for w in normalize_words(text)]


def resolve_meat_signal(
    candidate_names: Sequence[str],
    tags: Sequence[Tag],
    captions: Sequence[Caption],
    ingredient_filter: IngredientFilter | None = None,
) -> Optional[MeatResolution]:
    """Resolve a meat/seafood scene to one token, or ``None``.

    Only runs when some tag or caption word is an animal-protein signal.
    Non-generic words earn 1.0 for appearing in the candidates, 0.8 in tags
    and 0.6 in captions; the best word with at least 0.8 wins (ties go to the
    lexically smaller word). Without one, scenes with an explicit meat word,
    "animal fat" alongside "food", or a "raw meat" caption resolve to the
    literal ``"meat"`` with zero support.
    """
    flt = ingredient_filter or _DEFAULT_FILTER
    tag_names = [t.name for t in tags]
    caption_texts = [c.text for c in captions]
    tag_words = set(_words(tag_names))
    caption_words = set(_words(caption_texts))
    all_words = tag_words | caption_words

    if not all_words & MEAT_SIGNAL_WORDS:
        return None

    support: Dict[str, float] = {}
    origins: Dict[str, Set[str]] = {}
    for weight, words, origin in (
        (FROM_CANDIDATE, set(_words(candidate_names)), None),
        (FROM_TAG, tag_words, SOURCE_TAG),
        (FROM_CAPTION, caption_words, SOURCE_CAPTION),
    ):
        for word in words:
            if flt.is_generic(word):
                continue
            support[word] = support.get(word, 0.0) + weight
            if origin is not None:
                origins.setdefault(word, set()).add(origin)

    specifics = sorted(
        ((word, total) for word, total in support.items() if total >= MIN_SUPPORT),
        key=lambda item: (-item[1], item[0]),
    )
    if specifics:
        token, total = specifics[0]
        logger.debug("Meat resolver picked %r (support %.1f)", token, total)
        return MeatResolution(token, total, frozenset(origins.get(token, ())))

    has_animal_fat = any("animal fat" in text.lower() for text in tag_names + caption_texts)
    has_raw_meat = any("raw meat" in text.lower() for text in caption_texts)
    if MEAT in all_words or has_raw_meat or ("food" in all_words and has_animal_fat):
        logger.debug("Meat resolver fell back to generic %r", MEAT)
        meat_origins = {SOURCE_TAG} if MEAT in tag_words else set()
        if MEAT in caption_words or has_raw_meat:
            meat_origins.add(SOURCE_CAPTION)
        return MeatResolution(MEAT, 0.0, frozenset(meat_origins))
    return None


def resolve_meat_fallback(
    candidate_names: Sequence[str],
    tags: Sequence[Tag],
    captions: Sequence[Caption],
    ingredient_filter: IngredientFilter | None = None,
) -> Optional[str]:
    """Token-only form of :func:`resolve_meat_signal`."""
    resolved = resolve_meat_signal(candidate_names, tags, captions, ingredient_filter)
    return resolved.token if resolved else None


__all__ = ["MEAT", "MeatResolution", "resolve_meat_fallback", "resolve_meat_signal"]
