"""Candidate scoring: weighted evidence from tags, captions and object tags."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from .core.types import (
    SOURCE_CAPTION,
    SOURCE_OBJECT,
    SOURCE_TAG,
    BoundingBox,
    Candidate,
    RawSignal,
)
from .utils.config import ScoringConfig
from .utils.ingredient_filter import IngredientFilter
from .utils.labels import MIN_TOKEN_LENGTH, normalize, normalize_words

logger = logging.getLogger(__name__)


@dataclass
class TokenEvidence:
    """Everything one pass learned about a single token."""

    tag_confidence: float = 0.0
    caption_confidences: List[float] = field(default_factory=list)
    object_confidence: float = 0.0
    boxes: List[BoundingBox] = field(default_factory=list)
    sources: Set[str] = field(default_factory=set)


def _safe_tokens(fn: Callable[[str], Any], value: str) -> List[str]:
    """Run a normalizer, warning and returning nothing if it fails."""
    try:
        result = fn(value)
    except Exception as exc:
        warnings.warn(f"Skipping label {value!r}: normalization failed ({exc})")
        return []
    if isinstance(result, str):
        return [result] if result else []
    return [t for t in result if t]


def sort_key(candidate: Candidate) -> Tuple[float, int, float, str]:
    """Score desc, then group count desc, then tag confidence desc, then token."""
    return (-candidate.score, -candidate.group_count, -candidate.tag_confidence, candidate.token)


def rank_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    return sorted(candidates, key=sort_key)


class CandidateScorer:
    """Turn a ``RawSignal`` into ranked, disqualification-checked candidates."""

    def __init__(
        self,
        config: ScoringConfig | None = None,
        ingredient_filter: IngredientFilter | None = None,
    ) -> None:
        self.config = config or ScoringConfig()
        self.ingredient_filter = ingredient_filter or IngredientFilter()

    def extract_features(self, signal: RawSignal) -> Dict[str, TokenEvidence]:
        """Collect per-token evidence from every feature group.

        Tag and object-tag inputs below ``confidence_min`` are untrusted and
        leave no trace. Each caption counts at most once per token.
        """
        cfg = self.config
        evidence: Dict[str, TokenEvidence] = {}

        for tag in signal.tags:
            if tag.confidence < cfg.confidence_min:
                continue
            for token in _safe_tokens(normalize, tag.name):
                entry = evidence.setdefault(token, TokenEvidence())
                entry.tag_confidence = max(entry.tag_confidence, tag.confidence)
                entry.sources.add(SOURCE_TAG)

        for caption in signal.captions:
            for token in set(_safe_tokens(normalize_words, caption.text)):
                entry = evidence.setdefault(token, TokenEvidence())
                entry.caption_confidences.append(caption.confidence)
                entry.sources.add(SOURCE_CAPTION)

        for obj in signal.objects:
            for tag in obj.tags:
                if tag.confidence < cfg.confidence_min:
                    continue
                for token in _safe_tokens(normalize, tag.name):
                    entry = evidence.setdefault(token, TokenEvidence())
                    entry.object_confidence = max(entry.object_confidence, tag.confidence)
                    entry.sources.add(SOURCE_OBJECT)
                    if obj.bounding_box is not None:
                        entry.boxes.append(obj.bounding_box)

        return evidence

    def weigh(self, entry: TokenEvidence) -> float:
        cfg = self.config
        total = entry.tag_confidence * cfg.tag_weight
        if entry.caption_confidences:
            extra_mentions = len(entry.caption_confidences) - 1
            total += max(entry.caption_confidences) * cfg.caption_weight
            total += min(cfg.caption_frequency_cap, extra_mentions * cfg.caption_frequency_bonus)
        total += entry.object_confidence * cfg.object_weight
        total += cfg.group_bonus * max(0, len(entry.sources) - 1)
        return total

    def score(self, token: str, signal: RawSignal) -> float:
        """Weighted score of ``token`` in ``signal`` (0.0 when absent)."""
        entry = self.extract_features(signal).get(token)
        return self.weigh(entry) if entry is not None else 0.0

    def disqualification(self, token: str, sources: Iterable[str]) -> Optional[str]:
        """Reason ``token`` can never be a candidate, or ``None``."""
        if len(token) < MIN_TOKEN_LENGTH:
            return "too short"
        if self.ingredient_filter.is_generic(token):
            return "generic"
        if set(sources) <= {SOURCE_CAPTION}:
            return "caption only"
        return None

    def candidates(self, signal: RawSignal) -> List[Candidate]:
        """Score every surviving token and return them in rank order."""
        ranked: List[Candidate] = []
        for token, entry in self.extract_features(signal).items():
            reason = self.disqualification(token, entry.sources)
            if reason is not None:
                logger.debug("Disqualified %r (%s)", token, reason)
                continue
            total = self.weigh(entry)
            if total < self.config.score_min:
                logger.debug("Dropped %r: score %.3f below %.2f", token, total, self.config.score_min)
                continue
            ranked.append(
                Candidate(
                    token=token,
                    score=total,
                    sources=frozenset(entry.sources),
                    bounding_boxes=tuple(entry.boxes),
                    tag_confidence=entry.tag_confidence,
                )
            )
        ranked = rank_candidates(ranked)
        if ranked:
            logger.debug(
                "Candidates: %s",
                ", ".join(f"{c.token}={c.score:.3f}" for c in ranked[:5]),
            )
        return ranked


def score(token: str, signal: Any, config: ScoringConfig | None = None) -> float:
    """Module-level convenience around :meth:`CandidateScorer.score`."""
    return CandidateScorer(config).score(token, RawSignal.from_response(signal))


__all__ = [
    "CandidateScorer",
    "TokenEvidence",
    "rank_candidates",
    "score",
    "sort_key",
]
