"""Crop refinement: re-analyse distinct object regions and merge what they show."""

from __future__ import annotations

import asyncio
import logging
import warnings
from typing import Awaitable, Callable, Dict, Iterable, List, Sequence, Tuple

from ..core.types import SOURCE_OBJECT, BoundingBox, Candidate, RawSignal
from ..disambiguation.collapse import collapse
from ..scoring import rank_candidates
from ..utils.config import RefinementConfig
from ..utils.ingredient_filter import IngredientFilter
from ..utils.labels import normalize

logger = logging.getLogger(__name__)

CropFn = Callable[[str, BoundingBox], Awaitable[str]]
AnalyzeFn = Callable[[str], Awaitable[RawSignal]]
SinglePass = Callable[[RawSignal], List[Candidate]]


def _object_confidence(obj) -> float:
    if obj.confidence is not None:
        return obj.confidence
    label = obj.label
    return label.confidence if label is not None else 0.0


def keep_distinct(
    boxes: Iterable[Tuple[BoundingBox, float]], iou_limit: float = 0.2, max_crops: int = 4
) -> List[BoundingBox]:
    """Greedy suppression: highest confidence first, drop boxes overlapping a kept one."""
    kept: List[BoundingBox] = []
    for box, _ in sorted(boxes, key=lambda item: (-item[1], item[0])):
        if len(kept) >= max_crops:
            break
        if all(box.iou(other) < iou_limit for other in kept):
            kept.append(box)
    return kept


def merge_candidates(groups: Iterable[Iterable[Candidate]]) -> List[Candidate]:
    """Merge candidate lists by token, then re-rank and re-collapse."""
    merged: Dict[str, Candidate] = {}
    for group in groups:
        for candidate in group:
            existing = merged.get(candidate.token)
            merged[candidate.token] = existing.merge(candidate) if existing else candidate
    return collapse(rank_candidates(merged.values()))


class RefinementOrchestrator:
    """Decide whether a signal needs crops, fan them out and fold results back in."""

    def __init__(
        self,
        config: RefinementConfig | None = None,
        ingredient_filter: IngredientFilter | None = None,
    ) -> None:
        self.config = config or RefinementConfig()
        self.ingredient_filter = ingredient_filter or IngredientFilter()

    def should_refine(self, signal: RawSignal) -> bool:
        """More than one object, or an object whose own label is only a category."""
        if len(signal.objects) > 1:
            return True
        for obj in signal.objects:
            label = obj.label
            if label is not None and self.ingredient_filter.is_generic(normalize(label.name)):
                return True
        return False

    def select_boxes(self, signal: RawSignal) -> List[BoundingBox]:
        boxes = [
            (obj.bounding_box, _object_confidence(obj))
            for obj in signal.objects
            if obj.bounding_box is not None
        ]
        return keep_distinct(boxes, self.config.iou_limit, self.config.max_crops)

    async def _refine_one(
        self,
        uri: str,
        box: BoundingBox,
        crop: CropFn,
        analyze: AnalyzeFn,
        single_pass: SinglePass,
    ) -> List[Candidate]:
        crop_uri = await crop(uri, box)
        crop_signal = RawSignal.from_response(await analyze(crop_uri))
        found = single_pass(crop_signal)
        logger.debug("Crop %s of %s -> %s", box, uri, [c.token for c in found])
        return [
            Candidate(
                token=c.token,
                score=c.score,
                sources=c.sources | {SOURCE_OBJECT},
                bounding_boxes=(box,),
                tag_confidence=c.tag_confidence,
            )
            for c in found
        ]

    async def refine(
        self,
        uri: str,
        signal: RawSignal,
        candidates: Sequence[Candidate],
        crop: CropFn,
        analyze: AnalyzeFn,
        single_pass: SinglePass,
    ) -> List[Candidate]:
        """Run one level of crop refinement and return the merged candidates.

        Crops run concurrently. A crop whose cropping or analysis raises is
        reported with a warning and left out; the others still merge.
        """
        if not self.config.enabled or not self.should_refine(signal):
            return list(candidates)

        boxes = self.select_boxes(signal)
        if not boxes:
            return list(candidates)
        logger.info("Refining %s with %d crop(s)", uri, len(boxes))

        results = await asyncio.gather(
            *(self._refine_one(uri, box, crop, analyze, single_pass) for box in boxes),
            return_exceptions=True,
        )
        groups: List[Iterable[Candidate]] = [candidates]
        for box, result in zip(boxes, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                warnings.warn(f"Crop {box} of {uri} failed and was skipped: {result}")
                continue
            groups.append(result)
        return merge_candidates(groups)


__all__ = [
    "RefinementOrchestrator",
    "keep_distinct",
    "merge_candidates",
]
