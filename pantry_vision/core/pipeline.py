"""High-level orchestration: signal -> scored, collapsed, refined ingredients."""

from __future__ import annotations

import logging
import os
import warnings
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Tuple

from ..disambiguation.collapse import collapse
from ..disambiguation.non_veg import MeatResolution, resolve_meat_signal
from ..refinement.crops import ImageCropper
from ..refinement.orchestrator import RefinementOrchestrator
from ..scoring import CandidateScorer
from ..utils.config import (
    ENDPOINT_ENV,
    KEY_ENV,
    RefinementConfig,
    ScoringConfig,
    extra_generic_terms,
)
from ..utils.ingredient_filter import IngredientFilter
from ..utils.labels import normalize
from ..vision.azure_client import AzureVisionClient, client_from_config
from .types import BoundingBox, Candidate, RawSignal

logger = logging.getLogger(__name__)

AnalyzeFn = Callable[[str], Awaitable[RawSignal]]
CropFn = Callable[[str, BoundingBox], Awaitable[str]]


class IngredientPipeline:
    """Orchestrator wiring scorer -> disambiguation -> refinement -> selection.

    The pipeline holds configuration and collaborators only; every call is
    independent. ``analyze`` and ``crop`` are async callables; when they are
    not supplied, ``detect_ingredients`` builds an Azure client from the
    ``vision`` config section and a Pillow cropper from the refinement
    settings on first use.
    """

    def __init__(
        self,
        scoring: ScoringConfig | None = None,
        refinement: RefinementConfig | None = None,
        ingredient_filter: IngredientFilter | None = None,
        analyze: AnalyzeFn | None = None,
        crop: CropFn | None = None,
        crop_analyze: AnalyzeFn | None = None,
        vision_config: Mapping[str, Any] | None = None,
    ) -> None:
        self.scoring = scoring or ScoringConfig()
        self.refinement = refinement or RefinementConfig()
        self.ingredient_filter = ingredient_filter or IngredientFilter()
        self.scorer = CandidateScorer(self.scoring, self.ingredient_filter)
        self.orchestrator = RefinementOrchestrator(self.refinement, self.ingredient_filter)
        self.analyze = analyze
        self.crop = crop
        self.crop_analyze = crop_analyze
        self.vision_config = dict(vision_config or {})

    @classmethod
    def from_config(
        cls,
        cfg: Mapping[str, Any],
        analyze: AnalyzeFn | None = None,
        crop: CropFn | None = None,
        crop_analyze: AnalyzeFn | None = None,
    ) -> "IngredientPipeline":
        return cls(
            scoring=ScoringConfig.from_config(cfg),
            refinement=RefinementConfig.from_config(cfg),
            ingredient_filter=IngredientFilter(extra_generic_terms(cfg)),
            analyze=analyze,
            crop=crop,
            crop_analyze=crop_analyze,
            vision_config=cfg.get("vision") or {},
        )

    # -----------------------------
    # Non-refining pass
    # -----------------------------
    def extract_candidates(self, raw: Any) -> List[Candidate]:
        """Score, disqualify and collapse one signal, best first."""
        signal = RawSignal.from_response(raw)
        return collapse(self.scorer.candidates(signal))

    def resolve_meat(self, signal: RawSignal, candidates: List[Candidate]) -> Optional[MeatResolution]:
        return resolve_meat_signal(
            [c.token for c in candidates],
            signal.tags,
            signal.captions,
            self.ingredient_filter,
        )

    def _fallback_candidate(self, signal: RawSignal, resolution: MeatResolution) -> Candidate:
        score = self.scoring.meat_fallback_score if resolution.is_generic else resolution.support
        boxes = [
            obj.bounding_box
            for obj in signal.objects
            if obj.bounding_box is not None
            and any(normalize(tag.name) == resolution.token for tag in obj.tags)
        ]
        return Candidate(
            token=resolution.token,
            score=score,
            sources=resolution.sources,
            bounding_boxes=tuple(boxes),
        )

    def select(
        self,
        signal: RawSignal,
        candidates: List[Candidate],
        allow_generic_meat: bool = True,
    ) -> List[Candidate]:
        """Keep candidates when the top one is confident, else try the meat fallback."""
        if candidates and candidates[0].score >= self.scoring.core_threshold:
            return list(candidates)
        resolution = self.resolve_meat(signal, candidates)
        if resolution is None or (resolution.is_generic and not allow_generic_meat):
            if candidates:
                logger.debug(
                    "Top candidate %r below core threshold (%.3f)",
                    candidates[0].token, candidates[0].score,
                )
            return []
        logger.info("Meat fallback resolved to %r", resolution.token)
        return [self._fallback_candidate(signal, resolution)]

    def _crop_pass(self, signal: RawSignal) -> List[Candidate]:
        return self.select(signal, self.extract_candidates(signal), allow_generic_meat=False)

    # -----------------------------
    # Public operations
    # -----------------------------
    def pick_best_one(self, raw: Any) -> Optional[str]:
        """Return the single best ingredient token for one response, or ``None``."""
        try:
            signal = RawSignal.from_response(raw)
            candidates = self.extract_candidates(signal)
            if candidates and candidates[0].score >= self.scoring.core_threshold:
                logger.debug("Best one: %r (%.3f)", candidates[0].token, candidates[0].score)
                return candidates[0].token
            resolution = self.resolve_meat(signal, candidates)
        except Exception as exc:
            warnings.warn(f"Could not pick an ingredient from response: {exc}")
            return None
        if resolution is None or self.ingredient_filter.is_generic(resolution.token):
            return None
        return resolution.token

    def _vision_client(self) -> AzureVisionClient:
        vision = dict(self.vision_config)
        vision["endpoint"] = vision.get("endpoint") or os.environ.get(ENDPOINT_ENV)
        vision["key"] = vision.get("key") or os.environ.get(KEY_ENV)
        return client_from_config({"vision": vision})

    def _analyzers(self) -> Tuple[AnalyzeFn, AnalyzeFn]:
        """Resolve (analyze, crop_analyze) for one run; nothing is cached."""
        analyze, crop_analyze = self.analyze, self.crop_analyze
        if analyze is None:
            client = self._vision_client()
            analyze = client.analyze
            if crop_analyze is None:
                crop_features = self.vision_config.get("crop_features")
                crop_client = client.with_features(crop_features) if crop_features else client
                crop_analyze = crop_client.analyze
        return analyze, crop_analyze or analyze

    async def detect_ingredients(self, image_uri: str) -> List[Candidate]:
        """Analyse an image and return its ingredients in rank order.

        ``VisionServiceError`` from the top-level analysis propagates; crop
        failures only drop that crop. Crop files written by the default
        cropper are removed before this returns.
        """
        analyze, crop_analyze = self._analyzers()
        if self.crop is not None:
            return await self._detect(image_uri, analyze, self.crop, crop_analyze)
        with ImageCropper.from_config(self.refinement) as cropper:
            return await self._detect(image_uri, analyze, cropper.crop, crop_analyze)

    async def _detect(
        self, image_uri: str, analyze: AnalyzeFn, crop: CropFn, crop_analyze: AnalyzeFn
    ) -> List[Candidate]:
        signal = RawSignal.from_response(await analyze(image_uri))
        candidates = self.extract_candidates(signal)
        if self.refinement.enabled:
            candidates = await self.orchestrator.refine(
                image_uri,
                signal,
                candidates,
                crop=crop,
                analyze=crop_analyze,
                single_pass=self._crop_pass,
            )
        selected = self.select(signal, candidates)
        logger.info(
            "%s: %s",
            image_uri,
            ", ".join(f"{c.token} ({c.score:.2f})" for c in selected) or "no ingredients",
        )
        return selected


def default_pipeline() -> IngredientPipeline:
    """A pipeline with default settings, built fresh on each call."""
    return IngredientPipeline()


def pick_best_one(raw: Any) -> Optional[str]:
    return default_pipeline().pick_best_one(raw)


def extract_candidates(raw: Any) -> List[Candidate]:
    return default_pipeline().extract_candidates(raw)


async def detect_ingredients(
    image_uri: str,
    analyze: AnalyzeFn | None = None,
    crop: CropFn | None = None,
) -> List[Candidate]:
    """Detect ingredients in one image with default settings.

    Without collaborators, credentials come from ``AZURE_VISION_ENDPOINT`` /
    ``AZURE_VISION_KEY``.
    """
    pipeline = IngredientPipeline(analyze=analyze, crop=crop)
    return await pipeline.detect_ingredients(image_uri)


__all__ = [
    "IngredientPipeline",
    "default_pipeline",
    "detect_ingredients",
    "extract_candidates",
    "pick_best_one",
]
