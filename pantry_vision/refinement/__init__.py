"""Crop-based refinement of multi-object scenes."""

from .crops import ImageCropper, crop_to_file
from .orchestrator import RefinementOrchestrator, keep_distinct, merge_candidates

__all__ = [
    "ImageCropper",
    "RefinementOrchestrator",
    "crop_to_file",
    "keep_distinct",
    "merge_candidates",
]
