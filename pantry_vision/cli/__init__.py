"""CLI commands for pantry vision."""

from .detect import format_result_row, iter_image_paths, run_detection
from .pick import load_response, run_pick_best

__all__ = [
    "format_result_row",
    "iter_image_paths",
    "load_response",
    "run_detection",
    "run_pick_best",
]
