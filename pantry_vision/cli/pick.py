"""Single-pick command over saved provider responses."""
from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import List, Optional

from pantry_vision.core.pipeline import IngredientPipeline
from pantry_vision.io.results_writer import ResultsWriter


def load_response(path: Path) -> Optional[dict]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (OSError, ValueError) as exc:
        warnings.warn(f"Failed to read provider response {path}: {exc}")
        return None


def run_pick_best(paths: List[Path], cfg: dict) -> int:
    """Print the best single ingredient of each saved response file."""
    pipeline = IngredientPipeline.from_config(cfg)
    writer = ResultsWriter(cfg.get("io", {}).get("results_dir", "results"))
    unreadable = 0
    for path in paths:
        payload = load_response(path)
        if payload is None:
            unreadable += 1
            continue
        best = pipeline.pick_best_one(payload)
        print(f"{path.name}: {best or '-'}")
        writer.write_best_one_csv(path, best)
    return unreadable
