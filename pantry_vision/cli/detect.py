"""Detection command: run the full pipeline over a directory of images."""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable, List, Set

from pantry_vision.core.pipeline import IngredientPipeline
from pantry_vision.io.results_writer import ResultsWriter
from pantry_vision.vision.azure_client import VisionServiceError


def iter_image_paths(directory: Path, extensions: Set[str]) -> Iterable[Path]:
    """Iterate over image files in a directory."""
    for path in sorted(directory.rglob("*")):
        if path.is_file() and path.suffix.lower() in extensions:
            yield path


def format_result_row(index: int, result: dict) -> str:
    """Format a single ingredient for console output."""
    name = result["name"]
    score = float(result["score"])
    sources = ",".join(result.get("sources", []))
    return f"{index:>2} | {name:<20} | {score:>6.2f} | {sources}"


async def _detect_all(
    paths: List[Path], pipeline: IngredientPipeline, writer: ResultsWriter
) -> int:
    failures = 0
    for image_path in paths:
        print(f"\n{image_path}")
        try:
            ingredients = await pipeline.detect_ingredients(str(image_path))
        except VisionServiceError as exc:
            print(f"  vision service error: {exc}")
            failures += 1
            continue
        payload = [item.to_dict() for item in ingredients]
        if not payload:
            print("  no ingredients found")
        for index, item in enumerate(payload, start=1):
            print(format_result_row(index, item))
        writer.write_results(image_path, payload)
        writer.write_top_picks_csv(image_path, payload)
    return failures


def run_detection(target: Path, cfg: dict, pipeline: IngredientPipeline | None = None) -> int:
    """Detect ingredients for every image under ``target``; returns the failure count."""
    io_cfg = cfg.get("io", {})
    extensions = {str(ext).lower() for ext in io_cfg.get("image_extensions", [])}
    paths = list(iter_image_paths(target, extensions))
    if not paths:
        print(f"No images found in {target}")
        return 0

    pipeline = pipeline or IngredientPipeline.from_config(cfg)
    writer = ResultsWriter(io_cfg.get("results_dir", "results"))
    failures = asyncio.run(_detect_all(paths, pipeline, writer))
    print(f"\nProcessed {len(paths)} image(s), {failures} failed. Results in {writer.results_dir}")
    return failures
