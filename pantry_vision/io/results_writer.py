"""Utility for writing detection outputs to disk.

This module centralizes all filesystem operations related to saving
ingredient results so `main.py` and the CLI commands stay focused on
orchestration.
"""

from __future__ import annotations

import csv
import json
import warnings
from pathlib import Path
from typing import List, Optional


class ResultsWriter:
    """Writes per-image JSON payloads and summary CSVs into one folder.

    Callers provide ``Candidate.to_dict()`` payloads; the writer owns the
    file layout:
      - ``<stem>.json`` per image
      - ``top_picks.csv`` with one row per ingredient per image
      - ``best_one.csv`` with one row per saved provider response
    """

    TOP_PICKS_FIELDS = ["image", "rank", "ingredient", "score", "sources", "box_x", "box_y", "box_w", "box_h"]
    BEST_ONE_FIELDS = ["response", "ingredient"]

    def __init__(self, results_dir: Path | str) -> None:
        self.results_dir = Path(results_dir)
        self.results_dir.mkdir(parents=True, exist_ok=True)

    def write_results(self, image_path: Path, ingredients: List[dict]) -> Optional[Path]:
        """Write a per-image JSON payload with the ranked ingredients."""
        payload = {
            "image": str(image_path),
            "ingredients": ingredients,
        }
        output_path = self.results_dir / f"{Path(image_path).stem}.json"
        try:
            with output_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
        except OSError as exc:
            warnings.warn(f"Failed to write results JSON for {image_path}: {exc}")
            return None
        return output_path

    def _append_rows(self, filename: str, fieldnames: List[str], rows: List[dict]) -> None:
        csv_path = self.results_dir / filename
        write_headers = not csv_path.exists()
        try:
            with csv_path.open("a", newline="", encoding="utf-8") as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
                if write_headers:
                    writer.writeheader()
                writer.writerows(rows)
        except OSError as exc:
            warnings.warn(f"Failed to write {filename}: {exc}")

    def write_top_picks_csv(self, image_path: Path, ingredients: List[dict]) -> None:
        """Append one row per detected ingredient of an image."""
        rows = []
        for rank, item in enumerate(ingredients, start=1):
            box = item.get("boundingBox") or {}
            rows.append(
                {
                    "image": Path(image_path).name,
                    "rank": rank,
                    "ingredient": item.get("name", ""),
                    "score": item.get("score", ""),
                    "sources": "|".join(item.get("sources", [])),
                    "box_x": box.get("x", ""),
                    "box_y": box.get("y", ""),
                    "box_w": box.get("w", ""),
                    "box_h": box.get("h", ""),
                }
            )
        if not rows:
            rows.append({"image": Path(image_path).name, "rank": "", "ingredient": ""})
        self._append_rows("top_picks.csv", self.TOP_PICKS_FIELDS, rows)

    def write_best_one_csv(self, response_path: Path, ingredient: Optional[str]) -> None:
        """Append the single-pick result for a saved provider response."""
        self._append_rows(
            "best_one.csv",
            self.BEST_ONE_FIELDS,
            [{"response": Path(response_path).name, "ingredient": ingredient or ""}],
        )


__all__ = ["ResultsWriter"]
