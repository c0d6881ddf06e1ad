"""CLI entry point for identifying pantry ingredients in food photos.

This is a thin main module that delegates to the command modules in
``pantry_vision.cli``.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pantry_vision.cli import run_detection, run_pick_best
from pantry_vision.utils.config import load_config


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Identify grocery ingredients in food photos."
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default="data",
        help="Directory containing images to analyze",
    )
    parser.add_argument(
        "--config", dest="config", default=None,
        help="Path to JSON/YAML config file"
    )
    parser.add_argument(
        "--pick-best",
        nargs="+",
        default=None,
        metavar="FILE",
        help="Pick the single best ingredient from saved provider JSON responses",
    )
    parser.add_argument(
        "--no-refine", action="store_true",
        help="Disable crop refinement of multi-object scenes"
    )
    parser.add_argument(
        "--results-dir",
        default=None,
        help="Where to write JSON/CSV outputs (overrides config)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log pipeline decisions"
    )
    return parser.parse_args(argv)


def apply_overrides(cfg: dict, args: argparse.Namespace) -> dict:
    """Apply command line overrides to configuration."""
    cfg = json.loads(json.dumps(cfg))  # deep copy

    if args.no_refine:
        cfg.setdefault("refinement", {})["enabled"] = False
    if args.results_dir is not None:
        cfg.setdefault("io", {})["results_dir"] = str(args.results_dir)

    return cfg


def main(argv: list[str]) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args.config)
    cfg = apply_overrides(cfg, args)

    # Single-pick mode
    if args.pick_best:
        return 1 if run_pick_best([Path(p) for p in args.pick_best], cfg) else 0

    # Detection mode
    target = Path(args.directory)
    if not target.exists():
        print(f"Directory not found: {target}")
        return 1

    return 1 if run_detection(target, cfg) else 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
