"""Configuration loader for the pantry-vision project.

- JSON config is read with the standard library, YAML through PyYAML
- Defaults match the thresholds the scorer and refinement stage were tuned with
- Vision credentials may come from the environment instead of the file
"""

from __future__ import annotations

import json
import os
import warnings
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

ENDPOINT_ENV = "AZURE_VISION_ENDPOINT"
KEY_ENV = "AZURE_VISION_KEY"

DEFAULTS: Dict[str, Any] = {
    "vision": {
        "endpoint": None,
        "key": None,
        "api_version": "2023-10-01",
        "features": ["tags", "objects", "denseCaptions"],
        "crop_features": ["tags", "objects"],
        "model_version": "latest",
        "timeout": 30.0,
    },
    "scoring": {
        "tag_weight": 1.0,
        "caption_weight": 0.6,
        "object_weight": 0.8,
        "caption_frequency_bonus": 0.05,
        "caption_frequency_cap": 0.15,
        "group_bonus": 0.1,
        "confidence_min": 0.65,
        "score_min": 0.52,
        "core_threshold": 0.55,
        "meat_fallback_score": 0.88,
    },
    "refinement": {
        "enabled": True,
        "max_crops": 4,
        "iou_limit": 0.2,
        "padding_ratio": 0.05,
        "max_side": 512,
        "jpeg_quality": 70,
    },
    "filter": {
        "extra_generic_terms": [],
    },
    "io": {
        "image_extensions": [".jpg", ".jpeg", ".png", ".bmp", ".webp"],
        "results_dir": "results",
    },
}


def _deep_update(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(base.get(k), dict):
            base[k] = _deep_update(base[k], v)
        else:
            base[k] = v
    return base


def _load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _apply_env(cfg: Dict[str, Any]) -> None:
    vision = cfg.setdefault("vision", {})
    endpoint = os.environ.get(ENDPOINT_ENV)
    key = os.environ.get(KEY_ENV)
    if endpoint:
        vision["endpoint"] = endpoint
    if key:
        vision["key"] = key


def load_config(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Load configuration from a file (JSON or YAML) and merge with defaults.

    Lookup order:
    1) Explicit path if provided
    2) ./config.json if present
    3) ./config.yaml or ./config.yml if present
    4) Defaults

    ``AZURE_VISION_ENDPOINT`` / ``AZURE_VISION_KEY`` override whatever the
    file says.
    """
    merged = json.loads(json.dumps(DEFAULTS))  # deep copy via JSON round-trip

    candidates: list[Path] = []
    if path is not None:
        candidates.append(Path(path))
    candidates.extend([Path("config.json"), Path("config.yaml"), Path("config.yml")])

    chosen: Optional[Path] = next((p for p in candidates if p.exists()), None)
    if chosen is not None:
        try:
            if chosen.suffix.lower() == ".json":
                data = _load_json(chosen)
            elif chosen.suffix.lower() in {".yaml", ".yml"}:
                data = _load_yaml(chosen)
            else:
                warnings.warn(f"Unsupported config format: {chosen.suffix}. Using defaults.")
                data = {}
        except (OSError, ValueError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to load config from {chosen}: {exc}. Using defaults.")
            data = {}

        if isinstance(data, Mapping):
            _deep_update(merged, data)
        else:
            warnings.warn(f"Config at {chosen} is not a mapping. Using defaults.")
    elif path is not None:
        warnings.warn(f"Config file not found: {path}. Using defaults.")

    _apply_env(merged)
    return merged


def _section_values(cls: type, section: Any) -> Dict[str, Any]:
    """Pick known, well-typed keys of ``section`` for dataclass ``cls``."""
    if not isinstance(section, Mapping):
        return {}
    defaults = cls()
    values: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in section:
            continue
        default = getattr(defaults, f.name)
        raw = section[f.name]
        try:
            if isinstance(default, bool):
                values[f.name] = bool(raw)
            elif isinstance(default, int):
                values[f.name] = int(raw)
            else:
                values[f.name] = float(raw)
        except (TypeError, ValueError):
            warnings.warn(f"Ignoring invalid {cls.__name__}.{f.name} value: {raw!r}")
    return values


@dataclass(frozen=True)
class ScoringConfig:
    """Weights and thresholds of the candidate scorer."""

    tag_weight: float = 1.0
    caption_weight: float = 0.6
    object_weight: float = 0.8
    caption_frequency_bonus: float = 0.05
    caption_frequency_cap: float = 0.15
    group_bonus: float = 0.1
    confidence_min: float = 0.65
    score_min: float = 0.52
    core_threshold: float = 0.55
    meat_fallback_score: float = 0.88

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any] | None) -> "ScoringConfig":
        return cls(**_section_values(cls, (cfg or {}).get("scoring")))


@dataclass(frozen=True)
class RefinementConfig:
    """Crop refinement settings: fan-out limits and crop encoding."""

    enabled: bool = True
    max_crops: int = 4
    iou_limit: float = 0.2
    padding_ratio: float = 0.05
    max_side: int = 512
    jpeg_quality: int = 70

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any] | None) -> "RefinementConfig":
        return cls(**_section_values(cls, (cfg or {}).get("refinement")))


def extra_generic_terms(cfg: Mapping[str, Any] | None) -> Tuple[str, ...]:
    section = (cfg or {}).get("filter") or {}
    terms = section.get("extra_generic_terms") if isinstance(section, Mapping) else None
    if not isinstance(terms, (list, tuple)):
        return ()
    return tuple(str(t) for t in terms if t)


__all__ = [
    "DEFAULTS",
    "ENDPOINT_ENV",
    "KEY_ENV",
    "RefinementConfig",
    "ScoringConfig",
    "extra_generic_terms",
    "load_config",
]
