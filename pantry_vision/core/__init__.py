"""Core signal model and pipeline orchestration."""

from .types import (
    BoundingBox,
    Candidate,
    Caption,
    DetectedObject,
    RawSignal,
    Tag,
    Token,
)

__all__ = [
    "BoundingBox",
    "Candidate",
    "Caption",
    "DetectedObject",
    "RawSignal",
    "Tag",
    "Token",
]
