"""Shared dataclasses and type aliases used across pantry vision components."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple


Token = str

SOURCE_TAG = "tag"
SOURCE_CAPTION = "caption"
SOURCE_OBJECT = "object"


def _as_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _clamp_confidence(value: Any, default: float = 0.0) -> float:
    number = _as_float(value)
    if number is None:
        return default
    return max(0.0, min(1.0, number))


def _values(section: Any) -> List[Any]:
    """Return the ``values`` list of a provider section, or a bare list."""
    if isinstance(section, Mapping):
        section = section.get("values")
    if isinstance(section, (list, tuple)):
        return list(section)
    return []


@dataclass(frozen=True, order=True)
class BoundingBox:
    """Axis-aligned box in source-image pixels (top-left corner + size)."""

    x: float
    y: float
    w: float
    h: float

    @classmethod
    def from_dict(cls, data: Any) -> Optional["BoundingBox"]:
        if not isinstance(data, Mapping):
            return None
        x, y = _as_float(data.get("x")), _as_float(data.get("y"))
        w, h = _as_float(data.get("w")), _as_float(data.get("h"))
        if None in (x, y, w, h) or w <= 0 or h <= 0:
            return None
        return cls(x=x, y=y, w=w, h=h)

    @property
    def area(self) -> float:
        return self.w * self.h

    def intersection(self, other: "BoundingBox") -> float:
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.x + self.w, other.x + other.w)
        bottom = min(self.y + self.h, other.y + other.h)
        return max(0.0, right - left) * max(0.0, bottom - top)

    def intersects(self, other: "BoundingBox") -> bool:
        """True when the two boxes share a region of positive area."""
        return self.intersection(other) > 0.0

    def iou(self, other: "BoundingBox") -> float:
        inter = self.intersection(other)
        union = self.area + other.area - inter
        return inter / union if union > 0 else 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass(frozen=True)
class Tag:
    name: str
    confidence: float

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Tag"]:
        if not isinstance(data, Mapping):
            return None
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            return None
        return cls(name=name, confidence=_clamp_confidence(data.get("confidence")))


@dataclass(frozen=True)
class Caption:
    text: str
    confidence: float

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Caption"]:
        if not isinstance(data, Mapping):
            return None
        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            return None
        return cls(text=text, confidence=_clamp_confidence(data.get("confidence")))


@dataclass(frozen=True)
class DetectedObject:
    """One object region: its own tag list plus an optional bounding box."""

    tags: Tuple[Tag, ...] = ()
    bounding_box: Optional[BoundingBox] = None
    confidence: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["DetectedObject"]:
        if not isinstance(data, Mapping):
            return None
        tags = tuple(t for t in (Tag.from_dict(v) for v in _values(data.get("tags"))) if t)
        box = BoundingBox.from_dict(data.get("boundingBox"))
        confidence = data.get("confidence")
        return cls(
            tags=tags,
            bounding_box=box,
            confidence=_clamp_confidence(confidence) if confidence is not None else None,
        )

    @property
    def label(self) -> Optional[Tag]:
        """Highest-confidence tag of this object, if any."""
        if not self.tags:
            return None
        return max(self.tags, key=lambda t: t.confidence)


@dataclass(frozen=True)
class RawSignal:
    """Immutable view of one vision-provider response."""

    tags: Tuple[Tag, ...] = ()
    captions: Tuple[Caption, ...] = ()
    objects: Tuple[DetectedObject, ...] = ()

    @classmethod
    def from_response(cls, payload: Any) -> "RawSignal":
        """Build a signal from a provider payload.

        Accepts the provider layout (``tagsResult``, ``objectsResult``,
        ``denseCaptionsResult``) as well as the flat ``tags`` / ``captions`` /
        ``objects`` layout. Anything missing or malformed becomes empty;
        ``readResult`` is ignored.
        """
        if isinstance(payload, RawSignal):
            return payload
        if not isinstance(payload, Mapping):
            return cls()

        def section(*keys: str) -> List[Any]:
            for key in keys:
                if payload.get(key) is not None:
                    return _values(payload.get(key))
            return []

        tags = (Tag.from_dict(v) for v in section("tagsResult", "tags"))
        captions = (
            Caption.from_dict(v)
            for v in section("denseCaptionsResult", "captions", "captionResult")
        )
        objects = (DetectedObject.from_dict(v) for v in section("objectsResult", "objects"))
        return cls(
            tags=tuple(t for t in tags if t),
            captions=tuple(c for c in captions if c),
            objects=tuple(o for o in objects if o),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.tags or self.captions or self.objects)


def _sorted_boxes(boxes: Iterable[BoundingBox]) -> Tuple[BoundingBox, ...]:
    return tuple(sorted(set(boxes)))


@dataclass(frozen=True)
class Candidate:
    """A token plus its score and supporting feature groups from one pass."""

    token: Token
    score: float
    sources: FrozenSet[str] = field(default_factory=frozenset)
    bounding_boxes: Tuple[BoundingBox, ...] = ()
    tag_confidence: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "score", max(0.0, float(self.score)))
        object.__setattr__(self, "sources", frozenset(self.sources))
        object.__setattr__(self, "bounding_boxes", _sorted_boxes(self.bounding_boxes))

    @property
    def name(self) -> str:
        return self.token

    @property
    def group_count(self) -> int:
        return len(self.sources)

    def merge(self, other: "Candidate") -> "Candidate":
        """Combine two candidates for the same token (max score, union of evidence)."""
        if other.token != self.token:
            raise ValueError(f"Cannot merge {other.token!r} into {self.token!r}")
        return Candidate(
            token=self.token,
            score=max(self.score, other.score),
            sources=self.sources | other.sources,
            bounding_boxes=self.bounding_boxes + other.bounding_boxes,
            tag_confidence=max(self.tag_confidence, other.tag_confidence),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.token,
            "score": round(self.score, 4),
            "sources": sorted(self.sources),
            "boundingBoxes": [box.to_dict() for box in self.bounding_boxes],
        }
        if self.bounding_boxes:
            payload["boundingBox"] = self.bounding_boxes[0].to_dict()
        return payload


__all__ = [
    "BoundingBox",
    "Candidate",
    "Caption",
    "DetectedObject",
    "RawSignal",
    "SOURCE_CAPTION",
    "SOURCE_OBJECT",
    "SOURCE_TAG",
    "Tag",
    "Token",
]
