"""Shared fixtures: provider-shaped payload builders and fake collaborators."""

from typing import Dict, List, Optional

import pytest

from pantry_vision.core.types import BoundingBox, RawSignal
from pantry_vision.vision.azure_client import VisionServiceError


def build_response(
    tags: Optional[List[tuple]] = None,
    captions: Optional[List[tuple]] = None,
    objects: Optional[List[tuple]] = None,
) -> dict:
    """Provider layout from (name, conf) tags, (text, conf) captions and
    (name, conf, (x, y, w, h)) objects."""
    payload = {
        "tagsResult": {"values": [{"name": n, "confidence": c} for n, c in tags or []]},
        "denseCaptionsResult": {"values": [{"text": t, "confidence": c} for t, c in captions or []]},
        "objectsResult": {"values": []},
    }
    for name, conf, box in objects or []:
        entry = {"tags": [{"name": name, "confidence": conf}]}
        if box is not None:
            x, y, w, h = box
            entry["boundingBox"] = {"x": x, "y": y, "w": w, "h": h}
        payload["objectsResult"]["values"].append(entry)
    return payload


@pytest.fixture
def response():
    return build_response


class FakeVision:
    """Async analyze/crop pair backed by canned responses keyed by URI."""

    def __init__(self, responses: Dict[str, dict], failing: Optional[set] = None):
        self.responses = responses
        self.failing = failing or set()
        self.analyzed: List[str] = []
        self.cropped: List[BoundingBox] = []

    async def analyze(self, uri: str) -> RawSignal:
        self.analyzed.append(uri)
        if uri in self.failing:
            raise VisionServiceError(f"analysis of {uri} failed", status=500)
        return RawSignal.from_response(self.responses.get(uri, {}))

    async def crop(self, uri: str, box: BoundingBox) -> str:
        self.cropped.append(box)
        return f"{uri}#crop-{int(box.x)}-{int(box.y)}"


@pytest.fixture
def fake_vision():
    return FakeVision


@pytest.fixture(autouse=True)
def no_vision_credentials(monkeypatch):
    monkeypatch.delenv("AZURE_VISION_ENDPOINT", raising=False)
    monkeypatch.delenv("AZURE_VISION_KEY", raising=False)
