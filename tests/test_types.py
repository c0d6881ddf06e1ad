"""Signal model parsing and candidate behaviour."""

import pytest

from pantry_vision.core.types import BoundingBox, Candidate, RawSignal


class TestRawSignal:
    @pytest.mark.parametrize("payload", [{}, None, [], "garbage", {"tagsResult": None}])
    def test_missing_or_malformed_payload_is_empty(self, payload):
        assert RawSignal.from_response(payload).is_empty

    def test_provider_layout(self, response):
        signal = RawSignal.from_response(
            response(
                tags=[("chicken", 0.9)],
                captions=[("a chicken on a plate", 0.8)],
                objects=[("chicken", 0.7, (1, 2, 30, 40))],
            )
        )
        assert [t.name for t in signal.tags] == ["chicken"]
        assert [c.text for c in signal.captions] == ["a chicken on a plate"]
        assert signal.objects[0].bounding_box == BoundingBox(1, 2, 30, 40)
        assert signal.objects[0].label.name == "chicken"

    def test_flat_layout_and_read_result_ignored(self):
        signal = RawSignal.from_response(
            {
                "tags": [{"name": "milk", "confidence": 0.9}],
                "captions": [{"text": "a glass of milk", "confidence": 0.7}],
                "readResult": {"blocks": [{"lines": [{"text": "MILK"}]}]},
            }
        )
        assert len(signal.tags) == 1 and len(signal.captions) == 1
        assert signal.objects == ()

    def test_malformed_entries_skipped_and_confidences_clamped(self):
        signal = RawSignal.from_response(
            {
                "tagsResult": {
                    "values": [
                        {"name": "rice", "confidence": 1.7},
                        {"name": 5, "confidence": 0.9},
                        {"confidence": 0.9},
                        "oops",
                        {"name": "bean", "confidence": "high"},
                    ]
                },
                "objectsResult": {"values": [{"tags": [], "boundingBox": {"x": 0, "y": 0, "w": 0, "h": 4}}]},
            }
        )
        assert [(t.name, t.confidence) for t in signal.tags] == [("rice", 1.0), ("bean", 0.0)]
        assert signal.objects[0].bounding_box is None


class TestBoundingBox:
    def test_iou_and_intersection(self):
        a = BoundingBox(0, 0, 10, 10)
        b = BoundingBox(5, 0, 10, 10)
        assert a.iou(b) == pytest.approx(50 / 150)
        assert a.intersects(b)

    def test_touching_boxes_do_not_intersect(self):
        assert not BoundingBox(0, 0, 10, 10).intersects(BoundingBox(10, 0, 10, 10))

    def test_from_dict_rejects_garbage(self):
        assert BoundingBox.from_dict({"x": "a", "y": 0, "w": 1, "h": 1}) is None
        assert BoundingBox.from_dict(None) is None


class TestCandidate:
    def test_merge_is_commutative_and_idempotent(self):
        a = Candidate("tomato", 0.9, {"tag"}, (BoundingBox(0, 0, 5, 5),), 0.9)
        b = Candidate("tomato", 0.7, {"object"}, (BoundingBox(10, 10, 5, 5),))
        assert a.merge(b) == b.merge(a)
        assert a.merge(a) == a
        merged = a.merge(b)
        assert merged.score == 0.9
        assert merged.sources == frozenset({"tag", "object"})
        assert len(merged.bounding_boxes) == 2

    def test_merge_rejects_other_tokens(self):
        with pytest.raises(ValueError):
            Candidate("tomato", 0.9).merge(Candidate("potato", 0.9))

    def test_negative_score_clamped(self):
        assert Candidate("rice", -1.0).score == 0.0

    def test_to_dict(self):
        data = Candidate("mango", 0.91234, {"tag", "caption"}, (BoundingBox(1, 2, 3, 4),)).to_dict()
        assert data["name"] == "mango"
        assert data["score"] == 0.9123
        assert data["sources"] == ["caption", "tag"]
        assert data["boundingBox"] == {"x": 1, "y": 2, "w": 3, "h": 4}
        assert "boundingBox" not in Candidate("rice", 0.6).to_dict()
