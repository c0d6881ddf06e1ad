"""Crop refinement orchestration helpers."""

from pantry_vision.core.types import BoundingBox, Candidate, RawSignal
from pantry_vision.refinement.orchestrator import RefinementOrchestrator, keep_distinct, merge_candidates


class TestKeepDistinct:
    def test_highest_confidence_first_and_overlaps_dropped(self):
        a = BoundingBox(0, 0, 100, 100)
        b = BoundingBox(10, 10, 100, 100)
        c = BoundingBox(300, 300, 50, 50)
        assert keep_distinct([(b, 0.9), (a, 0.5), (c, 0.7)]) == [b, c]

    def test_small_overlap_is_allowed(self):
        a = BoundingBox(0, 0, 100, 100)
        b = BoundingBox(90, 0, 100, 100)
        assert keep_distinct([(a, 0.9), (b, 0.8)]) == [a, b]

    def test_cap(self):
        boxes = [(BoundingBox(i * 20, 0, 10, 10), 0.5) for i in range(10)]
        assert len(keep_distinct(boxes, max_crops=3)) == 3


class TestMergeCandidates:
    def test_merges_by_token_and_recollapses(self):
        left = BoundingBox(0, 0, 10, 10)
        right = BoundingBox(50, 0, 10, 10)
        merged = merge_candidates(
            [
                [Candidate("fish", 0.9, {"tag"})],
                [Candidate("tomato", 0.7, {"tag", "object"}, (left,))],
                [Candidate("tomato", 0.8, {"object"}, (right,)), Candidate("squid", 0.75, {"object"}, (right,))],
            ]
        )
        assert [c.token for c in merged] == ["tomato", "squid"]
        assert merged[0].score == 0.8
        assert merged[0].bounding_boxes == (left, right)

    def test_order_independent(self):
        groups = [
            [Candidate("rice", 0.6, {"tag"})],
            [Candidate("rice", 0.9, {"object"}, (BoundingBox(1, 1, 2, 2),))],
        ]
        assert merge_candidates(groups) == merge_candidates(list(reversed(groups)))


class TestShouldRefine:
    def test_triggers(self, response):
        orchestrator = RefinementOrchestrator()
        single = RawSignal.from_response(response(objects=[("apple", 0.9, (0, 0, 5, 5))]))
        generic = RawSignal.from_response(response(objects=[("Fruits", 0.9, (0, 0, 5, 5))]))
        multi = RawSignal.from_response(
            response(objects=[("apple", 0.9, (0, 0, 5, 5)), ("pear", 0.9, (9, 9, 5, 5))])
        )
        assert not orchestrator.should_refine(single)
        assert orchestrator.should_refine(generic)
        assert orchestrator.should_refine(multi)
        assert not orchestrator.should_refine(RawSignal())
