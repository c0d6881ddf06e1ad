"""Token normalization tests."""

import pytest

from pantry_vision.utils.labels import (
    clean_label,
    extract_headword,
    normalize,
    normalize_words,
    singularize,
    strip_descriptors,
)


class TestSingularize:
    @pytest.mark.parametrize(
        "plural, singular",
        [
            ("tomatoes", "tomato"),
            ("potatoes", "potato"),
            ("mangoes", "mango"),
            ("shrimps", "shrimp"),
            ("cherries", "cherry"),
            ("peaches", "peach"),
            ("radishes", "radish"),
            ("boxes", "box"),
            ("glasses", "glass"),
            ("oranges", "orange"),
            ("fungi", "fungus"),
            ("leaves", "leaf"),
            ("kiwis", "kiwi"),
            ("chilis", "chili"),
            ("octopuses", "octopus"),
            ("asparaguses", "asparagus"),
        ],
    )
    def test_plural_forms(self, plural, singular):
        assert singularize(plural) == singular

    @pytest.mark.parametrize("word", ["octopus", "asparagus", "couscous", "glass", "hummus", "egg", "analysis"])
    def test_words_left_alone(self, word):
        assert singularize(word) == word


class TestNormalize:
    def test_strips_descriptors_and_pluralization(self):
        assert normalize("2 Sliced Red Onions") == "onion"
        assert normalize("Fresh Tomatoes") == "tomato"

    def test_picks_rightmost_known_headword(self):
        assert normalize("anchovy fish") == "fish"
        assert normalize("king oyster mushroom") == "mushroom"
        assert normalize("chicken breasts") == "chicken"

    def test_plural_seafood_maps_to_its_category_member(self):
        assert normalize("Octopuses") == "octopus"
        assert normalize("ripe kiwis") == "kiwi"

    def test_markup_punctuation_and_possessives(self):
        assert normalize("<b>Chef's</b> salmon fillets!") == "salmon"

    @pytest.mark.parametrize("value", ["", None, "!!!", "fresh", "   ", 42])
    def test_unusable_input_gives_empty(self, value):
        assert normalize(value) == ""

    @pytest.mark.parametrize(
        "raw",
        ["Tomatoes", "<i>Diced</i> chicken thighs", "Chef's salmon fillets", "pile of mangoes", "stir-fried noodles"],
    )
    def test_idempotent(self, raw):
        once = normalize(raw)
        assert once
        assert normalize(once) == once

    def test_long_labels_are_truncated(self):
        assert len(clean_label("carrot " * 40)) <= 100


class TestHelpers:
    def test_strip_descriptors_only_trims_edges(self):
        assert strip_descriptors(["fresh", "red", "chili", "pepper", "sliced"]) == ["chili", "pepper"]

    def test_extract_headword_falls_back_to_last_word(self):
        assert extract_headword(["cutting", "board"]) == "board"
        assert extract_headword([]) == ""

    def test_normalize_words_splits_captions(self):
        assert normalize_words("a pile of Mangoes on display") == ["mango", "display"]
