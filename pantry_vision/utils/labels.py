"""Token normalization: turn noisy provider labels into singular food headwords."""

from __future__ import annotations

import re
from typing import List

MAX_LABEL_LENGTH = 100
MIN_TOKEN_LENGTH = 3

_MARKUP_RE = re.compile(r"<[^>]*>")
_PUNCT_RE = re.compile(r"[^\w\s'-]|_")
_NUMERAL_RE = re.compile(r"^\d+(?:[.,/]\d+)?$")

# Words stripped from either end of a phrase before headword extraction.
DESCRIPTORS = frozenset(
    {
        # processing
        "chopped", "diced", "minced", "ground", "cubed", "shredded", "sliced",
        "grated", "peeled", "cut", "mashed", "marinated", "seasoned", "stuffed",
        # cooking methods
        "boiled", "fried", "grilled", "roasted", "baked", "steamed", "sauteed",
        "cooked", "smoked", "stir-fried", "deep-fried", "poached",
        # size / quantity / portion
        "whole", "half", "quarter", "large", "small", "medium", "boneless",
        "skinless", "fillet", "piece", "chunk", "strip", "steak", "chop",
        "cutlet", "slice", "bunch", "pile", "heap",
        # colours
        "red", "white", "yellow", "green", "brown", "pink",
        "purple", "black",
        # freshness / state
        "fresh", "dried", "organic", "raw", "ripe", "frozen", "canned",
        "unripe",
    }
)

# Standard grocery headwords. The right-most one in a phrase wins.
HEADWORDS = frozenset(
    {
        # poultry, red meat, fish, shellfish, cephalopods, eggs
        "chicken", "turkey", "duck", "egg",
        "beef", "mutton", "lamb", "pork", "veal", "goat", "bacon", "sausage", "ham",
        "fish", "salmon", "tuna", "cod", "tilapia", "trout", "sardine", "anchovy",
        "mackerel", "catfish", "carp",
        "shrimp", "prawn", "lobster", "crab", "oyster", "clam", "mussel", "scallop",
        "octopus", "squid", "cuttlefish",
        # dairy
        "milk", "yogurt", "cheese", "paneer", "butter", "ghee", "cream",
        # vegetables
        "tomato", "potato", "onion", "garlic", "ginger", "carrot", "cabbage",
        "cauliflower", "cucumber", "pepper", "chili", "spinach", "broccoli",
        "bean", "pea", "corn", "lettuce", "celery", "radish", "beetroot", "turnip",
        "eggplant", "zucchini", "squash", "pumpkin", "asparagus", "artichoke",
        "kale", "okra", "leek",
        # fruits
        "banana", "mango", "apple", "orange", "lemon", "lime", "grape",
        "pineapple", "papaya", "watermelon", "melon", "strawberry", "blueberry",
        "raspberry", "cherry", "peach", "pear", "plum", "apricot", "kiwi",
        "avocado", "coconut", "pomegranate", "fig", "date",
        # grains and staples
        "rice", "wheat", "flour", "bread", "pasta", "noodle", "oat", "barley",
        "quinoa", "couscous", "tortilla",
        # condiments and basics
        "oil", "salt", "sugar", "vinegar", "sauce", "honey",
        # fungi
        "mushroom", "fungus",
        # herbs and spices
        "basil", "cilantro", "parsley", "mint", "thyme", "oregano", "rosemary",
        "sage", "dill", "cumin", "coriander", "turmeric", "cinnamon", "cardamom",
        "clove", "nutmeg", "paprika",
        # legumes and nuts
        "lentil", "chickpea", "tofu", "soybean",
        "almond", "cashew", "peanut", "walnut", "pistachio",
    }
)

IRREGULAR_PLURALS = {
    "fungi": "fungus",
    "leaves": "leaf",
    "loaves": "loaf",
    "halves": "half",
    "calves": "calf",
    "cacti": "cactus",
    "octopi": "octopus",
    "geese": "goose",
    "chilies": "chili",
    "chillies": "chili",
    "cookies": "cookie",
    "brownies": "brownie",
    "knives": "knife",
}

_INVARIANT_ENDINGS = ("ss", "us", "sis")
_SIBILANT_PLURALS = ("sses", "ches", "shes", "xes", "zes")


def singularize(word: str) -> str:
    """Return the singular form of a single lowercase word."""
    if not word:
        return ""
    if word in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[word]
    if len(word) <= 3 or word.endswith(_INVARIANT_ENDINGS):
        return word
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith("oes") and len(word) > 4:
        return word[:-2]
    if word.endswith("uses") and len(word) > 5:
        return word[:-2]
    if word.endswith(_SIBILANT_PLURALS):
        return word[:-2]
    if word.endswith("s"):
        return word[:-1]
    return word


def _strip_possessive(word: str) -> str:
    return word[:-2] if word.endswith("'s") else word


def clean_label(value: str) -> str:
    """Strip markup and punctuation, lowercase, collapse whitespace, truncate."""
    if not value:
        return ""
    text = _MARKUP_RE.sub(" ", str(value))
    text = _PUNCT_RE.sub(" ", text).lower()
    text = " ".join(text.split())[:MAX_LABEL_LENGTH]
    words = (_strip_possessive(w.strip("-'")) for w in text.split())
    return " ".join(w for w in words if w)


def _is_descriptor(word: str) -> bool:
    return word in DESCRIPTORS or bool(_NUMERAL_RE.match(word))


def strip_descriptors(words: List[str]) -> List[str]:
    """Drop descriptor words from both ends of a phrase."""
    start, end = 0, len(words)
    while start < end and _is_descriptor(words[start]):
        start += 1
    while end > start and _is_descriptor(words[end - 1]):
        end -= 1
    return words[start:end]


def extract_headword(words: List[str]) -> str:
    """Right-most known headword, falling back to the right-most word."""
    if not words:
        return ""
    for word in reversed(words):
        if word in HEADWORDS:
            return word
    return words[-1]


def normalize(raw_name: str) -> str:
    """Normalize a raw label into a singular, descriptor-free headword.

    Returns an empty string when nothing usable is left, which callers treat
    as "no candidate".
    """
    if not isinstance(raw_name, str):
        return ""
    words = strip_descriptors(clean_label(raw_name).split())
    if not words:
        return ""
    singular = [t for t in (singularize(w).strip("-'") for w in words) if t]
    # Singularizing can expose descriptors ("slices" -> "slice").
    singular = strip_descriptors(singular)
    return extract_headword(singular)


def normalize_words(text: str) -> List[str]:
    """Split free text into normalized single-word tokens (length >= 3)."""
    tokens: List[str] = []
    for word in clean_label(text).split():
        token = singularize(word)
        if len(token) >= MIN_TOKEN_LENGTH and not _is_descriptor(token):
            tokens.append(token)
    return tokens


__all__ = [
    "DESCRIPTORS",
    "HEADWORDS",
    "clean_label",
    "extract_headword",
    "normalize",
    "normalize_words",
    "singularize",
    "strip_descriptors",
]
