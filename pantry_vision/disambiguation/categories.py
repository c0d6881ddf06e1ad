"""Static protein category tables used for hierarchy and sibling collapse."""

from __future__ import annotations

from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

RED_MEAT = frozenset({"beef", "mutton", "lamb", "pork", "veal", "goat"})
POULTRY = frozenset({"chicken", "turkey", "duck"})
# "fish" itself is a parent word (see PARENTS), not a member.
FISH = frozenset(
    {"salmon", "tuna", "cod", "tilapia", "trout", "sardine", "anchovy", "mackerel", "catfish", "carp"}
)
SHELLFISH = frozenset({"shrimp", "prawn", "lobster", "crab", "oyster", "clam", "mussel", "scallop"})
CEPHALOPOD = frozenset({"octopus", "squid", "cuttlefish"})

CATEGORY_MEMBERS: Mapping[str, FrozenSet[str]] = MappingProxyType(
    {
        "red_meat": RED_MEAT,
        "poultry": POULTRY,
        "fish": FISH,
        "shellfish": SHELLFISH,
        "cephalopod": CEPHALOPOD,
    }
)

_ALL_CATEGORIES = frozenset(CATEGORY_MEMBERS)
_SEAFOOD = frozenset({"fish", "shellfish", "cephalopod"})

# Parent word -> child categories whose members make the parent redundant.
PARENTS: Mapping[str, FrozenSet[str]] = MappingProxyType(
    {
        "meat": _ALL_CATEGORIES,
        "animal": _ALL_CATEGORIES,
        "poultry": frozenset({"poultry"}),
        "fish": _SEAFOOD,
        "seafood": _SEAFOOD,
        "shellfish": frozenset({"shellfish"}),
        "crustacean": frozenset({"shellfish"}),
        "mollusk": frozenset({"shellfish", "cephalopod"}),
        "invertebrate": frozenset({"shellfish", "cephalopod"}),
    }
)

ANIMAL_PROTEINS = frozenset().union(*CATEGORY_MEMBERS.values())

# Words that put a scene into meat/seafood territory for the fallback resolver.
MEAT_SIGNAL_WORDS = frozenset({"meat", "seafood", "fish", "poultry"}) | ANIMAL_PROTEINS

_MEMBER_CATEGORY = MappingProxyType(
    {member: name for name, members in CATEGORY_MEMBERS.items() for member in members}
)


def category_of(token: str) -> Optional[str]:
    """Category name of ``token`` or ``None`` when it is not a listed protein."""
    return _MEMBER_CATEGORY.get(token)


__all__ = [
    "ANIMAL_PROTEINS",
    "CATEGORY_MEMBERS",
    "CEPHALOPOD",
    "FISH",
    "MEAT_SIGNAL_WORDS",
    "PARENTS",
    "POULTRY",
    "RED_MEAT",
    "SHELLFISH",
    "category_of",
]
