"""
Name normalization for the packing engine.

Two independent keys live here:
- category ids, which decide which section an item or gear piece lands in
- item canonical keys, which group equivalent gear ("Tent", "4-season tent")
  so only one of them survives generation
"""
import re
from typing import Callable, List, Tuple

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_KEY_CHAR = re.compile(r"[^a-z0-9_]")
_UNDERSCORE_RUN = re.compile(r"_+")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_category_id(label: str) -> str:
    """
    Normalize a category label to a stable category id.

    "Safety and First Aid" -> "safety_and_first_aid"
    "Food & Kitchen"       -> "food_and_kitchen"
    """
    value = (label or "").strip().lower()
    value = value.replace("&", "and")
    value = _NON_ALNUM.sub("_", value)
    value = _UNDERSCORE_RUN.sub("_", value)
    return value.strip("_")


def normalize_item_name(name: str) -> str:
    """Lowercase, trim and collapse whitespace. Used for exact-name dedup."""
    return _WHITESPACE_RUN.sub(" ", (name or "").strip().lower())


def _is_tent(name: str) -> bool:
    return "tent" in name and not any(
        word in name for word in ("stake", "footprint", "ground cloth")
    )


# Ordered (predicate, key) pairs. The first predicate that matches wins.
CANONICAL_KEY_RULES: List[Tuple[Callable[[str], bool], str]] = [
    (_is_tent, "tent"),
    (lambda name: "sleeping bag" in name, "sleeping_bag"),
    (lambda name: any(word in name for word in ("sleeping pad", "air mattress", "mattress")), "sleeping_pad"),
    (lambda name: "chair" in name, "camp_chairs"),
    (lambda name: "table" in name, "camp_table"),
]


def canonical_item_key(item_name: str) -> str:
    """Map an item name onto its equivalence class, or a normalized literal."""
    name = (item_name or "").strip().lower()
    for predicate, key in CANONICAL_KEY_RULES:
        if predicate(name):
            return key
    return _NON_KEY_CHAR.sub("_", name)
