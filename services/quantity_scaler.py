"""
Trip-length based quantities for consumable and per-day items.
"""
import math
import re
from typing import Callable, List, NamedTuple, Optional, Pattern

from schemas.packing_schema import PackingSection


class QuantityRule(NamedTuple):
    pattern: Pattern
    quantity_for: Callable[[int], int]
    category: Optional[str] = None
    unit: Optional[str] = None
    note: Optional[str] = None


class QuantityResult(NamedTuple):
    qty: int
    unit: Optional[str] = None
    note: Optional[str] = None


# First matching rule wins, so keep the more specific patterns on top.
DURATION_QUANTITY_RULES: List[QuantityRule] = [
    QuantityRule(re.compile(r"socks", re.I), lambda days: days + 1, category="Clothing", unit="pair"),
    QuantityRule(re.compile(r"underwear", re.I), lambda days: days + 1, category="Clothing"),
    QuantityRule(re.compile(r"t-shirt|shirt", re.I), lambda days: math.ceil(days / 2) + 1, category="Clothing"),
    QuantityRule(re.compile(r"trash bag", re.I), lambda days: max(2, math.ceil(days / 2)), category="Meal Prep"),
    QuantityRule(
        re.compile(r"paper towel", re.I),
        lambda days: 1,
        category="Meal Prep",
        note="Bring extra roll for trips over 3 nights",
    ),
    QuantityRule(re.compile(r"ice pack", re.I), lambda days: max(2, math.ceil(days / 2))),
]

_SPRING_FALL_NOTES = [
    (re.compile(r"rain jacket|rain layer", re.I), "Essential for spring/fall - expect rain"),
    (re.compile(r"fleece|warm layer", re.I), "Temps can drop at night"),
]

SEASONAL_NOTES = {
    "winter": [
        (re.compile(r"sleeping bag", re.I), "Cold rated bag recommended (0-20°F)"),
        (re.compile(r"sleeping pad", re.I), "High R-value (4+) recommended for insulation"),
    ],
    "summer": [
        (re.compile(r"water|hydration", re.I), "Bring extra water capacity for heat"),
    ],
    "spring": _SPRING_FALL_NOTES,
    "fall": _SPRING_FALL_NOTES,
}


def get_item_quantity(item_name: str, category: str, trip_days: int) -> Optional[QuantityResult]:
    """Quantity for an item on a trip of trip_days, or None when no rule matches."""
    for rule in DURATION_QUANTITY_RULES:
        if not rule.pattern.search(item_name or ""):
            continue
        if rule.category and rule.category.lower() not in (category or "").lower():
            continue
        return QuantityResult(qty=rule.quantity_for(max(1, trip_days)), unit=rule.unit, note=rule.note)
    return None


def get_seasonal_note(item_name: str, season: str) -> Optional[str]:
    for pattern, note in SEASONAL_NOTES.get(season, []):
        if pattern.search(item_name or ""):
            return note
    return None


def apply_quantities(sections: List[PackingSection], trip_days: int) -> List[PackingSection]:
    """
    Return new sections with quantities set on duration-sensitive items.
    The section title is used as the category for rule matching.
    """
    scaled = []
    for section in sections:
        items = []
        for item in section.items:
            result = get_item_quantity(item.name, section.title, trip_days)
            if result is None:
                items.append(item)
                continue
            updates = {"quantity": result.qty, "unit": result.unit}
            if result.note and not item.note:
                updates["note"] = result.note
            items.append(item.model_copy(update=updates))
        scaled.append(section.model_copy(update={"items": items}))
    return scaled
