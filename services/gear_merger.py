"""
Folds the user's gear closet into generated packing sections.

Gear never duplicates an item already on the list (by normalized name), and
merging the same gear twice changes nothing the second time.
"""
import uuid
from typing import Dict, List, Sequence

from schemas.gear_schema import GearItem
from schemas.packing_schema import PackingItem, PackingSection
from services.canonicalizer import normalize_category_id, normalize_item_name

# Gear closet category -> packing section title
GEAR_CATEGORY_TO_SECTION: Dict[str, str] = {
    "camp_comfort": "Camp Furniture",
    "campFurniture": "Camp Furniture",
    "clothing": "Clothing",
    "documents_essentials": "Other",
    "electronics": "Tools & Utilities",
    "entertainment": "Entertainment",
    "food": "Cooking & Food",
    "hygiene": "Personal Care",
    "kitchen": "Meal Prep",
    "lighting": "Navigation & Safety",
    "meal_prep": "Meal Prep",
    "optional_extras": "Other",
    "pet_supplies": "Pet Supplies",
    "safety": "Navigation & Safety",
    "seating": "Camp Furniture",
    "shelter": "Shelter & Sleep",
    "sleep": "Shelter & Sleep",
    "tools": "Tools & Utilities",
    "water": "Meal Prep",
}

FALLBACK_SECTION = "Other"


def get_section_for_gear(category: str) -> str:
    return GEAR_CATEGORY_TO_SECTION.get(category, FALLBACK_SECTION)


def is_gear_closet_item(item: PackingItem) -> bool:
    return item.source == "gearCloset" or bool(item.gear_item_id)


def merge_gear_into_sections(
    sections: Sequence[PackingSection],
    gear_items: Sequence[GearItem],
) -> List[PackingSection]:
    """
    Add gear closet items to the right sections without duplicates.

    The input sections are not modified. Gear lands after the items already
    in its target section; missing sections are created at the end of the list.
    """
    merged = [section.model_copy(update={"items": list(section.items)}) for section in sections]

    existing_names = {
        normalize_item_name(item.name)
        for section in merged
        for item in section.items
    }

    # Grouped first so gear is appended as a block per section.
    gear_by_section: Dict[str, List[PackingItem]] = {}
    for gear in gear_items or []:
        name = normalize_item_name(gear.name)
        if not name or name in existing_names:
            continue
        existing_names.add(name)
        gear_by_section.setdefault(get_section_for_gear(gear.category), []).append(
            PackingItem(
                id=str(uuid.uuid4()),
                name=gear.name,
                checked=False,
                essential=False,
                source="gearCloset",
                gear_item_id=gear.id,
            )
        )

    for title, items in gear_by_section.items():
        section_key = normalize_category_id(title)
        target = next((s for s in merged if normalize_category_id(s.title) == section_key), None)
        if target is None:
            target = PackingSection(id=str(uuid.uuid4()), title=title, items=[], collapsed=False)
            merged.append(target)
        target.items.extend(items)

    return merged
