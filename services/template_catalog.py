"""
Packing template catalog.

Static, read-only tables of packing templates. Bump CATALOG_VERSION whenever
a template's items, keys or tiers change so stored lists can tell which
catalog they were generated from.
"""
from typing import Iterable, List, Optional, Sequence

from schemas.template_schema import PackingTemplate, PackingTemplateItem
from services.canonicalizer import canonical_item_key

CATALOG_VERSION = 2

# Section titles used for a list built without templates.
DEFAULT_SECTIONS = [
    "Camp Furniture",
    "Clothing",
    "Cooking & Food",
    "Entertainment",
    "Meal Prep",
    "Navigation & Safety",
    "Other",
    "Personal Care",
    "Pet Supplies",
    "Shelter & Sleep",
    "Tools & Utilities",
]

TRIP_TYPE_OPTIONS = [
    {"value": "one-night", "label": "One Night"},
    {"value": "weekend", "label": "Weekend"},
    {"value": "multi-day", "label": "Multi-Day"},
    {"value": "backpacking", "label": "Backpacking"},
    {"value": "car-camping", "label": "Car Camping"},
    {"value": "day-hike", "label": "Day Hike"},
]

SEASON_OPTIONS = [
    {"value": "spring", "label": "Spring"},
    {"value": "summer", "label": "Summer"},
    {"value": "fall", "label": "Fall"},
    {"value": "winter", "label": "Winter"},
]


def _item(name, category, essential, key=None, tier=None, seasons=(), conflicts=()):
    return PackingTemplateItem(
        name=name,
        category=category,
        essential=essential,
        canonical_key=key,
        precedence_tier=tier,
        season_tags=tuple(seasons),
        conflicts_with=tuple(conflicts),
    )


def _keyed(name, category, essential, **options):
    """An item grouped by the canonicalizer's equivalence classes."""
    return _item(name, category, essential, key=canonical_item_key(name), **options)


SHELTER = "Shelter & Sleep"
MEAL_PREP = "Meal Prep"
FOOD = "Cooking & Food"
SAFETY = "Navigation & Safety"
TOOLS = "Tools & Utilities"
CLOTHING = "Clothing"
CARE = "Personal Care"
FURNITURE = "Camp Furniture"
FUN = "Entertainment"
PETS = "Pet Supplies"
OTHER = "Other"


ESSENTIAL_CAMPING = PackingTemplate(
    key="essential",
    name="Essential Camping Gear",
    description="The must-have basics for any camping trip",
    default_precedence_tier=1,
    items=(
        _keyed("Tent", SHELTER, True),
        _item("Tent footprint/ground cloth", SHELTER, False),
        _item("Tent stakes", SHELTER, True),
        _keyed("Sleeping bag", SHELTER, True),
        _keyed("Sleeping pad", SHELTER, True),
        _item("Pillow", SHELTER, False),
        _item("Camp stove", MEAL_PREP, True, key="stove"),
        _item("Fuel", MEAL_PREP, True, key="stove_fuel"),
        _item("Lighter/matches", MEAL_PREP, True),
        _item("Headlamp", SAFETY, True),
        _item("Extra batteries", SAFETY, True),
        _item("First aid kit", SAFETY, True),
        _item("Axe", TOOLS, False),
        _item("Mallet", TOOLS, False),
        _item("Multi-tool or knife", TOOLS, True),
        _item("Rope", TOOLS, False),
    ),
)

COOKING_FOOD = PackingTemplate(
    key="cooking",
    name="Cooking & Food",
    description="Food and beverage items for your trip",
    default_precedence_tier=1,
    items=(
        _item("Beverages", FOOD, False),
        _item("Coffee/Tea", FOOD, False),
        _item("Condiments", FOOD, False),
        _item("Groceries from Meal Plan Shopping List", FOOD, True),
        _item("S'mores supplies", FOOD, False),
        _item("Spices", FOOD, False),
        _item("Sugar", FOOD, False),
        _item("Water", FOOD, True),
        _item("Bear canister/hang bag", MEAL_PREP, False, key="bear_canister"),
        _item("Camp stove", MEAL_PREP, True, key="stove"),
        _item("Camp-safe dish soap & sponge", MEAL_PREP, True),
        _item("Campfire skewers", MEAL_PREP, False),
        _item("Cooking supplies", MEAL_PREP, True),
        _item("Cooking utensils", MEAL_PREP, True),
        _item("Cooler", MEAL_PREP, False, key="cooler"),
        _item("Cups/mugs", MEAL_PREP, True),
        _item("Cutting board", MEAL_PREP, False),
        _item("Food storage containers", MEAL_PREP, False),
        _item("Fuel canister", MEAL_PREP, True, key="stove_fuel"),
        _item("Lighter/matches", MEAL_PREP, True),
        _item("Paper towels", MEAL_PREP, False),
        _item("Plates/bowls", MEAL_PREP, True),
        _item("Pots/pans", MEAL_PREP, True),
        _item("Trash bags", MEAL_PREP, True),
        _item("Water bottles", MEAL_PREP, True),
        _item("Water filter/purification", MEAL_PREP, False, key="water_filter"),
    ),
)

SAFETY_FIRST_AID = PackingTemplate(
    key="safety",
    name="Safety & First Aid",
    description="Be prepared for emergencies",
    default_precedence_tier=1,
    items=(
        _item("First aid kit", SAFETY, True),
        _item("Emergency whistle", SAFETY, True),
        _item("Emergency blanket", SAFETY, True),
        _item("Sunscreen", CARE, True, key="sunscreen", seasons=("summer",)),
        _item("Bug spray", CARE, True, key="bug_spray", seasons=("summer", "spring")),
        _item("Personal medications", CARE, True),
        _item("Map/GPS", SAFETY, False),
    ),
)

CLOTHING_PERSONAL = PackingTemplate(
    key="clothing",
    name="Clothing & Personal",
    description="Clothes and personal items",
    default_precedence_tier=1,
    items=(
        _item("Hiking pants/shorts", CLOTHING, True),
        _item("T-shirts", CLOTHING, True),
        _item("Underwear", CLOTHING, True),
        _item("Socks (wool preferred)", CLOTHING, True, key="socks"),
        _item("Rain jacket", CLOTHING, True, seasons=("spring", "fall")),
        _item("Warm layer (fleece/jacket)", CLOTHING, True, key="warm_layer", seasons=("fall",)),
        _item("Sleep clothes", CLOTHING, False),
        _item("Hat/cap", CLOTHING, False, key="hat", seasons=("summer",)),
    ),
)

MEAL_PLANNING = PackingTemplate(
    key="meals",
    name="Meal Planning Essentials",
    description="Food and meal prep items",
    default_precedence_tier=1,
    items=(
        _item("Beverages", FOOD, False),
        _item("Coffee/Tea", FOOD, False),
        _item("Condiments", FOOD, False),
        _item("Groceries from Meal Plan Shopping List", FOOD, True),
        _item("S'mores supplies", FOOD, False),
        _item("Spices", FOOD, False),
        _item("Sugar", FOOD, False),
        _item("Water", FOOD, True),
        _item("Bear canister/hang bag", MEAL_PREP, False, key="bear_canister"),
        _item("Food storage containers", MEAL_PREP, False),
        _item("Ice packs", MEAL_PREP, False),
        _item("Trash bags", MEAL_PREP, True),
        _item("Water bottles", MEAL_PREP, True),
        _item("Water filter/purification", MEAL_PREP, False, key="water_filter"),
    ),
)

BACKPACKING = PackingTemplate(
    key="backpacking",
    name="Backpacking Essentials",
    description="Lightweight gear for backcountry trips",
    default_precedence_tier=2,
    items=(
        _item("Backpack (60-70L)", OTHER, True),
        _keyed("Ultralight tent", SHELTER, True),
        _keyed("Lightweight sleeping bag", SHELTER, True),
        _keyed("Inflatable sleeping pad", SHELTER, True),
        _item("Trekking poles", TOOLS, False),
        _item("Trail runners/hiking boots", CLOTHING, True),
        _item("Gaiters", CLOTHING, False),
        _item("Water bladder", MEAL_PREP, True),
        _item("Water filter", MEAL_PREP, True, key="water_filter"),
        # A pack stove replaces the car-camping kitchen.
        _item("Lightweight stove", MEAL_PREP, True, key="stove", conflicts=("cooler", "camp_table")),
        _item("Bear canister", MEAL_PREP, False, key="bear_canister"),
        _item("Trowel", CARE, True),
    ),
)

CAR_CAMPING = PackingTemplate(
    key="car-camping",
    name="Car Camping Comfort",
    description="Extra comfort items when weight isn't a concern",
    default_precedence_tier=2,
    items=(
        _keyed("Camp chairs", FURNITURE, False),
        _keyed("Camp table", FURNITURE, False),
        _item("Lantern", SAFETY, False),
        _item("Large cooler", MEAL_PREP, True, key="cooler"),
        _item("Ice", MEAL_PREP, True),
        _item("Tablecloth", FURNITURE, False),
        _item("Camp rug", FURNITURE, False),
        # Below the template tier so a dedicated sleep pad wins the group.
        _keyed("Air mattress", SHELTER, False, tier=1),
        _item("Extra blankets", SHELTER, False),
        _item("Portable speaker", FUN, False),
        _item("Games/cards", FUN, False),
    ),
)

WINTER_CAMPING = PackingTemplate(
    key="winter",
    name="Winter Camping",
    description="Stay warm in cold weather",
    default_precedence_tier=3,
    items=(
        _keyed("4-season tent", SHELTER, True, seasons=("winter",)),
        _keyed("Cold-rated sleeping bag (0-20°F)", SHELTER, True, seasons=("winter",)),
        _keyed("Insulated sleeping pad (R4+)", SHELTER, True, seasons=("winter",)),
        _item("Insulated jacket", CLOTHING, True, key="warm_layer", seasons=("winter",)),
        _item("Base layers (top & bottom)", CLOTHING, True),
        _item("Warm hat/beanie", CLOTHING, True, key="hat", seasons=("winter",)),
        _item("Insulated gloves", CLOTHING, True),
        _item("Warm socks (wool)", CLOTHING, True, key="socks", seasons=("winter",)),
        _item("Insulated boots", CLOTHING, True),
        _item("Hand/toe warmers", CLOTHING, False),
        _item("Hot drink supplies", FOOD, False),
        _item("Snow stakes", SHELTER, False),
    ),
)

CAMPING_WITH_PETS = PackingTemplate(
    key="pets",
    name="Camping with Pets",
    description="Everything your furry friend needs",
    default_precedence_tier=1,
    items=(
        _item("Dog food (measured portions)", PETS, True),
        _item("Collapsible food bowl", PETS, True),
        _item("Collapsible water bowl", PETS, True),
        _item("Treats", PETS, False),
        _item("Food container", PETS, True),
        _item("Dog bed or blanket", PETS, True),
        _item("Familiar toy", PETS, False),
        _item("Dog jacket (if cold)", PETS, False, seasons=("winter", "fall")),
        _item("Leash", PETS, True),
        _item("Collar with ID tags", PETS, True),
        _item("Long tie-out line", PETS, False),
        _item("Stake for tie-out", PETS, False),
        _item("Harness", PETS, False),
        _item("Dog boots (for rough terrain)", PETS, False),
        _item("Pet first aid kit", PETS, True),
        _item("Flea/tick prevention", PETS, True),
        _item("Medications (if needed)", PETS, True),
        _item("Poop bags", PETS, True),
        _item("Towel for drying", PETS, False),
        _item("Dog-safe bug spray", PETS, False),
        _item("Vaccination records", PETS, True),
        _item("Vet contact info", PETS, True),
        _item("Reflective collar or light", PETS, True),
        _item("Portable water bottle with bowl", PETS, False),
        _item("Cooling mat (for hot weather)", PETS, False, seasons=("summer",)),
    ),
)

FAMILY_CAMPING = PackingTemplate(
    key="family",
    name="Family Camping",
    description="Extra items for camping with kids",
    default_precedence_tier=4,
    items=(
        _keyed("Large family tent", SHELTER, True),
        _keyed("Sleeping bags for all", SHELTER, True),
        _keyed("Sleeping pads/air mattresses", SHELTER, True),
        _item("Extra blankets", SHELTER, False),
        _item("Kids' comfort items", SHELTER, False),
        _item("Kid-friendly meals", FOOD, True),
        _item("Lots of snacks", FOOD, True),
        _item("S'mores supplies", FOOD, False),
        _item("Kid-friendly cups/plates", MEAL_PREP, True),
        _item("Wet wipes/baby wipes", CARE, True),
        _item("Diapers (if needed)", CARE, False),
        _item("Kid sunscreen", CARE, True, key="sunscreen"),
        _item("Kid-safe bug spray", CARE, True, key="bug_spray"),
        _item("Extra kid clothes", CLOTHING, True),
        _item("Swimsuits", CLOTHING, False, seasons=("summer",)),
        _item("Games and toys", FUN, False),
        _item("Glow sticks", FUN, False),
        _item("Coloring books/crayons", FUN, False),
        _item("Frisbee/ball", FUN, False),
        _item("Flashlight for each kid", SAFETY, True),
        _item("Whistle for each kid", SAFETY, True),
        _keyed("Camp chairs for all", FURNITURE, False),
    ),
)

PACKING_TEMPLATES = (
    ESSENTIAL_CAMPING,
    COOKING_FOOD,
    SAFETY_FIRST_AID,
    CLOTHING_PERSONAL,
    MEAL_PLANNING,
    BACKPACKING,
    CAR_CAMPING,
    WINTER_CAMPING,
    CAMPING_WITH_PETS,
    FAMILY_CAMPING,
)

_TEMPLATES_BY_KEY = {template.key: template for template in PACKING_TEMPLATES}


def list_templates() -> List[PackingTemplate]:
    return list(PACKING_TEMPLATES)


def get_template(key: str) -> Optional[PackingTemplate]:
    return _TEMPLATES_BY_KEY.get(key)


def get_templates_by_keys(keys: Optional[Iterable[str]]) -> List[PackingTemplate]:
    """
    Look up templates in the order the caller selected them.
    Unknown keys are skipped and a repeated key only counts once.
    """
    selected: List[PackingTemplate] = []
    seen = set()
    for key in keys or []:
        template = _TEMPLATES_BY_KEY.get(key)
        if template is None or key in seen:
            continue
        seen.add(key)
        selected.append(template)
    return selected


def template_keys() -> Sequence[str]:
    return tuple(_TEMPLATES_BY_KEY)
