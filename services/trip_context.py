"""
Resolves the packing context (season, trip length, style) for a trip.

Nothing in here raises on bad trip data: missing or unparseable dates fall
back to a one day summer trip.
"""
import datetime
import logging
from typing import List, Optional, Union

from schemas.trip_schema import SeasonInfo, Trip, TripContext

logger = logging.getLogger(__name__)

DateLike = Union[str, datetime.date, datetime.datetime, None]

_MONTH_TO_SEASON = {
    12: "winter", 1: "winter", 2: "winter",
    3: "spring", 4: "spring", 5: "spring",
    6: "summer", 7: "summer", 8: "summer",
    9: "fall", 10: "fall", 11: "fall",
}

_OPPOSITE_SEASON = {"winter": "summer", "summer": "winter", "spring": "fall", "fall": "spring"}

# (substring, hint) checked against the lowercased location name
_LOCATION_HINT_RULES = [
    (("dune", "beach", "coast"), "coastal"),
    (("desert",), "desert"),
    (("mountain", "peak", "summit"), "mountains"),
    (("forest", "woods"), "forest"),
]


def parse_date(value: DateLike) -> Optional[datetime.date]:
    """Parse an ISO date or datetime string. Returns None when it can't."""
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        logger.warning("Could not parse trip date %r", value)
        return None


def month_to_season(month: int, latitude: Optional[float] = None) -> str:
    season = _MONTH_TO_SEASON[month]
    if latitude is not None and latitude < 0:
        season = _OPPOSITE_SEASON[season]
    return season


def is_winter_camping(trip: Optional[Trip]) -> bool:
    if trip is None:
        return False
    if (trip.camping_style or "").upper() == "WINTER":
        return True
    if trip.winter_camping is True:
        return True
    if trip.tags and "winter" in trip.tags:
        return True
    return trip.trip_type == "winter"


def get_season_info(trip: Optional[Trip]) -> SeasonInfo:
    """
    Work out the packing season for a trip.

    Priority:
    1. The user's explicit override
    2. A winter camping signal on the trip
    3. The month of the start date (flipped south of the equator)
    4. Summer
    """
    if trip is not None and trip.packing_season_override:
        return SeasonInfo(
            season=trip.packing_season_override,
            source="override",
            helper_text="You picked this season for this trip.",
        )

    if is_winter_camping(trip):
        return SeasonInfo(season="winter", source="winterCamping", helper_text="Based on Winter Camping.")

    start = parse_date(trip.start_date) if trip is not None else None
    if start is not None:
        return SeasonInfo(
            season=month_to_season(start.month, trip.latitude),
            source="dates",
            helper_text="Based on your trip dates.",
        )

    return SeasonInfo(season="summer", source="default", helper_text="No trip dates set.")


def resolve_season(trip: Optional[Trip]) -> str:
    return get_season_info(trip).season


def compute_trip_days(start_date: DateLike, end_date: DateLike) -> int:
    """Inclusive day count between two dates, at least 1."""
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start is None or end is None:
        return 1
    return max(1, (end - start).days + 1)


def normalize_camping_style(style: Optional[str]) -> str:
    if not style:
        return "unknown"
    normalized = style.lower().replace("-", "_").replace(" ", "_")
    if "car" in normalized:
        return "car_camping"
    if "backpack" in normalized:
        return "backpacking"
    if "hammock" in normalized:
        return "hammock"
    if "rv" in normalized or "camper" in normalized:
        return "rv"
    return "unknown"


def extract_location_hints(location_name: Optional[str]) -> List[str]:
    if not location_name:
        return []
    lower = location_name.lower()
    return [hint for words, hint in _LOCATION_HINT_RULES if any(word in lower for word in words)]


def derive_trip_type_from_length(trip_days: int) -> str:
    """Nights are one less than days."""
    nights = max(0, trip_days - 1)
    if nights <= 1:
        return "one-night"
    if nights <= 2:
        return "weekend"
    return "multi-day"


def map_camping_style_to_trip_type(camping_style: Optional[str]) -> Optional[str]:
    if not camping_style:
        return None
    style = camping_style.upper()
    if style == "BACKPACKING":
        return "backpacking"
    if style in ("CAR_CAMPING", "RV", "OVERLANDING", "ROOFTOP_TENT"):
        return "car-camping"
    return None


def build_trip_context(trip: Optional[Trip]) -> TripContext:
    info = get_season_info(trip)
    if trip is None:
        return TripContext(season=info.season, season_source=info.source)
    return TripContext(
        season=info.season,
        season_source=info.source,
        trip_days=compute_trip_days(trip.start_date, trip.end_date),
        style=normalize_camping_style(trip.camping_style),
        location_hints=extract_location_hints(trip.location_name),
    )


# Ordered (predicate, template key) pairs; every matching rule contributes.
_TEMPLATE_SUGGESTION_RULES = [
    (lambda ctx: True, "essential"),
    (lambda ctx: True, "cooking"),
    (lambda ctx: True, "safety"),
    (lambda ctx: True, "clothing"),
    (lambda ctx: ctx.style == "backpacking", "backpacking"),
    (lambda ctx: ctx.style in ("car_camping", "rv"), "car-camping"),
    (lambda ctx: ctx.season == "winter", "winter"),
]


def suggest_template_keys(context: TripContext) -> List[str]:
    """Default template selection for a trip when the user hasn't picked any."""
    return [key for predicate, key in _TEMPLATE_SUGGESTION_RULES if predicate(context)]
