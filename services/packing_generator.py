"""
The packing list generation pipeline.

trip context -> template selection -> dedup -> sections -> quantities -> gear
"""
import datetime
import logging
import uuid
from typing import Dict, List, NamedTuple, Optional, Sequence

from schemas.gear_schema import GearItem
from schemas.packing_schema import PackingItem, PackingListMeta, PackingSection
from schemas.template_schema import DedupedItem
from schemas.trip_schema import Trip, TripContext
from services.canonicalizer import normalize_category_id
from services.dedup_engine import deduplicate_template_items
from services.gear_merger import merge_gear_into_sections
from services.quantity_scaler import apply_quantities, get_seasonal_note
from services.template_catalog import DEFAULT_SECTIONS, get_templates_by_keys
from services.trip_context import build_trip_context, suggest_template_keys

logger = logging.getLogger(__name__)


class GenerationResult(NamedTuple):
    context: TripContext
    template_keys: List[str]
    sections: List[PackingSection]
    meta: PackingListMeta


def _sort_key(text: str) -> str:
    return text.casefold()


def default_sections() -> List[PackingSection]:
    """The empty skeleton used when no usable templates were selected."""
    return [
        PackingSection(id=str(uuid.uuid4()), title=title, items=[], collapsed=False)
        for title in sorted(DEFAULT_SECTIONS, key=_sort_key)
    ]


def build_sections(deduped: Sequence[DedupedItem], season: str) -> List[PackingSection]:
    """
    Place deduplicated items into one section per category.
    Categories that only differ in case or '&' vs 'and' share a section.
    """
    sections: Dict[str, PackingSection] = {}
    for entry in deduped:
        title = entry.category or "Other"
        section_key = normalize_category_id(title)
        section = sections.get(section_key)
        if section is None:
            section = PackingSection(id=str(uuid.uuid4()), title=title, items=[], collapsed=False)
            sections[section_key] = section
        section.items.append(
            PackingItem(
                id=str(uuid.uuid4()),
                name=entry.item.name,
                checked=False,
                essential=entry.essential,
                note=get_seasonal_note(entry.item.name, season),
                source="template",
            )
        )

    ordered = sorted(sections.values(), key=lambda s: _sort_key(s.title))
    for section in ordered:
        section.items.sort(key=lambda item: _sort_key(item.name))
    return ordered


def generate_sections(
    template_keys: Optional[Sequence[str]],
    season: str,
    trip_days: int = 1,
    gear_items: Optional[Sequence[GearItem]] = None,
) -> List[PackingSection]:
    templates = get_templates_by_keys(template_keys)
    if not templates:
        if template_keys:
            logger.info("No known templates in %s, using default sections", list(template_keys))
        sections = default_sections()
    else:
        deduped = deduplicate_template_items(templates, season)
        sections = apply_quantities(build_sections(deduped, season), trip_days)
        logger.debug(
            "Generated %d items from templates %s (%s, %d days)",
            len(deduped), [t.key for t in templates], season, trip_days,
        )
    if gear_items:
        sections = merge_gear_into_sections(sections, gear_items)
    return sections


def build_generation_meta(template_keys: Optional[Sequence[str]], season: str, trip_days: int) -> PackingListMeta:
    return PackingListMeta(
        trip_days_used_for_generation=trip_days,
        season_used_for_generation=season,
        selected_template_keys=list(template_keys or []),
        generated_at=datetime.datetime.now(datetime.timezone.utc).isoformat(),
    )


def generate_for_trip(
    trip: Optional[Trip],
    template_keys: Optional[Sequence[str]] = None,
    gear_items: Optional[Sequence[GearItem]] = None,
) -> GenerationResult:
    """Resolve the trip's context and generate its sections.
    Without an explicit selection the suggested templates for the trip are used."""
    context = build_trip_context(trip)
    keys = list(template_keys) if template_keys else suggest_template_keys(context)
    sections = generate_sections(keys, context.season, context.trip_days, gear_items)
    meta = build_generation_meta(keys, context.season, context.trip_days)
    return GenerationResult(context=context, template_keys=keys, sections=sections, meta=meta)


def needs_regeneration(meta: Optional[PackingListMeta], trip_days: int, season: str) -> bool:
    """True when the trip changed length or season since the list was generated."""
    if meta is None or meta.trip_days_used_for_generation is None:
        return False
    return meta.trip_days_used_for_generation != trip_days or meta.season_used_for_generation != season
