"""
Deduplication of items across selected packing templates.

Given the templates a user picked (in the order they picked them) and the
trip's season, produce one item per canonical key plus the standalone items
that aren't exact-name duplicates.

Scoring: effective precedence tier (item tier, else template tier) plus a
season bonus when the item is tagged for the trip's season. Ties go to the
template selected first, then to catalog order inside that template.
"""
from typing import Dict, List, NamedTuple, Sequence, Set

from schemas.template_schema import DedupedItem, PackingTemplate, PackingTemplateItem
from services.canonicalizer import normalize_item_name

SEASON_BONUS = 10


class _Candidate(NamedTuple):
    item: PackingTemplateItem
    template_key: str
    score: int
    selection_index: int
    catalog_index: int


def effective_precedence_tier(item: PackingTemplateItem, template: PackingTemplate) -> int:
    if item.precedence_tier is not None:
        return item.precedence_tier
    return template.default_precedence_tier


def score_item(item: PackingTemplateItem, template: PackingTemplate, season: str) -> int:
    bonus = SEASON_BONUS if season in item.season_tags else 0
    return effective_precedence_tier(item, template) + bonus


def _pick_winner(candidates: List[_Candidate]) -> _Candidate:
    return min(candidates, key=lambda c: (-c.score, c.selection_index, c.catalog_index))


def deduplicate_template_items(templates: Sequence[PackingTemplate], season: str) -> List[DedupedItem]:
    """
    Merge the items of the selected templates into a non-redundant list.

    Pure function: identical (templates, season) always yields the same list.
    Winners come first, in the order their canonical key was first seen,
    followed by the surviving standalone items in selection order.
    """
    groups: Dict[str, List[_Candidate]] = {}
    standalone: List[DedupedItem] = []

    for selection_index, template in enumerate(templates):
        for catalog_index, item in enumerate(template.items):
            if item.canonical_key:
                groups.setdefault(item.canonical_key, []).append(
                    _Candidate(
                        item=item,
                        template_key=template.key,
                        score=score_item(item, template, season),
                        selection_index=selection_index,
                        catalog_index=catalog_index,
                    )
                )
            else:
                standalone.append(DedupedItem(item=item, template_key=template.key))

    winners = {key: _pick_winner(candidates) for key, candidates in groups.items()}

    # One pass: conflicts named by any winner knock out winners of other groups.
    conflicting: Set[str] = set()
    for key, winner in winners.items():
        conflicting.update(c for c in winner.item.conflicts_with if c != key)

    survivors: List[DedupedItem] = []
    seen_names: Set[str] = set()
    for key, winner in winners.items():
        name = normalize_item_name(winner.item.name)
        if key in conflicting or name in seen_names:
            continue
        seen_names.add(name)
        survivors.append(DedupedItem(item=winner.item, template_key=winner.template_key))

    for entry in standalone:
        name = normalize_item_name(entry.item.name)
        if name in seen_names:
            continue
        seen_names.add(name)
        survivors.append(entry)

    return survivors
