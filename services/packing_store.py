"""
The packing list store.

Holds one user's packing lists in memory and owns every mutation on them.
Mutations are copy-on-write: the collection, the touched list and the touched
section are rebuilt, so a snapshot handed out earlier never changes under
the reader. Each mutation stamps updated_at and schedules a write to the
repository; a failed write is logged and the in-memory state stays
authoritative. A failed read is fatal: the store refuses to start rather than
save an empty collection over lists it could not load.
"""
import asyncio
import datetime
import logging
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence

from schemas.gear_schema import GearItem
from schemas.packing_schema import PackingItem, PackingList, PackingListMeta, PackingSection, Progress
from schemas.trip_schema import Trip
from services.canonicalizer import normalize_category_id, normalize_item_name
from services.gear_merger import merge_gear_into_sections
from services.packing_generator import build_generation_meta, generate_for_trip, generate_sections
from services.packing_repository import PackingRepository
from services.trip_context import derive_trip_type_from_length, map_camping_style_to_trip_type

logger = logging.getLogger(__name__)

# Fields an item update may not touch.
_PROTECTED_ITEM_FIELDS = {"id"}
# Fields an item update may not clear.
_REQUIRED_ITEM_FIELDS = {"name", "checked"}


class StoreUnavailableError(Exception):
    """The stored packing lists could not be read, so the store refuses to start."""


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _clone_sections(sections: Sequence[PackingSection]) -> List[PackingSection]:
    """Deep copy with fresh ids, every item unchecked and sections expanded."""
    return [
        PackingSection(
            id=_new_id(),
            title=section.title,
            items=[item.model_copy(update={"id": _new_id(), "checked": False}) for item in section.items],
            collapsed=False,
        )
        for section in sections
    ]


class PackingListStore:
    def __init__(self, repository: PackingRepository):
        self._repository = repository
        # Guards read-modify-write of the collection; request handlers run in a threadpool.
        self._lock = threading.RLock()
        # One worker keeps saves in commit order.
        self._save_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="packing-save")
        try:
            self._packing_lists: List[PackingList] = list(repository.load())
        except Exception as e:
            # Starting empty would overwrite the stored lists on the next save.
            logger.error("Could not load packing lists: %s", e)
            raise StoreUnavailableError("Packing lists could not be loaded.") from e

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _commit(self, packing_lists: List[PackingList]) -> None:
        """Publish a new collection and write it out without blocking an event loop."""
        with self._lock:
            self._packing_lists = packing_lists
            snapshot = list(packing_lists)
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is None:
                self._flush(snapshot)
            else:
                loop.run_in_executor(self._save_executor, self._flush, snapshot)

    def _flush(self, snapshot: List[PackingList]) -> None:
        try:
            self._repository.save(snapshot)
        except Exception as e:
            logger.error("Failed to persist %d packing lists: %s", len(snapshot), e)

    # ------------------------------------------------------------------
    # Copy-on-write helpers
    # ------------------------------------------------------------------

    def _update_list(self, list_id: str, transform: Callable[[PackingList], Optional[PackingList]]) -> bool:
        """Replace one list with transform(list). A None result means nothing changed."""
        with self._lock:
            changed = False
            updated_lists = []
            for packing_list in self._packing_lists:
                if packing_list.id == list_id and not changed:
                    updated = transform(packing_list)
                    if updated is not None:
                        packing_list = updated.model_copy(update={"updated_at": _now()})
                        changed = True
                updated_lists.append(packing_list)
            if changed:
                self._commit(updated_lists)
            return changed

    def _update_sections(
        self,
        list_id: str,
        transform: Callable[[List[PackingSection]], Optional[List[PackingSection]]],
    ) -> bool:
        def apply(packing_list: PackingList) -> Optional[PackingList]:
            sections = transform(list(packing_list.sections))
            if sections is None:
                return None
            return packing_list.model_copy(update={"sections": sections})

        return self._update_list(list_id, apply)

    def _update_section(
        self,
        list_id: str,
        section_id: str,
        transform: Callable[[PackingSection], Optional[PackingSection]],
    ) -> bool:
        def apply(sections: List[PackingSection]) -> Optional[List[PackingSection]]:
            for index, section in enumerate(sections):
                if section.id == section_id:
                    updated = transform(section)
                    if updated is None:
                        return None
                    sections[index] = updated
                    return sections
            return None

        return self._update_sections(list_id, apply)

    def _update_items(
        self,
        list_id: str,
        section_id: str,
        transform: Callable[[List[PackingItem]], Optional[List[PackingItem]]],
    ) -> bool:
        def apply(section: PackingSection) -> Optional[PackingSection]:
            items = transform(list(section.items))
            if items is None:
                return None
            return section.model_copy(update={"items": items})

        return self._update_section(list_id, section_id, apply)

    def _update_item(
        self,
        list_id: str,
        section_id: str,
        item_id: str,
        transform: Callable[[PackingItem], PackingItem],
    ) -> bool:
        def apply(items: List[PackingItem]) -> Optional[List[PackingItem]]:
            for index, item in enumerate(items):
                if item.id == item_id:
                    items[index] = transform(item)
                    return items
            return None

        return self._update_items(list_id, section_id, apply)

    def _insert_list(self, packing_list: PackingList) -> str:
        with self._lock:
            self._commit([packing_list] + self._packing_lists)
        return packing_list.id

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    @property
    def packing_lists(self) -> List[PackingList]:
        return list(self._packing_lists)

    def create_packing_list(
        self,
        name: str,
        trip_type: str,
        season: str,
        template_keys: Optional[Sequence[str]] = None,
        trip_id: Optional[str] = None,
        is_template: bool = False,
        gear_items: Optional[Sequence[GearItem]] = None,
        trip_days: int = 1,
    ) -> str:
        """
        Create a list and return its id.

        With template keys the sections are generated (dedup, quantities,
        gear merge); without them the default empty sections are used.
        """
        sections = generate_sections(template_keys, season, trip_days, gear_items)
        meta = build_generation_meta(template_keys, season, trip_days) if template_keys else None
        now = _now()
        return self._insert_list(
            PackingList(
                id=_new_id(),
                name=name,
                trip_type=trip_type,
                season=season,
                sections=sections,
                trip_id=trip_id,
                is_template=is_template,
                created_at=now,
                updated_at=now,
                meta=meta,
            )
        )

    def create_packing_list_for_trip(
        self,
        name: str,
        trip: Trip,
        template_keys: Optional[Sequence[str]] = None,
        trip_id: Optional[str] = None,
        gear_items: Optional[Sequence[GearItem]] = None,
    ) -> str:
        """Create a list with the season and length resolved from the trip itself."""
        result = generate_for_trip(trip, template_keys, gear_items)
        trip_type = (
            map_camping_style_to_trip_type(trip.camping_style)
            or derive_trip_type_from_length(result.context.trip_days)
        )
        now = _now()
        return self._insert_list(
            PackingList(
                id=_new_id(),
                name=name,
                trip_type=trip_type,
                season=result.context.season,
                sections=result.sections,
                trip_id=trip_id,
                is_template=False,
                created_at=now,
                updated_at=now,
                meta=result.meta,
            )
        )

    def delete_packing_list(self, list_id: str) -> bool:
        with self._lock:
            remaining = [pl for pl in self._packing_lists if pl.id != list_id]
            if len(remaining) == len(self._packing_lists):
                return False
            self._commit(remaining)
            return True

    def get_packing_list_by_id(self, list_id: str) -> Optional[PackingList]:
        return next((pl for pl in self._packing_lists if pl.id == list_id), None)

    def get_packing_lists_by_trip_id(self, trip_id: str) -> List[PackingList]:
        return [pl for pl in self._packing_lists if pl.trip_id == trip_id]

    def get_templates(self) -> List[PackingList]:
        return [pl for pl in self._packing_lists if pl.is_template]

    def get_active_lists(self) -> List[PackingList]:
        return [pl for pl in self._packing_lists if not pl.is_template]

    def has_item_named(self, list_id: str, name: str) -> bool:
        """Lets callers check for a name collision before a manual add."""
        packing_list = self.get_packing_list_by_id(list_id)
        if packing_list is None:
            return False
        wanted = normalize_item_name(name)
        return any(
            normalize_item_name(item.name) == wanted
            for section in packing_list.sections
            for item in section.items
        )

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def add_section(self, list_id: str, title: str) -> Optional[str]:
        """Append an empty section. Returns None if the title is already taken."""
        section_id = _new_id()
        wanted = normalize_category_id(title)

        def apply(sections: List[PackingSection]) -> Optional[List[PackingSection]]:
            if any(normalize_category_id(s.title) == wanted for s in sections):
                return None
            return sections + [PackingSection(id=section_id, title=title, items=[], collapsed=False)]

        return section_id if self._update_sections(list_id, apply) else None

    def rename_section(self, list_id: str, section_id: str, title: str) -> bool:
        wanted = normalize_category_id(title)

        def apply(sections: List[PackingSection]) -> Optional[List[PackingSection]]:
            if any(s.id != section_id and normalize_category_id(s.title) == wanted for s in sections):
                return None
            if not any(s.id == section_id for s in sections):
                return None
            return [s.model_copy(update={"title": title}) if s.id == section_id else s for s in sections]

        return self._update_sections(list_id, apply)

    def delete_section(self, list_id: str, section_id: str) -> bool:
        def apply(sections: List[PackingSection]) -> Optional[List[PackingSection]]:
            remaining = [s for s in sections if s.id != section_id]
            return remaining if len(remaining) != len(sections) else None

        return self._update_sections(list_id, apply)

    def reorder_sections(self, list_id: str, from_index: int, to_index: int) -> bool:
        def apply(sections: List[PackingSection]) -> Optional[List[PackingSection]]:
            if not (0 <= from_index < len(sections)) or not (0 <= to_index < len(sections)):
                return None
            moved = sections.pop(from_index)
            sections.insert(to_index, moved)
            return sections

        return self._update_sections(list_id, apply)

    def toggle_section_collapsed(self, list_id: str, section_id: str) -> bool:
        return self._update_section(
            list_id, section_id, lambda s: s.model_copy(update={"collapsed": not s.collapsed})
        )

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item(self, list_id: str, section_id: str, name: str, essential: Optional[bool] = None) -> Optional[str]:
        item_id = _new_id()
        item = PackingItem(id=item_id, name=name, checked=False, essential=essential, source="custom")
        added = self._update_items(list_id, section_id, lambda items: items + [item])
        return item_id if added else None

    def update_item(self, list_id: str, section_id: str, item_id: str, updates: Dict[str, Any]) -> bool:
        allowed = {
            k: v for k, v in updates.items()
            if k not in _PROTECTED_ITEM_FIELDS and not (k in _REQUIRED_ITEM_FIELDS and v is None)
        }
        return self._update_item(
            list_id, section_id, item_id, lambda item: PackingItem.model_validate({**item.model_dump(), **allowed})
        )

    def delete_item(self, list_id: str, section_id: str, item_id: str) -> bool:
        def apply(items: List[PackingItem]) -> Optional[List[PackingItem]]:
            remaining = [i for i in items if i.id != item_id]
            return remaining if len(remaining) != len(items) else None

        return self._update_items(list_id, section_id, apply)

    def toggle_item_checked(self, list_id: str, section_id: str, item_id: str) -> bool:
        return self._update_item(
            list_id, section_id, item_id, lambda item: item.model_copy(update={"checked": not item.checked})
        )

    def duplicate_item(self, list_id: str, section_id: str, item_id: str) -> Optional[str]:
        """Copy an item, unchecked, to the end of its section under a '(copy)' name."""
        copy_id = _new_id()

        def apply(items: List[PackingItem]) -> Optional[List[PackingItem]]:
            original = next((i for i in items if i.id == item_id), None)
            if original is None:
                return None
            taken = {normalize_item_name(i.name) for i in items}
            name = f"{original.name} (copy)"
            counter = 2
            while normalize_item_name(name) in taken:
                name = f"{original.name} (copy {counter})"
                counter += 1
            return items + [original.model_copy(update={"id": copy_id, "name": name, "checked": False})]

        return copy_id if self._update_items(list_id, section_id, apply) else None

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    def _set_all_checked(self, list_id: str, checked: bool) -> bool:
        def apply(sections: List[PackingSection]) -> List[PackingSection]:
            return [
                s.model_copy(update={"items": [i.model_copy(update={"checked": checked}) for i in s.items]})
                for s in sections
            ]

        return self._update_sections(list_id, apply)

    def check_all_items(self, list_id: str) -> bool:
        return self._set_all_checked(list_id, True)

    def uncheck_all_items(self, list_id: str) -> bool:
        return self._set_all_checked(list_id, False)

    def merge_gear(self, list_id: str, gear_items: Sequence[GearItem]) -> bool:
        """Fold gear closet items into an existing list."""
        return self._update_sections(list_id, lambda sections: merge_gear_into_sections(sections, gear_items))

    # ------------------------------------------------------------------
    # Progress & meta
    # ------------------------------------------------------------------

    def get_progress(self, list_id: str) -> Progress:
        packing_list = self.get_packing_list_by_id(list_id)
        if packing_list is None:
            return Progress(packed=0, total=0, percentage=0)
        items = [item for section in packing_list.sections for item in section.items]
        total = len(items)
        packed = sum(1 for item in items if item.checked)
        percentage = int(packed / total * 100 + 0.5) if total else 0
        return Progress(packed=packed, total=total, percentage=percentage)

    def set_do_not_prompt_first_aid(self, list_id: str, value: bool) -> bool:
        def apply(packing_list: PackingList) -> PackingList:
            meta = packing_list.meta or PackingListMeta()
            return packing_list.model_copy(
                update={"meta": meta.model_copy(update={"do_not_prompt_first_aid": value})}
            )

        return self._update_list(list_id, apply)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def save_as_template(self, list_id: str, new_name: Optional[str] = None) -> Optional[str]:
        source = self.get_packing_list_by_id(list_id)
        if source is None:
            return None
        now = _now()
        return self._insert_list(
            PackingList(
                id=_new_id(),
                name=new_name or f"{source.name} Template",
                trip_type=source.trip_type,
                season=source.season,
                sections=_clone_sections(source.sections),
                is_template=True,
                created_at=now,
                updated_at=now,
            )
        )

    def copy_template_to_trip(self, template_id: str, trip_id: Optional[str] = None) -> Optional[str]:
        template = self.get_packing_list_by_id(template_id)
        if template is None:
            return None
        now = _now()
        name = template.name[: -len(" Template")] if template.name.endswith(" Template") else template.name
        return self._insert_list(
            PackingList(
                id=_new_id(),
                name=name,
                trip_type=template.trip_type,
                season=template.season,
                sections=_clone_sections(template.sections),
                trip_id=trip_id,
                is_template=False,
                created_at=now,
                updated_at=now,
            )
        )

    def toggle_template_status(self, list_id: str) -> bool:
        def apply(packing_list: PackingList) -> PackingList:
            becoming_template = not packing_list.is_template
            return packing_list.model_copy(
                update={
                    "is_template": becoming_template,
                    "trip_id": None if becoming_template else packing_list.trip_id,
                }
            )

        return self._update_list(list_id, apply)
