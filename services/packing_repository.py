"""
Persistence for packing lists.

All of a user's lists are stored as one document under a single key:

    {"schemaVersion": 1, "packingLists": [ ...PackingList in camelCase... ]}

Older documents (a bare list of packing lists, or the app's original
{"state": {"packingLists": [...]}, "version": n} envelope) are migrated on load.
"""
import copy
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from firebase_admin import db
from pydantic import ValidationError

from schemas.packing_schema import PackingList

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class PackingRepository(Protocol):
    def load(self) -> List[PackingList]:
        ...

    def save(self, packing_lists: List[PackingList]) -> None:
        ...


def serialize_lists(
    packing_lists: List[PackingList],
    unreadable: Sequence[Dict[str, Any]] = (),
) -> Dict[str, Any]:
    """Build the stored document. Unreadable raw lists are written back untouched."""
    return {
        "schemaVersion": SCHEMA_VERSION,
        "packingLists": [
            packing_list.model_dump(by_alias=True, exclude_none=True)
            for packing_list in packing_lists
        ] + [copy.deepcopy(raw_list) for raw_list in unreadable],
    }


def _migrate_v0_item(item: Dict[str, Any]) -> Dict[str, Any]:
    item = dict(item)
    if item.pop("fromGearCloset", False) and not item.get("source"):
        item["source"] = "gearCloset"
    return item


def migrate_document(document: Any) -> Dict[str, Any]:
    """Bring a stored document up to SCHEMA_VERSION."""
    if document is None:
        return {"schemaVersion": SCHEMA_VERSION, "packingLists": []}

    if isinstance(document, list):
        raw_lists = document
        version = 0
    elif "schemaVersion" in document:
        raw_lists = document.get("packingLists") or []
        version = int(document["schemaVersion"])
    else:
        raw_lists = (document.get("state") or {}).get("packingLists") or []
        version = 0

    if version > SCHEMA_VERSION:
        logger.warning("Stored packing lists use schema %s, newer than %s", version, SCHEMA_VERSION)

    raw_lists = copy.deepcopy(raw_lists)
    if version < 1:
        for raw_list in raw_lists:
            raw_list["sections"] = [
                {**section, "items": [_migrate_v0_item(i) for i in section.get("items") or []]}
                for section in raw_list.get("sections") or []
            ]
            raw_list.setdefault("isTemplate", False)
        logger.info("Migrated %d packing lists from schema %s", len(raw_lists), version)

    return {"schemaVersion": SCHEMA_VERSION, "packingLists": raw_lists}


def read_document(document: Any) -> Tuple[List[PackingList], List[Dict[str, Any]]]:
    """
    Parse a stored document into (lists, unreadable raw lists).
    Unreadable lists are logged and kept aside so a later save can write them back.
    """
    migrated = migrate_document(document)
    packing_lists = []
    unreadable = []
    for raw_list in migrated["packingLists"]:
        try:
            packing_lists.append(PackingList.model_validate(raw_list))
        except ValidationError as e:
            list_id = raw_list.get("id") if isinstance(raw_list, dict) else None
            logger.error("Skipping unreadable packing list %s: %s", list_id, e)
            unreadable.append(raw_list)
    return packing_lists, unreadable


def deserialize_lists(document: Any) -> List[PackingList]:
    """Parse a stored document, leaving out lists that fail validation."""
    return read_document(document)[0]


class InMemoryPackingRepository:
    """Keeps the serialized document in memory. Used for tests and local runs."""

    def __init__(self, document: Optional[Any] = None):
        self.document = document
        self.save_count = 0
        self._unreadable: List[Dict[str, Any]] = []

    def load(self) -> List[PackingList]:
        packing_lists, self._unreadable = read_document(self.document)
        return packing_lists

    def save(self, packing_lists: List[PackingList]) -> None:
        self.document = serialize_lists(packing_lists, self._unreadable)
        self.save_count += 1


class FirebasePackingRepository:
    """Stores a user's packing lists in the Firebase Realtime Database."""

    def __init__(self, user_id: str, storage_key: str = "tent-lantern-packing"):
        self.path = f"{storage_key}/{user_id}"
        self._unreadable: List[Dict[str, Any]] = []

    def load(self) -> List[PackingList]:
        document = db.reference(self.path).get()
        packing_lists, self._unreadable = read_document(document)
        return packing_lists

    def save(self, packing_lists: List[PackingList]) -> None:
        db.reference(self.path).set(serialize_lists(packing_lists, self._unreadable))
