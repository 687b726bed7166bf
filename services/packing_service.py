import logging
from typing import Dict, Optional

from core.config import settings
from schemas.trip_schema import TripPackingRequest
from services.packing_repository import FirebasePackingRepository, InMemoryPackingRepository, PackingRepository
from services.packing_store import PackingListStore

logger = logging.getLogger(__name__)

# One store per signed-in user, loaded on first use.
_stores: Dict[str, PackingListStore] = {}


def build_repository(user_id: str, backend: Optional[str] = None) -> PackingRepository:
    """Pick the storage backend for a user's packing lists."""
    backend = (backend or settings.PACKING_STORAGE_BACKEND).lower()
    if backend == "memory":
        return InMemoryPackingRepository()
    if backend != "firebase":
        logger.warning("Unknown PACKING_STORAGE_BACKEND %r, using firebase", backend)
    return FirebasePackingRepository(user_id, storage_key=settings.PACKING_STORAGE_KEY)


def get_store_for_user(user_id: str) -> PackingListStore:
    """
    The user's store, loaded on first use.
    Raises StoreUnavailableError when the stored lists can't be read; nothing is cached then.
    """
    store = _stores.get(user_id)
    if store is None:
        loaded = PackingListStore(build_repository(user_id))
        # Two first requests may race; both get the store that was cached first.
        store = _stores.setdefault(user_id, loaded)
        if store is loaded:
            logger.info("Loaded %d packing lists for user %s", len(store.packing_lists), user_id)
    return store


def reset_stores():
    """Forget every cached store. The next request reloads from storage."""
    _stores.clear()


def generate_packing_list_for_trip(request: TripPackingRequest, user_id: str):
    """
    Generates a packing list from a trip's dates, style and tags.
    Uses the suggested templates for the trip unless the caller picked some.
    """
    store = get_store_for_user(user_id)
    list_id = store.create_packing_list_for_trip(
        name=request.name,
        trip=request.trip,
        template_keys=request.template_keys,
        trip_id=request.trip_id,
        gear_items=request.gear_items,
    )
    return store.get_packing_list_by_id(list_id)
