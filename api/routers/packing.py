from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
from schemas.packing_schema import (
    GearMergeRequest,
    ItemCreate,
    ItemUpdate,
    PackingList,
    PackingListCreate,
    Progress,
    SectionCreate,
    SectionReorder,
    TemplateCopyRequest,
    TemplateSaveRequest,
)
from schemas.trip_schema import TripPackingRequest
from services import packing_service
from services.packing_store import PackingListStore, StoreUnavailableError
from core.security import get_current_user

router = APIRouter(
    prefix="/packing",
    tags=["Packing"],
    responses={404: {"description": "Not found"}},
)


def get_user_store(current_user: dict = Depends(get_current_user)) -> PackingListStore:
    """Dependency that hands out the signed-in user's packing list store."""
    try:
        return packing_service.get_store_for_user(current_user['uid'])
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


def _require_list(store: PackingListStore, list_id: str) -> PackingList:
    packing_list = store.get_packing_list_by_id(list_id)
    if not packing_list:
        raise HTTPException(status_code=404, detail="Packing list not found.")
    return packing_list


def _require_section(store: PackingListStore, list_id: str, section_id: str):
    packing_list = _require_list(store, list_id)
    section = next((s for s in packing_list.sections if s.id == section_id), None)
    if not section:
        raise HTTPException(status_code=404, detail="Section not found.")
    return section


def _require_item(store: PackingListStore, list_id: str, section_id: str, item_id: str):
    section = _require_section(store, list_id, section_id)
    if not any(item.id == item_id for item in section.items):
        raise HTTPException(status_code=404, detail="Packing list item not found.")


# --- Lists ---

@router.get("", response_model=List[PackingList])
def get_packing_lists(
    trip_id: Optional[str] = Query(None, description="Only lists attached to this trip"),
    templates: Optional[bool] = Query(None, description="true for saved templates, false for active lists"),
    store: PackingListStore = Depends(get_user_store),
):
    """Retrieves the user's packing lists, newest first."""
    if templates is None:
        lists = store.packing_lists
    elif templates:
        lists = store.get_templates()
    else:
        lists = store.get_active_lists()
    if trip_id is not None:
        lists = [pl for pl in lists if pl.trip_id == trip_id]
    return lists


@router.post("", response_model=PackingList, status_code=201)
def create_packing_list(
    request: PackingListCreate,
    store: PackingListStore = Depends(get_user_store),
):
    """
    Creates a new packing list.
    With template keys the list is generated from the catalog (deduplicated,
    scaled to the trip length and merged with any gear closet items).
    """
    try:
        list_id = store.create_packing_list(
            name=request.name,
            trip_type=request.trip_type,
            season=request.season,
            template_keys=request.template_keys,
            trip_id=request.trip_id,
            is_template=request.is_template,
            gear_items=request.gear_items,
            trip_days=request.trip_days,
        )
        return store.get_packing_list_by_id(list_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {e}")


@router.post("/generate", response_model=PackingList, status_code=201)
def generate_for_trip(
    request: TripPackingRequest,
    current_user: dict = Depends(get_current_user),
):
    """
    Generates a packing list from a trip.
    Season and trip length come from the trip's dates, style and tags.
    """
    try:
        return packing_service.generate_packing_list_for_trip(request, current_user['uid'])
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {e}")


@router.get("/{list_id}", response_model=PackingList)
def get_packing_list(list_id: str, store: PackingListStore = Depends(get_user_store)):
    """Retrieves a single packing list."""
    return _require_list(store, list_id)


@router.delete("/{list_id}", status_code=204)
def delete_packing_list(list_id: str, store: PackingListStore = Depends(get_user_store)):
    if not store.delete_packing_list(list_id):
        raise HTTPException(status_code=404, detail="Packing list not found.")


@router.get("/{list_id}/progress", response_model=Progress)
def get_progress(list_id: str, store: PackingListStore = Depends(get_user_store)):
    """Packed vs total items for a list."""
    _require_list(store, list_id)
    return store.get_progress(list_id)


# --- Sections ---

@router.post("/{list_id}/sections", response_model=PackingList, status_code=201)
def add_section(list_id: str, request: SectionCreate, store: PackingListStore = Depends(get_user_store)):
    _require_list(store, list_id)
    if store.add_section(list_id, request.title) is None:
        raise HTTPException(status_code=409, detail=f"A section named '{request.title}' already exists.")
    return store.get_packing_list_by_id(list_id)


@router.post("/{list_id}/sections/reorder", response_model=PackingList)
def reorder_sections(list_id: str, request: SectionReorder, store: PackingListStore = Depends(get_user_store)):
    _require_list(store, list_id)
    if not store.reorder_sections(list_id, request.from_index, request.to_index):
        raise HTTPException(status_code=400, detail="Section index out of range.")
    return store.get_packing_list_by_id(list_id)


@router.put("/{list_id}/sections/{section_id}", response_model=PackingList)
def rename_section(
    list_id: str,
    section_id: str,
    request: SectionCreate,
    store: PackingListStore = Depends(get_user_store),
):
    _require_section(store, list_id, section_id)
    if not store.rename_section(list_id, section_id, request.title):
        raise HTTPException(status_code=409, detail=f"A section named '{request.title}' already exists.")
    return store.get_packing_list_by_id(list_id)


@router.delete("/{list_id}/sections/{section_id}", response_model=PackingList)
def delete_section(list_id: str, section_id: str, store: PackingListStore = Depends(get_user_store)):
    _require_section(store, list_id, section_id)
    store.delete_section(list_id, section_id)
    return store.get_packing_list_by_id(list_id)


@router.put("/{list_id}/sections/{section_id}/collapse", response_model=PackingList)
def toggle_section_collapsed(list_id: str, section_id: str, store: PackingListStore = Depends(get_user_store)):
    _require_section(store, list_id, section_id)
    store.toggle_section_collapsed(list_id, section_id)
    return store.get_packing_list_by_id(list_id)


# --- Items ---

@router.post("/{list_id}/sections/{section_id}/items", response_model=PackingList, status_code=201)
def add_item(
    list_id: str,
    section_id: str,
    request: ItemCreate,
    store: PackingListStore = Depends(get_user_store),
):
    """Adds a custom item. Names already on the list are rejected."""
    _require_section(store, list_id, section_id)
    if store.has_item_named(list_id, request.name):
        raise HTTPException(status_code=409, detail=f"'{request.name}' is already on this list.")
    store.add_item(list_id, section_id, request.name, request.essential)
    return store.get_packing_list_by_id(list_id)


@router.patch("/{list_id}/sections/{section_id}/items/{item_id}", response_model=PackingList)
def update_item(
    list_id: str,
    section_id: str,
    item_id: str,
    request: ItemUpdate,
    store: PackingListStore = Depends(get_user_store),
):
    _require_item(store, list_id, section_id, item_id)
    store.update_item(list_id, section_id, item_id, request.model_dump(exclude_unset=True))
    return store.get_packing_list_by_id(list_id)


@router.delete("/{list_id}/sections/{section_id}/items/{item_id}", response_model=PackingList)
def delete_item(list_id: str, section_id: str, item_id: str, store: PackingListStore = Depends(get_user_store)):
    _require_item(store, list_id, section_id, item_id)
    store.delete_item(list_id, section_id, item_id)
    return store.get_packing_list_by_id(list_id)


@router.put("/{list_id}/sections/{section_id}/items/{item_id}/toggle", response_model=PackingList)
def toggle_item(list_id: str, section_id: str, item_id: str, store: PackingListStore = Depends(get_user_store)):
    """Toggles the checked status of a single item."""
    _require_item(store, list_id, section_id, item_id)
    store.toggle_item_checked(list_id, section_id, item_id)
    return store.get_packing_list_by_id(list_id)


@router.post("/{list_id}/sections/{section_id}/items/{item_id}/duplicate", response_model=PackingList)
def duplicate_item(list_id: str, section_id: str, item_id: str, store: PackingListStore = Depends(get_user_store)):
    _require_item(store, list_id, section_id, item_id)
    store.duplicate_item(list_id, section_id, item_id)
    return store.get_packing_list_by_id(list_id)


# --- Bulk & gear ---

@router.put("/{list_id}/check-all", response_model=PackingList)
def check_all(list_id: str, store: PackingListStore = Depends(get_user_store)):
    _require_list(store, list_id)
    store.check_all_items(list_id)
    return store.get_packing_list_by_id(list_id)


@router.put("/{list_id}/uncheck-all", response_model=PackingList)
def uncheck_all(list_id: str, store: PackingListStore = Depends(get_user_store)):
    _require_list(store, list_id)
    store.uncheck_all_items(list_id)
    return store.get_packing_list_by_id(list_id)


@router.post("/{list_id}/gear", response_model=PackingList)
def merge_gear(list_id: str, request: GearMergeRequest, store: PackingListStore = Depends(get_user_store)):
    """Adds gear closet items to the list, skipping anything already on it."""
    _require_list(store, list_id)
    store.merge_gear(list_id, request.gear_items)
    return store.get_packing_list_by_id(list_id)


# --- Templates ---

@router.post("/{list_id}/save-as-template", response_model=PackingList, status_code=201)
def save_as_template(
    list_id: str,
    request: Optional[TemplateSaveRequest] = None,
    store: PackingListStore = Depends(get_user_store),
):
    """Saves a copy of the list as a reusable template (fresh ids, nothing checked)."""
    _require_list(store, list_id)
    template_id = store.save_as_template(list_id, request.new_name if request else None)
    return store.get_packing_list_by_id(template_id)


@router.post("/{list_id}/copy-to-trip", response_model=PackingList, status_code=201)
def copy_template_to_trip(
    list_id: str,
    request: Optional[TemplateCopyRequest] = None,
    store: PackingListStore = Depends(get_user_store),
):
    """Starts a new trip list from a saved template."""
    _require_list(store, list_id)
    new_id = store.copy_template_to_trip(list_id, request.trip_id if request else None)
    return store.get_packing_list_by_id(new_id)


@router.put("/{list_id}/template-status", response_model=PackingList)
def toggle_template_status(list_id: str, store: PackingListStore = Depends(get_user_store)):
    _require_list(store, list_id)
    store.toggle_template_status(list_id)
    return store.get_packing_list_by_id(list_id)
