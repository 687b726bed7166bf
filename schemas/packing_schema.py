from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional

from schemas.gear_schema import GearItem

Season = Literal["spring", "summer", "fall", "winter"]

TripType = Literal["one-night", "weekend", "multi-day", "backpacking", "car-camping", "day-hike"]

ItemSource = Literal["template", "gearCloset", "custom"]


class CamelModel(BaseModel):
    """Base schema that reads and writes the app's camelCase wire shape."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PackingItem(CamelModel):
    """Schema for a single checklist entry inside a section."""
    id: str
    name: str = Field(..., examples=["Sleeping bag"])
    checked: bool = False
    essential: Optional[bool] = None
    note: Optional[str] = None
    source: Optional[ItemSource] = None
    gear_item_id: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None


class PackingSection(CamelModel):
    """Schema for a titled group of packing items."""
    id: str
    title: str = Field(..., examples=["Shelter & Sleep"])
    items: List[PackingItem] = Field(default_factory=list)
    collapsed: bool = False


class PackingListMeta(CamelModel):
    """What a generated list was built from, used to detect stale lists."""
    trip_days_used_for_generation: Optional[int] = None
    season_used_for_generation: Optional[Season] = None
    selected_template_keys: List[str] = Field(default_factory=list)
    generated_at: Optional[str] = None
    do_not_prompt_first_aid: bool = False


class PackingList(CamelModel):
    """Schema for a full packing list, the root of sections and items."""
    id: str
    name: str = Field(..., examples=["Yosemite Weekend"])
    trip_type: TripType
    season: Season
    sections: List[PackingSection] = Field(default_factory=list)
    trip_id: Optional[str] = None
    is_template: bool = False
    created_at: str
    updated_at: str
    meta: Optional[PackingListMeta] = None


class Progress(BaseModel):
    """Packed/total counts for a list."""
    packed: int
    total: int
    percentage: int


# --- Request bodies ---

class PackingListCreate(CamelModel):
    """Schema for creating a new packing list, optionally from templates."""
    name: str = Field(..., examples=["Yosemite Weekend"])
    trip_type: TripType = Field("weekend", examples=["weekend"])
    season: Season = Field("summer", examples=["summer"])
    template_keys: Optional[List[str]] = Field(None, examples=[["essential", "cooking"]])
    trip_id: Optional[str] = None
    is_template: bool = False
    trip_days: int = Field(1, gt=0, examples=[3])
    gear_items: Optional[List[GearItem]] = None


class SectionCreate(CamelModel):
    title: str = Field(..., min_length=1, examples=["Fishing"])


class SectionReorder(CamelModel):
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class ItemCreate(CamelModel):
    name: str = Field(..., min_length=1, examples=["Fishing rod"])
    essential: Optional[bool] = None


class ItemUpdate(CamelModel):
    """Partial update for an item. Only fields that are sent are applied."""
    name: Optional[str] = None
    checked: Optional[bool] = None
    essential: Optional[bool] = None
    note: Optional[str] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None


class TemplateSaveRequest(CamelModel):
    new_name: Optional[str] = None


class TemplateCopyRequest(CamelModel):
    trip_id: Optional[str] = None


class GearMergeRequest(CamelModel):
    gear_items: List[GearItem]


class GenerationPreviewRequest(CamelModel):
    """Schema for previewing generated sections without saving a list."""
    template_keys: List[str] = Field(..., examples=[["essential", "winter"]])
    season: Season = Field("summer", examples=["winter"])
    trip_days: int = Field(1, gt=0, examples=[3])
    gear_items: Optional[List[GearItem]] = None
