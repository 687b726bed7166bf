from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from schemas.gear_schema import GearItem
from schemas.packing_schema import CamelModel, Season

CampingStyleType = Literal["car_camping", "backpacking", "hammock", "rv", "unknown"]

SeasonSource = Literal["override", "winterCamping", "dates", "default"]


class Trip(CamelModel):
    """The parts of a trip the packing engine reads. Trips are owned elsewhere."""
    start_date: Optional[str] = Field(None, examples=["2025-07-10"])
    end_date: Optional[str] = Field(None, examples=["2025-07-12"])
    camping_style: Optional[str] = Field(None, examples=["CAR_CAMPING"])
    packing_season_override: Optional[Season] = None
    tags: Optional[List[str]] = None
    trip_type: Optional[str] = None
    winter_camping: Optional[bool] = None
    latitude: Optional[float] = None
    location_name: Optional[str] = Field(None, examples=["Silver Lake Sand Dunes"])


class SeasonInfo(BaseModel):
    """A resolved season and where it came from."""
    season: Season
    source: SeasonSource
    helper_text: str


class TripContext(BaseModel):
    """Everything generation needs to know about a trip."""
    season: Season
    season_source: SeasonSource = "default"
    trip_days: int = 1
    style: CampingStyleType = "unknown"
    location_hints: List[str] = Field(default_factory=list)


class TripPackingRequest(CamelModel):
    """Schema for generating a packing list straight from a trip."""
    trip_id: Optional[str] = None
    name: str = Field(..., examples=["Dunes Weekend"])
    trip: Trip
    template_keys: Optional[List[str]] = None
    gear_items: Optional[List[GearItem]] = None
