from pydantic import BaseModel, Field


class GearItem(BaseModel):
    """A piece of the user's gear closet. Owned by the inventory store, read-only here."""
    id: str
    name: str = Field(..., examples=["REI Half Dome 2"])
    category: str = Field(..., examples=["shelter"])
