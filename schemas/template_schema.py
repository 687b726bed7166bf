from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Tuple

from schemas.packing_schema import CamelModel, Season


class PackingTemplateItem(BaseModel):
    """One catalog entry inside a template. Immutable."""
    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    essential: bool
    canonical_key: Optional[str] = None
    precedence_tier: Optional[int] = None
    season_tags: Tuple[Season, ...] = ()
    conflicts_with: Tuple[str, ...] = ()


class PackingTemplate(BaseModel):
    """A named bundle of items for one camping style or category. Immutable."""
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    description: str = ""
    default_precedence_tier: int = 1
    items: Tuple[PackingTemplateItem, ...] = ()


class DedupedItem(BaseModel):
    """A surviving template item paired with the template it came from."""
    model_config = ConfigDict(frozen=True)

    item: PackingTemplateItem
    template_key: str

    @property
    def category(self) -> str:
        return self.item.category

    @property
    def essential(self) -> bool:
        return self.item.essential


class TemplateSummary(CamelModel):
    """Schema for listing catalog templates."""
    key: str
    name: str
    description: str
    default_precedence_tier: int
    item_count: int = Field(..., examples=[16])
