from fastapi import APIRouter, HTTPException
from typing import List
from schemas.packing_schema import GenerationPreviewRequest, PackingSection
from schemas.template_schema import PackingTemplate, TemplateSummary
from services import template_catalog
from services.packing_generator import generate_sections

router = APIRouter(
    prefix="/packing/templates",
    tags=["Packing Templates"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=List[TemplateSummary])
async def list_templates():
    """Lists the catalog templates a packing list can be generated from."""
    return [
        TemplateSummary(
            key=template.key,
            name=template.name,
            description=template.description,
            default_precedence_tier=template.default_precedence_tier,
            item_count=len(template.items),
        )
        for template in template_catalog.list_templates()
    ]


@router.get("/options")
async def get_options():
    """Trip types, seasons and default sections for the list creation form."""
    return {
        "catalogVersion": template_catalog.CATALOG_VERSION,
        "tripTypes": template_catalog.TRIP_TYPE_OPTIONS,
        "seasons": template_catalog.SEASON_OPTIONS,
        "defaultSections": template_catalog.DEFAULT_SECTIONS,
    }


@router.get("/{template_key}", response_model=PackingTemplate)
async def get_template(template_key: str):
    template = template_catalog.get_template(template_key)
    if not template:
        raise HTTPException(status_code=404, detail=f"Template '{template_key}' not found.")
    return template


@router.post("/preview", response_model=List[PackingSection])
async def preview_generation(request: GenerationPreviewRequest):
    """
    Shows the sections a template selection would produce, without saving anything.
    Useful for the generate screen before the user commits to a list.
    """
    return generate_sections(request.template_keys, request.season, request.trip_days, request.gear_items)
