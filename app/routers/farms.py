# =============================================================================
# app/routers/farms.py - Farm Endpoints
# =============================================================================
# Farm pages, mounted only when ENABLE_FARMS is on. A farm owns products:
# products created from a farm page are linked to it, and deleting a farm
# deletes its products.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Request, status
from fastapi.responses import RedirectResponse

from app.dependencies import FarmServiceDep, templates
from core.models import CATEGORIES

router = APIRouter()

FarmId = Annotated[str, Path(description="Farm id")]


@router.get("", name="list_farms")
async def list_farms(request: Request, service: FarmServiceDep):
    farms = await service.list_farms()
    return templates.TemplateResponse(request, "farms/index.html", {"farms": farms})


@router.get("/new", name="new_farm")
async def new_farm(request: Request):
    return templates.TemplateResponse(request, "farms/new.html", {})


@router.post("", name="create_farm")
async def create_farm(request: Request, service: FarmServiceDep):
    """Create a farm from form fields."""
    form = await request.form()
    await service.create_farm(form)
    return RedirectResponse("/farms", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/{farm_id}", name="show_farm")
async def show_farm(request: Request, farm_id: FarmId, service: FarmServiceDep):
    """Farm details with its products resolved."""
    farm, products = await service.get_farm_with_products(farm_id)
    return templates.TemplateResponse(
        request,
        "farms/show.html",
        {"farm": farm, "products": products},
    )


@router.get("/{farm_id}/products/new", name="new_farm_product")
async def new_farm_product(request: Request, farm_id: FarmId, service: FarmServiceDep):
    """Render the product form scoped to a farm."""
    farm = await service.get_farm(farm_id)
    return templates.TemplateResponse(
        request,
        "products/new.html",
        {"farm": farm, "categories": CATEGORIES},
    )


@router.post("/{farm_id}/products", name="create_farm_product")
async def create_farm_product(request: Request, farm_id: FarmId, service: FarmServiceDep):
    """Create a product owned by the farm and go back to the farm."""
    form = await request.form()
    await service.add_product(farm_id, form)
    return RedirectResponse(f"/farms/{farm_id}", status_code=status.HTTP_303_SEE_OTHER)


@router.delete("/{farm_id}", name="delete_farm")
async def delete_farm(farm_id: FarmId, service: FarmServiceDep):
    """Delete the farm and every product it owns."""
    await service.delete_farm(farm_id)
    return RedirectResponse("/farms", status_code=status.HTTP_303_SEE_OTHER)
