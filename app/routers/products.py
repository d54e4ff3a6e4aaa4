# =============================================================================
# app/routers/products.py - Product CRUD Endpoints
# =============================================================================
# Server-rendered product pages. Forms post url-encoded fields; PUT and
# DELETE arrive as POST with ?_method=... (see app/middleware.py).
#
# Successful writes answer with 303 See Other so the browser follows up
# with a GET.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query, Request, status
from fastapi.responses import RedirectResponse

from app.dependencies import FarmsEnabledDep, ProductServiceDep, templates
from core.models import CATEGORIES

router = APIRouter()

ProductId = Annotated[str, Path(description="Product id")]


@router.get("", name="list_products")
async def list_products(
    request: Request,
    service: ProductServiceDep,
    category: Annotated[str | None, Query(description="Exact category to filter on")] = None,
):
    """List all products, or the products of one category."""
    products, label = await service.list_products(category or None)
    return templates.TemplateResponse(
        request,
        "products/index.html",
        {"products": products, "category": label, "categories": CATEGORIES},
    )


@router.get("/new", name="new_product")
async def new_product(request: Request):
    """Render the creation form."""
    return templates.TemplateResponse(
        request,
        "products/new.html",
        {"categories": CATEGORIES, "farm": None},
    )


@router.post("", name="create_product")
async def create_product(request: Request, service: ProductServiceDep):
    """Create a product from form fields and show it."""
    form = await request.form()
    product = await service.create_product(form)
    return RedirectResponse(f"/products/{product.id}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/{product_id}", name="show_product")
async def show_product(
    request: Request,
    product_id: ProductId,
    service: ProductServiceDep,
    farms_on: FarmsEnabledDep,
):
    """Product details, with the owning farm when farms are enabled."""
    if farms_on:
        product, farm = await service.get_product_with_farm(product_id)
    else:
        product, farm = await service.get_product(product_id), None

    return templates.TemplateResponse(
        request,
        "products/details.html",
        {"product": product, "farm": farm},
    )


@router.get("/{product_id}/edit", name="edit_product")
async def edit_product(request: Request, product_id: ProductId, service: ProductServiceDep):
    """Render the edit form prefilled with the product."""
    product = await service.get_product(product_id)
    return templates.TemplateResponse(
        request,
        "products/edit.html",
        {"product": product, "categories": CATEGORIES},
    )


@router.put("/{product_id}", name="update_product")
async def update_product(request: Request, product_id: ProductId, service: ProductServiceDep):
    """Replace the product's fields and show it."""
    form = await request.form()
    product = await service.update_product(product_id, form)
    return RedirectResponse(f"/products/{product.id}", status_code=status.HTTP_303_SEE_OTHER)


@router.delete("/{product_id}", name="delete_product")
async def delete_product(product_id: ProductId, service: ProductServiceDep):
    """Delete the product and go back to the list."""
    await service.delete_product(product_id)
    return RedirectResponse("/products", status_code=status.HTTP_303_SEE_OTHER)
