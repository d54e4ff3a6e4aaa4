# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# The document store lives on app.state; it is created by the app factory
# and connected/closed by the lifespan handler in main.py.
# =============================================================================

from pathlib import Path
from typing import Annotated

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates

from core.services import FarmService, ProductService
from lib.store import DocumentStore

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def get_store(request: Request) -> DocumentStore:
    """Get the document store attached to the running app."""
    return request.app.state.store


StoreDep = Annotated[DocumentStore, Depends(get_store)]


def get_product_service(store: StoreDep) -> ProductService:
    return ProductService(store)


def get_farm_service(store: StoreDep) -> FarmService:
    return FarmService(store)


def farms_enabled(request: Request) -> bool:
    """Whether the farm extension is switched on for this app."""
    return request.app.state.settings.ENABLE_FARMS


# Type aliases for dependency injection
ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
FarmServiceDep = Annotated[FarmService, Depends(get_farm_service)]
FarmsEnabledDep = Annotated[bool, Depends(farms_enabled)]
