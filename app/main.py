# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Farm Stand app.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   python -m app.main          (binds API_HOST:API_PORT, default 0.0.0.0:3000)
#   uvicorn app.main:app --reload --port 3000
# =============================================================================

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from app.config import Settings, settings as default_settings
from app.exceptions import (
    FarmStandException,
    farmstand_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.middleware import MethodOverrideMiddleware, log_requests
from app.routers import farms, health, products
from lib.memory_store import InMemoryStore
from lib.mongo_store import MongoStore
from lib.store import DocumentStore

# Configure logging
logging.basicConfig(
    level=default_settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> DocumentStore:
    """Build the document store selected by STORE_BACKEND (not yet connected)."""
    if settings.STORE_BACKEND == "memory":
        return InMemoryStore()
    return MongoStore(
        uri=settings.MONGO_URI,
        db_name=settings.MONGO_DB,
        timeout_ms=settings.MONGO_TIMEOUT_MS,
        use_transactions=settings.MONGO_USE_TRANSACTIONS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: connect the document store
    - Shutdown: close it
    """
    store: DocumentStore = app.state.store
    logger.info(f"Starting Farm Stand in {app.state.settings.ENVIRONMENT} mode")

    await store.connect()
    try:
        yield
    finally:
        logger.info("Shutting down Farm Stand")
        await store.close()


def create_app(
    settings: Settings | None = None,
    store: DocumentStore | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use (defaults to the environment-loaded ones)
        store: Document store to use (defaults to the one STORE_BACKEND selects)

    Returns:
        A configured FastAPI app. The store is connected when the app starts.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Farm Stand",
        description="Products, and the farms that grow them.",
        version=health.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store or create_store(settings)

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------

    app.middleware("http")(log_requests)
    # Added last so it runs first: routing must see the overridden method
    app.add_middleware(MethodOverrideMiddleware)

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    app.add_exception_handler(FarmStandException, farmstand_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------

    app.include_router(health.router, tags=["Health"])
    app.include_router(products.router, prefix="/products", tags=["Products"])

    if settings.ENABLE_FARMS:
        app.include_router(farms.router, prefix="/farms", tags=["Farms"])
    else:
        logger.info("Farm routes disabled (ENABLE_FARMS=false)")

    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse("/products", status_code=status.HTTP_303_SEE_OTHER)

    return app


app = create_app()


# -----------------------------------------------------------------------------
# Run
# -----------------------------------------------------------------------------

def run(settings: Settings | None = None) -> None:
    """Serve the app with uvicorn on API_HOST:API_PORT."""
    settings = settings or default_settings
    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
