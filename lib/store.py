# =============================================================================
# lib/store.py - Document Store Interface
# =============================================================================
# Defines the data-access contract used by the service layer. There are two
# implementations:
# - lib/mongo_store.py: MongoDB via motor (production)
# - lib/memory_store.py: In-process dicts (tests, local development)
#
# The store is constructed once by the app factory, connected in the
# lifespan handler and injected into route handlers. It also owns the
# farm <-> product relationship: the only writes that touch both sides are
# add_product_to_farm() and delete_farm(), and both are atomic.
# =============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from core.models import Farm, FarmCreate, Product, ProductCreate, ProductUpdate


class StoreError(Exception):
    """
    Error during document store operations.

    Raised for infrastructure failures: connection loss, write errors, or a
    stored document that no longer matches its schema.
    A missing document is not an error: lookups return None instead.
    """

    def __init__(
        self,
        message: str,
        code: str = "STORE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def invalid_document(kind: str, doc_id: Any, exc: Exception) -> StoreError:
    """
    Wrap a read-side schema failure.

    A stored document that fails its model is a store failure (500), not a
    client validation error (400).
    """
    return StoreError(
        message=f"Stored {kind} {doc_id} is invalid: {exc}",
        code="INVALID_DOCUMENT",
        suggestion=f"Fix or remove the {kind} document",
        details={"kind": kind, "id": str(doc_id)},
    )


class DocumentStore(ABC):
    """Persistence for products and farms."""

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @abstractmethod
    async def connect(self) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    async def ping(self) -> bool: ...

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_products(self, category: str | None = None) -> list[Product]:
        """All products, or only those whose category equals `category`."""

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None: ...

    @abstractmethod
    async def get_products(self, product_ids: list[str]) -> list[Product]:
        """Products for the given ids, in that order. Unknown ids are skipped."""

    @abstractmethod
    async def insert_product(self, data: ProductCreate) -> Product: ...

    @abstractmethod
    async def update_product(self, product_id: str, data: ProductUpdate) -> Product | None:
        """Replace the editable fields. Returns the updated product or None."""

    @abstractmethod
    async def delete_product(self, product_id: str) -> Product | None:
        """Delete a product and pull it from its farm. Returns the deleted product or None."""

    # -------------------------------------------------------------------------
    # Farms
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_farms(self) -> list[Farm]: ...

    @abstractmethod
    async def get_farm(self, farm_id: str) -> Farm | None: ...

    @abstractmethod
    async def insert_farm(self, data: FarmCreate) -> Farm: ...

    @abstractmethod
    async def add_product_to_farm(self, farm_id: str, data: ProductCreate) -> Product | None:
        """
        Create a product owned by a farm.

        Sets product.farm and appends the product id to farm.products as one
        operation. Returns None (and writes nothing) when the farm is missing.
        """

    @abstractmethod
    async def delete_farm(self, farm_id: str) -> Farm | None:
        """
        Delete a farm together with every product it references.

        No product delete is issued when the farm has no products.
        Returns the deleted farm or None.
        """
