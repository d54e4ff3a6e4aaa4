# =============================================================================
# lib/memory_store.py - In-Process Document Store
# =============================================================================
# A DocumentStore that keeps documents in dicts. Used by the test suite and
# for running the app without MongoDB (STORE_BACKEND=memory).
#
# Multi-document operations hold an asyncio.Lock for their whole duration,
# so no other request can observe a half-linked farm/product pair.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from core.models import Farm, FarmCreate, Product, ProductCreate, ProductUpdate
from lib.store import DocumentStore, invalid_document
from lib.utils import new_object_id, parse_object_id

logger = logging.getLogger(__name__)


class InMemoryStore(DocumentStore):
    """
    Dict-backed document store.

    Documents are stored as plain dicts and copied on the way in and out,
    so callers never share state with the store.
    """

    def __init__(self) -> None:
        # dicts keep insertion order, matching MongoDB's natural order
        self._products: dict[str, dict[str, Any]] = {}
        self._farms: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._connected = False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        self._connected = True
        logger.info("In-memory document store ready")

    async def close(self) -> None:
        self._connected = False
        logger.info("In-memory document store closed")

    async def ping(self) -> bool:
        return self._connected

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    async def list_products(self, category: str | None = None) -> list[Product]:
        return [
            _product(doc)
            for doc in self._products.values()
            if category is None or doc.get("category") == category
        ]

    async def get_product(self, product_id: str) -> Product | None:
        doc = self._find(self._products, product_id)
        return _product(doc) if doc else None

    async def get_products(self, product_ids: list[str]) -> list[Product]:
        found = (self._find(self._products, pid) for pid in product_ids)
        return [_product(doc) for doc in found if doc]

    async def insert_product(self, data: ProductCreate) -> Product:
        doc = self._new_product_doc(data, farm_id=None)
        self._products[doc["id"]] = doc
        return _product(doc)

    async def update_product(self, product_id: str, data: ProductUpdate) -> Product | None:
        doc = self._find(self._products, product_id)
        if doc is None:
            return None
        doc.update(data.model_dump(mode="json"))
        return _product(doc)

    async def delete_product(self, product_id: str) -> Product | None:
        async with self._lock:
            doc = self._find(self._products, product_id)
            if doc is None:
                return None
            del self._products[doc["id"]]

            owner = self._farms.get(doc.get("farm") or "")
            if owner is not None:
                owner["products"] = [pid for pid in owner["products"] if pid != doc["id"]]

            return _product(doc)

    # -------------------------------------------------------------------------
    # Farms
    # -------------------------------------------------------------------------

    async def list_farms(self) -> list[Farm]:
        return [_farm(doc) for doc in self._farms.values()]

    async def get_farm(self, farm_id: str) -> Farm | None:
        doc = self._find(self._farms, farm_id)
        return _farm(doc) if doc else None

    async def insert_farm(self, data: FarmCreate) -> Farm:
        doc = {"id": new_object_id(), **data.model_dump(mode="json"), "products": []}
        self._farms[doc["id"]] = doc
        return _farm(doc)

    async def add_product_to_farm(self, farm_id: str, data: ProductCreate) -> Product | None:
        async with self._lock:
            farm = self._find(self._farms, farm_id)
            if farm is None:
                return None

            doc = self._new_product_doc(data, farm_id=farm["id"])
            self._products[doc["id"]] = doc
            if doc["id"] not in farm["products"]:
                farm["products"].append(doc["id"])

            return _product(doc)

    async def delete_farm(self, farm_id: str) -> Farm | None:
        async with self._lock:
            farm = self._find(self._farms, farm_id)
            if farm is None:
                return None
            del self._farms[farm["id"]]

            if farm["products"]:
                deleted = self._delete_many_products(farm["products"])
                logger.info(f"Cascade deleted {deleted} products of farm {farm['id']}")

            return _farm(farm)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _delete_many_products(self, product_ids: list[str]) -> int:
        """Bulk delete by id. Returns how many products existed."""
        deleted = 0
        for pid in product_ids:
            if self._products.pop(pid, None) is not None:
                deleted += 1
        return deleted

    @staticmethod
    def _find(collection: dict[str, dict[str, Any]], doc_id: str) -> dict[str, Any] | None:
        if parse_object_id(doc_id) is None:
            return None
        return collection.get(doc_id)

    @staticmethod
    def _new_product_doc(data: ProductCreate, farm_id: str | None) -> dict[str, Any]:
        return {"id": new_object_id(), **data.model_dump(mode="json"), "farm": farm_id}


def _product(doc: dict[str, Any]) -> Product:
    try:
        return Product(**doc)
    except ValidationError as e:
        raise invalid_document("product", doc.get("id"), e) from e


def _farm(doc: dict[str, Any]) -> Farm:
    try:
        return Farm(**doc)
    except ValidationError as e:
        raise invalid_document("farm", doc.get("id"), e) from e
