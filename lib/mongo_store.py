# =============================================================================
# lib/mongo_store.py - MongoDB Document Store
# =============================================================================
# DocumentStore implementation on motor (async MongoDB driver).
#
# Collections:
# - products: {_id, name, price, category, farm: ObjectId | null}
# - farms:    {_id, name, city, email, products: [ObjectId, ...]}
#
# Writes that touch both collections run inside a transaction when
# MONGO_USE_TRANSACTIONS is enabled (replica set required). Otherwise they
# run as sequential writes with a compensating write if the second one fails.
#
# Usage:
#   store = MongoStore(uri="mongodb://localhost:27017", db_name="farmStand")
#   await store.connect()
#   products = await store.list_products(category="dairy")
# =============================================================================

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
)
from pydantic import ValidationError
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from core.models import Farm, FarmCreate, Product, ProductCreate, ProductUpdate
from lib.store import DocumentStore, StoreError, invalid_document
from lib.utils import parse_object_id

logger = logging.getLogger(__name__)

PRODUCTS = "products"
FARMS = "farms"


# =============================================================================
# Document Conversion
# =============================================================================

def product_from_doc(doc: dict[str, Any]) -> Product:
    """
    Build a Product from a raw MongoDB document.

    Raises:
        StoreError: If the stored document does not fit the Product schema
    """
    farm = doc.get("farm")
    try:
        return Product(
            id=str(doc["_id"]),
            name=doc.get("name"),
            price=doc.get("price"),
            category=doc.get("category"),
            farm=str(farm) if farm else None,
        )
    except ValidationError as e:
        raise invalid_document("product", doc["_id"], e) from e


def farm_from_doc(doc: dict[str, Any]) -> Farm:
    """Build a Farm from a raw MongoDB document."""
    try:
        return Farm(
            id=str(doc["_id"]),
            name=doc.get("name"),
            city=doc.get("city"),
            email=doc.get("email"),
            products=[str(pid) for pid in doc.get("products", [])],
        )
    except ValidationError as e:
        raise invalid_document("farm", doc["_id"], e) from e


def product_to_doc(data: ProductCreate, farm_id: ObjectId | None = None) -> dict[str, Any]:
    """Build a new product document (with a fresh _id) from validated input."""
    return {
        "_id": ObjectId(),
        **data.model_dump(mode="json"),
        "farm": farm_id,
    }


class MongoStore(DocumentStore):
    """
    MongoDB-backed document store.

    One AsyncIOMotorClient is created in connect() and shared by every
    request until close(). motor pools connections internally.
    """

    def __init__(
        self,
        uri: str,
        db_name: str,
        timeout_ms: int = 5000,
        use_transactions: bool = False,
    ) -> None:
        self._uri = uri
        self._db_name = db_name
        self._timeout_ms = timeout_ms
        self._use_transactions = use_transactions
        self.client: AsyncIOMotorClient | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """
        Create the client and make sure indexes exist.

        Raises:
            StoreError: If the server cannot be reached
        """
        self.client = AsyncIOMotorClient(
            self._uri,
            serverSelectionTimeoutMS=self._timeout_ms,
        )
        db = self.client[self._db_name]
        self.products: AsyncIOMotorCollection = db[PRODUCTS]
        self.farms: AsyncIOMotorCollection = db[FARMS]

        try:
            await self.ensure_indexes()
        except PyMongoError as e:
            raise StoreError(
                message=f"Failed to connect to MongoDB: {e}",
                code="CONNECT_FAILED",
                suggestion="Check that MongoDB is running and MONGO_URI is correct",
                details={"db": self._db_name},
            ) from e

        logger.info(f"Mongo connection open ({self._db_name}, transactions={self._use_transactions})")

    async def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
            logger.info("Mongo connection closed")

    async def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"Mongo ping failed: {e}")
            return False

    async def ensure_indexes(self) -> None:
        """Indexes for the category filter and the farm back-reference."""
        await self.products.create_index([("category", ASCENDING)])
        await self.products.create_index([("farm", ASCENDING)], sparse=True)

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncIOMotorClientSession | None]:
        """
        Yield a session inside a started transaction, or None when
        transactions are disabled. Leaving the block normally commits;
        an exception aborts.
        """
        if not self._use_transactions:
            yield None
            return

        async with await self.client.start_session() as session:
            async with session.start_transaction():
                yield session

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    async def list_products(self, category: str | None = None) -> list[Product]:
        query = {"category": category} if category else {}
        try:
            cursor = self.products.find(query)
            return [product_from_doc(doc) async for doc in cursor]
        except PyMongoError as e:
            raise _error("list products", e, category=category)

    async def get_product(self, product_id: str) -> Product | None:
        oid = parse_object_id(product_id)
        if oid is None:
            return None
        try:
            doc = await self.products.find_one({"_id": oid})
        except PyMongoError as e:
            raise _error("fetch product", e, product_id=product_id)
        return product_from_doc(doc) if doc else None

    async def get_products(self, product_ids: list[str]) -> list[Product]:
        oids = [oid for oid in map(parse_object_id, product_ids) if oid is not None]
        if not oids:
            return []
        try:
            cursor = self.products.find({"_id": {"$in": oids}})
            by_id = {str(doc["_id"]): doc async for doc in cursor}
        except PyMongoError as e:
            raise _error("fetch products", e, count=len(oids))
        return [product_from_doc(by_id[pid]) for pid in product_ids if pid in by_id]

    async def insert_product(self, data: ProductCreate) -> Product:
        doc = product_to_doc(data)
        try:
            await self.products.insert_one(doc)
        except PyMongoError as e:
            raise _error("insert product", e, name=data.name)
        logger.debug(f"Inserted product {doc['_id']}")
        return product_from_doc(doc)

    async def update_product(self, product_id: str, data: ProductUpdate) -> Product | None:
        oid = parse_object_id(product_id)
        if oid is None:
            return None
        try:
            doc = await self.products.find_one_and_update(
                {"_id": oid},
                {"$set": data.model_dump(mode="json")},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise _error("update product", e, product_id=product_id)
        return product_from_doc(doc) if doc else None

    async def delete_product(self, product_id: str) -> Product | None:
        oid = parse_object_id(product_id)
        if oid is None:
            return None
        try:
            async with self._transaction() as session:
                doc = await self.products.find_one_and_delete({"_id": oid}, session=session)
                if doc is None:
                    return None
                if doc.get("farm"):
                    await self.farms.update_one(
                        {"_id": doc["farm"]},
                        {"$pull": {"products": oid}},
                        session=session,
                    )
        except PyMongoError as e:
            raise _error("delete product", e, product_id=product_id)
        return product_from_doc(doc)

    # -------------------------------------------------------------------------
    # Farms
    # -------------------------------------------------------------------------

    async def list_farms(self) -> list[Farm]:
        try:
            return [farm_from_doc(doc) async for doc in self.farms.find({})]
        except PyMongoError as e:
            raise _error("list farms", e)

    async def get_farm(self, farm_id: str) -> Farm | None:
        oid = parse_object_id(farm_id)
        if oid is None:
            return None
        try:
            doc = await self.farms.find_one({"_id": oid})
        except PyMongoError as e:
            raise _error("fetch farm", e, farm_id=farm_id)
        return farm_from_doc(doc) if doc else None

    async def insert_farm(self, data: FarmCreate) -> Farm:
        doc = {"_id": ObjectId(), **data.model_dump(mode="json"), "products": []}
        try:
            await self.farms.insert_one(doc)
        except PyMongoError as e:
            raise _error("insert farm", e, name=data.name)
        return farm_from_doc(doc)

    async def add_product_to_farm(self, farm_id: str, data: ProductCreate) -> Product | None:
        oid = parse_object_id(farm_id)
        if oid is None:
            return None

        doc = product_to_doc(data, farm_id=oid)
        try:
            async with self._transaction() as session:
                if await self.farms.count_documents({"_id": oid}, limit=1, session=session) == 0:
                    return None

                await self.products.insert_one(doc, session=session)
                try:
                    result = await self.farms.update_one(
                        {"_id": oid},
                        {"$addToSet": {"products": doc["_id"]}},
                        session=session,
                    )
                except PyMongoError:
                    if session is None:
                        await self._undo_product_insert(doc["_id"])
                    raise

                if result.matched_count == 0:
                    # farm vanished between the check and the update
                    if session is None:
                        await self._undo_product_insert(doc["_id"])
                    else:
                        await session.abort_transaction()
                    return None
        except PyMongoError as e:
            raise _error("add product to farm", e, farm_id=farm_id)

        logger.info(f"Linked product {doc['_id']} to farm {farm_id}")
        return product_from_doc(doc)

    async def delete_farm(self, farm_id: str) -> Farm | None:
        oid = parse_object_id(farm_id)
        if oid is None:
            return None

        try:
            async with self._transaction() as session:
                doc = await self.farms.find_one_and_delete({"_id": oid}, session=session)
                if doc is None:
                    return None
                try:
                    await self._cascade_products(doc, session=session)
                except PyMongoError:
                    if session is None:
                        await self._restore_farm(doc)
                    raise
        except PyMongoError as e:
            raise _error("delete farm", e, farm_id=farm_id)

        return farm_from_doc(doc)

    # -------------------------------------------------------------------------
    # Cascade & Compensation
    # -------------------------------------------------------------------------

    async def _cascade_products(
        self,
        farm_doc: dict[str, Any],
        session: AsyncIOMotorClientSession | None = None,
    ) -> int:
        """Delete every product the farm references. No-op for empty farms."""
        product_ids = farm_doc.get("products") or []
        if not product_ids:
            return 0

        result = await self.products.delete_many(
            {"_id": {"$in": product_ids}},
            session=session,
        )
        logger.info(f"Cascade deleted {result.deleted_count} products of farm {farm_doc['_id']}")
        return result.deleted_count

    async def _undo_product_insert(self, product_oid: ObjectId) -> None:
        logger.warning(f"Removing product {product_oid} after failed farm link")
        await self.products.delete_one({"_id": product_oid})

    async def _restore_farm(self, farm_doc: dict[str, Any]) -> None:
        logger.warning(f"Restoring farm {farm_doc['_id']} after failed cascade delete")
        await self.farms.insert_one(farm_doc)


def _error(operation: str, exc: Exception, **details: Any) -> StoreError:
    """Wrap a driver error with the operation that failed."""
    logger.error(f"Failed to {operation}: {exc}")
    return StoreError(
        message=f"Failed to {operation}: {exc}",
        code=operation.upper().replace(" ", "_") + "_FAILED",
        details=details,
    )
