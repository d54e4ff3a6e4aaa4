# =============================================================================
# tests/test_mongo_store.py - MongoDB Store Tests
# =============================================================================
# Covers document conversion and the write paths of MongoStore against
# mocked motor collections (no MongoDB server needed). Most tests run with
# transactions off to exercise the compensating writes. TestTransactions runs
# the same writes inside a mocked client session.
# =============================================================================

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from core.models import ProductCategory, ProductCreate
from lib.mongo_store import MongoStore, farm_from_doc, product_from_doc, product_to_doc
from lib.store import StoreError


def make_store(use_transactions: bool = False) -> MongoStore:
    store = MongoStore(uri="mongodb://localhost:27017", db_name="test", use_transactions=use_transactions)
    store.products = MagicMock()
    store.farms = MagicMock()
    return store


def make_transactional_store() -> tuple[MongoStore, MagicMock, MagicMock]:
    """
    Store with a mocked client whose sessions support
    `async with await client.start_session()` and `async with session.start_transaction()`.
    """
    store = make_store(use_transactions=True)

    transaction = MagicMock()
    transaction.__aenter__ = AsyncMock(return_value=None)
    transaction.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    session.start_transaction = MagicMock(return_value=transaction)
    session.abort_transaction = AsyncMock()

    store.client = MagicMock()
    store.client.start_session = AsyncMock(return_value=session)
    return store, session, transaction


# =============================================================================
# Document Conversion
# =============================================================================

class TestConversion:
    """Tests for the raw document <-> model helpers."""

    def test_product_from_doc(self):
        oid, farm_oid = ObjectId(), ObjectId()
        doc = {"_id": oid, "name": "Milk", "price": 2.69, "category": "dairy", "farm": farm_oid}

        product = product_from_doc(doc)

        assert product.id == str(oid)
        assert product.category == ProductCategory.DAIRY
        assert product.farm == str(farm_oid)

    def test_legacy_product_without_farm(self):
        doc = {"_id": ObjectId(), "name": "Milk", "price": 2.69, "category": "dairy"}
        assert product_from_doc(doc).farm is None

    def test_farm_from_doc(self):
        pids = [ObjectId(), ObjectId()]
        doc = {"_id": ObjectId(), "name": "Farm", "city": "Guinda", "email": "a@b.c", "products": pids}

        farm = farm_from_doc(doc)

        assert farm.products == [str(pid) for pid in pids]

    def test_product_to_doc(self):
        farm_oid = ObjectId()
        doc = product_to_doc(ProductCreate(name="Milk", price="2.69", category="DAIRY"), farm_id=farm_oid)

        assert isinstance(doc["_id"], ObjectId)
        assert doc["category"] == "dairy"
        assert doc["price"] == 2.69
        assert doc["farm"] is farm_oid


# =============================================================================
# Reads
# =============================================================================

class TestReads:
    """Lookups never reach the driver with a malformed id."""

    @pytest.mark.asyncio
    async def test_malformed_ids_short_circuit(self):
        store = make_store()

        assert await store.get_product("bad") is None
        assert await store.get_farm("bad") is None
        assert await store.delete_farm("bad") is None
        store.products.find_one.assert_not_called()
        store.farms.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_ping_without_client(self):
        assert await make_store().ping() is False


# =============================================================================
# Link & Cascade
# =============================================================================

class TestAddProductToFarm:
    """add_product_to_farm without transactions."""

    @pytest.mark.asyncio
    async def test_links_both_sides(self):
        store = make_store()
        farm_oid = ObjectId()
        store.farms.count_documents = AsyncMock(return_value=1)
        store.farms.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
        store.products.insert_one = AsyncMock()

        product = await store.add_product_to_farm(str(farm_oid), ProductCreate(name="Peas", price=3, category="vegetables"))

        inserted = store.products.insert_one.await_args.args[0]
        assert inserted["farm"] == farm_oid
        assert product.farm == str(farm_oid)
        store.farms.update_one.assert_awaited_once_with(
            {"_id": farm_oid},
            {"$addToSet": {"products": inserted["_id"]}},
            session=None,
        )

    @pytest.mark.asyncio
    async def test_missing_farm_inserts_nothing(self):
        store = make_store()
        store.farms.count_documents = AsyncMock(return_value=0)
        store.products.insert_one = AsyncMock()

        result = await store.add_product_to_farm(str(ObjectId()), ProductCreate(name="Peas", price=3, category="vegetables"))

        assert result is None
        store.products.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_farm_update_removes_product(self):
        store = make_store()
        store.farms.count_documents = AsyncMock(return_value=1)
        store.farms.update_one = AsyncMock(side_effect=PyMongoError("write failed"))
        store.products.insert_one = AsyncMock()
        store.products.delete_one = AsyncMock()

        with pytest.raises(StoreError) as exc_info:
            await store.add_product_to_farm(str(ObjectId()), ProductCreate(name="Peas", price=3, category="vegetables"))

        inserted = store.products.insert_one.await_args.args[0]
        store.products.delete_one.assert_awaited_once_with({"_id": inserted["_id"]})
        assert exc_info.value.code == "ADD_PRODUCT_TO_FARM_FAILED"

    @pytest.mark.asyncio
    async def test_farm_deleted_concurrently_removes_product(self):
        store = make_store()
        store.farms.count_documents = AsyncMock(return_value=1)
        store.farms.update_one = AsyncMock(return_value=MagicMock(matched_count=0))
        store.products.insert_one = AsyncMock()
        store.products.delete_one = AsyncMock()

        result = await store.add_product_to_farm(str(ObjectId()), ProductCreate(name="Peas", price=3, category="vegetables"))

        assert result is None
        store.products.delete_one.assert_awaited_once()


class TestDeleteFarm:
    """delete_farm cascade without transactions."""

    @pytest.mark.asyncio
    async def test_cascades_to_products(self):
        store = make_store()
        farm_oid, pids = ObjectId(), [ObjectId(), ObjectId()]
        doc = {"_id": farm_oid, "name": "Farm", "city": "Guinda", "email": "a@b.c", "products": pids}
        store.farms.find_one_and_delete = AsyncMock(return_value=doc)
        store.products.delete_many = AsyncMock(return_value=MagicMock(deleted_count=2))

        farm = await store.delete_farm(str(farm_oid))

        assert farm.id == str(farm_oid)
        store.products.delete_many.assert_awaited_once_with({"_id": {"$in": pids}}, session=None)

    @pytest.mark.asyncio
    async def test_empty_farm_skips_product_delete(self):
        store = make_store()
        doc = {"_id": ObjectId(), "name": "Farm", "city": "Guinda", "email": "a@b.c", "products": []}
        store.farms.find_one_and_delete = AsyncMock(return_value=doc)
        store.products.delete_many = AsyncMock()

        await store.delete_farm(str(doc["_id"]))

        store.products.delete_many.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_farm(self):
        store = make_store()
        store.farms.find_one_and_delete = AsyncMock(return_value=None)
        store.products.delete_many = AsyncMock()

        assert await store.delete_farm(str(ObjectId())) is None
        store.products.delete_many.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_cascade_restores_farm(self):
        store = make_store()
        doc = {"_id": ObjectId(), "name": "Farm", "city": "Guinda", "email": "a@b.c", "products": [ObjectId()]}
        store.farms.find_one_and_delete = AsyncMock(return_value=doc)
        store.farms.insert_one = AsyncMock()
        store.products.delete_many = AsyncMock(side_effect=PyMongoError("write failed"))

        with pytest.raises(StoreError):
            await store.delete_farm(str(doc["_id"]))

        store.farms.insert_one.assert_awaited_once_with(doc)


class TestDeleteProduct:
    """delete_product keeps the owning farm's list in sync."""

    @pytest.mark.asyncio
    async def test_pulls_from_owner(self):
        store = make_store()
        oid, farm_oid = ObjectId(), ObjectId()
        doc = {"_id": oid, "name": "Milk", "price": 2.69, "category": "dairy", "farm": farm_oid}
        store.products.find_one_and_delete = AsyncMock(return_value=doc)
        store.farms.update_one = AsyncMock()

        product = await store.delete_product(str(oid))

        assert product.id == str(oid)
        store.farms.update_one.assert_awaited_once_with(
            {"_id": farm_oid},
            {"$pull": {"products": oid}},
            session=None,
        )

    @pytest.mark.asyncio
    async def test_unowned_product_leaves_farms_alone(self):
        store = make_store()
        doc = {"_id": ObjectId(), "name": "Milk", "price": 2.69, "category": "dairy", "farm": None}
        store.products.find_one_and_delete = AsyncMock(return_value=doc)
        store.farms.update_one = AsyncMock()

        await store.delete_product(str(doc["_id"]))

        store.farms.update_one.assert_not_awaited()


# =============================================================================
# Invalid Stored Documents
# =============================================================================

class TestInvalidDocuments:
    """Documents that no longer fit their model surface as StoreError."""

    def test_bad_category(self):
        doc = {"_id": ObjectId(), "name": "Steak", "price": 9, "category": "meat"}

        with pytest.raises(StoreError) as exc_info:
            product_from_doc(doc)

        assert exc_info.value.code == "INVALID_DOCUMENT"
        assert exc_info.value.details["id"] == str(doc["_id"])

    def test_missing_field(self):
        with pytest.raises(StoreError):
            farm_from_doc({"_id": ObjectId(), "name": "Farm", "city": "Guinda"})

    @pytest.mark.asyncio
    async def test_list_products_with_bad_document(self):
        store = make_store()
        cursor = MagicMock()
        cursor.__aiter__.return_value = [{"_id": ObjectId(), "name": "Steak", "price": 9, "category": "meat"}]
        store.products.find = MagicMock(return_value=cursor)

        with pytest.raises(StoreError) as exc_info:
            await store.list_products()

        assert exc_info.value.code == "INVALID_DOCUMENT"


# =============================================================================
# Transactions
# =============================================================================

class TestTransactions:
    """With use_transactions, both-sided writes share one session."""

    @pytest.mark.asyncio
    async def test_add_product_to_farm_passes_session_to_every_write(self):
        store, session, transaction = make_transactional_store()
        farm_oid = ObjectId()
        store.farms.count_documents = AsyncMock(return_value=1)
        store.farms.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
        store.products.insert_one = AsyncMock()
        store.products.delete_one = AsyncMock()

        product = await store.add_product_to_farm(str(farm_oid), ProductCreate(name="Peas", price=3, category="vegetables"))

        assert product.farm == str(farm_oid)
        assert store.farms.count_documents.await_args.kwargs["session"] is session
        assert store.products.insert_one.await_args.kwargs["session"] is session
        assert store.farms.update_one.await_args.kwargs["session"] is session
        session.start_transaction.assert_called_once_with()
        transaction.__aexit__.assert_awaited_once_with(None, None, None)
        session.abort_transaction.assert_not_awaited()
        store.products.delete_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_farm_deleted_concurrently_aborts_instead_of_compensating(self):
        store, session, _ = make_transactional_store()
        store.farms.count_documents = AsyncMock(return_value=1)
        store.farms.update_one = AsyncMock(return_value=MagicMock(matched_count=0))
        store.products.insert_one = AsyncMock()
        store.products.delete_one = AsyncMock()

        result = await store.add_product_to_farm(str(ObjectId()), ProductCreate(name="Peas", price=3, category="vegetables"))

        assert result is None
        session.abort_transaction.assert_awaited_once_with()
        store.products.delete_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_farm_update_leaves_rollback_to_the_transaction(self):
        store, _, transaction = make_transactional_store()
        store.farms.count_documents = AsyncMock(return_value=1)
        store.farms.update_one = AsyncMock(side_effect=PyMongoError("write failed"))
        store.products.insert_one = AsyncMock()
        store.products.delete_one = AsyncMock()

        with pytest.raises(StoreError):
            await store.add_product_to_farm(str(ObjectId()), ProductCreate(name="Peas", price=3, category="vegetables"))

        store.products.delete_one.assert_not_awaited()
        exc_type = transaction.__aexit__.await_args.args[0]
        assert exc_type is PyMongoError

    @pytest.mark.asyncio
    async def test_delete_farm_passes_session_to_every_write(self):
        store, session, _ = make_transactional_store()
        farm_oid, pids = ObjectId(), [ObjectId()]
        doc = {"_id": farm_oid, "name": "Farm", "city": "Guinda", "email": "a@b.c", "products": pids}
        store.farms.find_one_and_delete = AsyncMock(return_value=doc)
        store.products.delete_many = AsyncMock(return_value=MagicMock(deleted_count=1))

        await store.delete_farm(str(farm_oid))

        store.farms.find_one_and_delete.assert_awaited_once_with({"_id": farm_oid}, session=session)
        store.products.delete_many.assert_awaited_once_with({"_id": {"$in": pids}}, session=session)

    @pytest.mark.asyncio
    async def test_failed_cascade_does_not_reinsert_farm(self):
        store, _, _ = make_transactional_store()
        doc = {"_id": ObjectId(), "name": "Farm", "city": "Guinda", "email": "a@b.c", "products": [ObjectId()]}
        store.farms.find_one_and_delete = AsyncMock(return_value=doc)
        store.farms.insert_one = AsyncMock()
        store.products.delete_many = AsyncMock(side_effect=PyMongoError("write failed"))

        with pytest.raises(StoreError):
            await store.delete_farm(str(doc["_id"]))

        store.farms.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_product_passes_session_to_every_write(self):
        store, session, _ = make_transactional_store()
        oid, farm_oid = ObjectId(), ObjectId()
        doc = {"_id": oid, "name": "Milk", "price": 2.69, "category": "dairy", "farm": farm_oid}
        store.products.find_one_and_delete = AsyncMock(return_value=doc)
        store.farms.update_one = AsyncMock()

        await store.delete_product(str(oid))

        store.products.find_one_and_delete.assert_awaited_once_with({"_id": oid}, session=session)
        store.farms.update_one.assert_awaited_once_with(
            {"_id": farm_oid},
            {"$pull": {"products": oid}},
            session=session,
        )
