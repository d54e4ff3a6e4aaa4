# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Builds the app over an in-memory document store
# - Provides a seeder for arranging data directly in the store
# =============================================================================

import asyncio
import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# app.main builds a default app at import time from the environment

os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("ENABLE_FARMS", "true")

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from core.models import Farm, FarmCreate, Product, ProductCreate
from lib.memory_store import InMemoryStore


class CountingStore(InMemoryStore):
    """InMemoryStore that records every bulk product delete."""

    def __init__(self) -> None:
        super().__init__()
        self.bulk_product_deletes: list[list[str]] = []

    def _delete_many_products(self, product_ids: list[str]) -> int:
        self.bulk_product_deletes.append(list(product_ids))
        return super()._delete_many_products(product_ids)


class Seeder:
    """Arrange data directly in the store, bypassing HTTP."""

    def __init__(self, store: InMemoryStore):
        self.store = store

    def product(self, name="Fairy Eggplant", price=1.0, category="vegetables") -> Product:
        data = ProductCreate(name=name, price=price, category=category)
        return asyncio.run(self.store.insert_product(data))

    def farm(self, name="Full Belly Farms", city="Guinda", email="info@fullbelly.example") -> Farm:
        data = FarmCreate(name=name, city=city, email=email)
        return asyncio.run(self.store.insert_farm(data))

    def farm_product(self, farm_id: str, name="Sugar Snap Peas", price=3.25, category="vegetables") -> Product:
        data = ProductCreate(name=name, price=price, category=category)
        return asyncio.run(self.store.add_product_to_farm(farm_id, data))

    def get_product(self, product_id: str) -> Product | None:
        return asyncio.run(self.store.get_product(product_id))

    def get_farm(self, farm_id: str) -> Farm | None:
        return asyncio.run(self.store.get_farm(farm_id))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store():
    """Fresh in-memory store per test."""
    return CountingStore()


@pytest.fixture
def seed(store):
    return Seeder(store)


@pytest.fixture
def make_app(store):
    """Factory for apps over the test store; keyword args override settings."""
    def _make(**overrides):
        settings = Settings(STORE_BACKEND="memory", **overrides)
        return create_app(settings=settings, store=store)
    return _make


@pytest.fixture
def client(make_app):
    """Test client that does not follow redirects."""
    with TestClient(make_app(), follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def missing_id():
    """A well-formed id that matches no document."""
    return "5f8d0d55b54764421b7156c9"
