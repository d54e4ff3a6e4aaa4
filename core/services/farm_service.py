# =============================================================================
# core/services/farm_service.py - Farm Business Logic
# =============================================================================
# Handles farm operations, including adding products to a farm and deleting
# a farm together with its products.
# =============================================================================

import logging
from typing import Any, Mapping

from app.exceptions import FarmNotFoundError
from core.models import Farm, FarmCreate, Product, ProductCreate
from lib.store import DocumentStore

logger = logging.getLogger(__name__)


class FarmService:
    """Service for farm operations."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_farms(self) -> list[Farm]:
        return await self.store.list_farms()

    async def create_farm(self, fields: Mapping[str, Any]) -> Farm:
        """
        Validate and store a new farm.

        Raises:
            pydantic.ValidationError: If the fields violate the schema
        """
        data = FarmCreate.model_validate(dict(fields))
        farm = await self.store.insert_farm(data)
        logger.info(f"Created farm {farm.id} ({farm.name})")
        return farm

    async def get_farm(self, farm_id: str) -> Farm:
        farm = await self.store.get_farm(farm_id)
        if farm is None:
            raise FarmNotFoundError(farm_id)
        return farm

    async def get_farm_with_products(self, farm_id: str) -> tuple[Farm, list[Product]]:
        """
        Get a farm and its products, in the order they were added.

        Product ids that no longer resolve are left out.
        """
        farm = await self.get_farm(farm_id)
        products = await self.store.get_products(farm.products)
        return farm, products

    async def add_product(self, farm_id: str, fields: Mapping[str, Any]) -> Product:
        """
        Create a product owned by a farm.

        Both sides of the link (product.farm and farm.products) are written
        by the store in one operation.

        Raises:
            pydantic.ValidationError: If the product fields violate the schema
            FarmNotFoundError: If the farm doesn't exist
        """
        data = ProductCreate.model_validate(dict(fields))
        product = await self.store.add_product_to_farm(farm_id, data)
        if product is None:
            raise FarmNotFoundError(farm_id)

        logger.info(f"Added product {product.id} to farm {farm_id}")
        return product

    async def delete_farm(self, farm_id: str) -> Farm:
        """
        Delete a farm and every product it owns.

        Raises:
            FarmNotFoundError: If the farm doesn't exist
        """
        farm = await self.store.delete_farm(farm_id)
        if farm is None:
            raise FarmNotFoundError(farm_id)

        logger.info(f"Deleted farm {farm_id} and {len(farm.products)} linked products")
        return farm
