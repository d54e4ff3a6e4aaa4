# =============================================================================
# core/services/product_service.py - Product Business Logic
# =============================================================================
# Handles product CRUD operations. Separates HTTP concerns from persistence:
# routes pass raw form fields in, this service validates them and talks to
# the document store.
# =============================================================================

import logging
from typing import Any, Mapping

from app.exceptions import ProductNotFoundError
from core.models import Farm, Product, ProductCreate, ProductUpdate
from lib.store import DocumentStore

logger = logging.getLogger(__name__)

# Label used by the list view when no category filter is applied
ALL_CATEGORIES_LABEL = "All"


class ProductService:
    """
    Service for product operations.

    Every lookup by id raises ProductNotFoundError when the id does not
    resolve, so routes never have to check for None.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_products(self, category: str | None = None) -> tuple[list[Product], str]:
        """
        List products, optionally filtered by exact category.

        Args:
            category: Category to filter on; empty or None means no filter

        Returns:
            (products, label) where label is the category or "All"
        """
        if category:
            return await self.store.list_products(category=category), category
        return await self.store.list_products(), ALL_CATEGORIES_LABEL

    async def create_product(self, fields: Mapping[str, Any]) -> Product:
        """
        Validate and store a new product.

        Raises:
            pydantic.ValidationError: If the fields violate the schema
            ProductNotFoundError: If the store returned nothing
        """
        data = ProductCreate.model_validate(dict(fields))
        product = await self.store.insert_product(data)
        if product is None:
            raise ProductNotFoundError("<new>")

        logger.info(f"Created product {product.id} ({product.name})")
        return product

    async def get_product(self, product_id: str) -> Product:
        product = await self.store.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def get_product_with_farm(self, product_id: str) -> tuple[Product, Farm | None]:
        """
        Get a product and the farm that owns it (if any).

        A back-reference to a farm that no longer exists resolves to None.
        """
        product = await self.get_product(product_id)
        farm = await self.store.get_farm(product.farm) if product.farm else None
        return product, farm

    async def update_product(self, product_id: str, fields: Mapping[str, Any]) -> Product:
        """
        Replace a product's editable fields.

        The fields are validated before the store is touched.

        Raises:
            pydantic.ValidationError: If the fields violate the schema
            ProductNotFoundError: If the product doesn't exist
        """
        data = ProductUpdate.model_validate(dict(fields))
        product = await self.store.update_product(product_id, data)
        if product is None:
            raise ProductNotFoundError(product_id)

        logger.info(f"Updated product {product_id}")
        return product

    async def delete_product(self, product_id: str) -> Product:
        product = await self.store.delete_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        logger.info(f"Deleted product {product_id}")
        return product
