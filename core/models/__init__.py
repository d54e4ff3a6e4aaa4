# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for the stored documents:
# - product.py: Product schemas and the category enum
# - farm.py: Farm schemas
#
# These models are the validation layer: every write goes through them
# before it reaches the document store.
# =============================================================================

from .product import (
    CATEGORIES,
    Product,
    ProductCategory,
    ProductCreate,
    ProductUpdate,
)
from .farm import (
    Farm,
    FarmCreate,
)

__all__ = [
    # Product
    "CATEGORIES",
    "Product",
    "ProductCategory",
    "ProductCreate",
    "ProductUpdate",
    # Farm
    "Farm",
    "FarmCreate",
]
