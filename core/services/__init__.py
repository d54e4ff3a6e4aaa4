# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .product_service import ALL_CATEGORIES_LABEL, ProductService
from .farm_service import FarmService

__all__ = [
    "ALL_CATEGORIES_LABEL",
    "ProductService",
    "FarmService",
]
