# =============================================================================
# app/routers/ - Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - products.py: Product list/create/show/edit/delete pages
# - farms.py: Farm pages and farm-scoped product creation (optional)
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import products
from . import farms

__all__ = [
    "health",
    "products",
    "farms",
]
