# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Farm Stand app:
# - test_models.py: Pydantic schema validation
# - test_utils.py: ObjectId parsing and validation messages
# - test_memory_store.py: In-memory document store, incl. cascade delete
# - test_mongo_store.py: MongoDB store logic against mocked collections
# - test_product_routes.py / test_farm_routes.py: HTTP behaviour end to end
# - test_middleware.py: Method override and error normalization
#
# Run tests with: pytest
# =============================================================================
