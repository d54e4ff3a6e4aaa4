# =============================================================================
# lib/ - Infrastructure Modules
# =============================================================================
# This package contains the data-access layer and shared utilities:
# - store.py: DocumentStore interface and StoreError
# - mongo_store.py: MongoDB implementation (motor)
# - memory_store.py: In-process implementation (tests, local development)
# - utils.py: ObjectId parsing, validation message formatting
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.store import DocumentStore, StoreError
from lib.memory_store import InMemoryStore
from lib.mongo_store import MongoStore
from lib.utils import (
    format_validation_error,
    new_object_id,
    parse_object_id,
    validation_error_model,
)

__all__ = [
    # Stores
    "DocumentStore",
    "StoreError",
    "InMemoryStore",
    "MongoStore",
    # Utils
    "format_validation_error",
    "new_object_id",
    "parse_object_id",
    "validation_error_model",
]
