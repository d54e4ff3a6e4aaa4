# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from typing import Any

from bson import ObjectId


# =============================================================================
# ObjectId Utilities
# =============================================================================

def new_object_id() -> str:
    """Generate a fresh document id as a 24-character hex string."""
    return str(ObjectId())


def parse_object_id(value: Any) -> ObjectId | None:
    """
    Parse a document id.

    Only 24-character hex strings (or ObjectId instances) are accepted.
    Anything else returns None, which callers treat as "no such document".

    Example:
        parse_object_id("5f8d0d55b54764421b7156c9")  # ObjectId(...)
        parse_object_id("not-an-id")                 # None
    """
    if isinstance(value, ObjectId):
        return value
    # ObjectId.is_valid() also accepts any 12-byte string
    if isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


# =============================================================================
# Validation Messages
# =============================================================================

# Input schemas are named after the document they build (ProductCreate...)
_SCHEMA_SUFFIXES = ("Create", "Update")


def validation_error_model(exc: Any) -> str | None:
    """
    Name of the document a pydantic ValidationError was raised for.

    Returns None for errors without a model title (FastAPI request errors).

    Example:
        ProductCreate -> "Product"
    """
    title = getattr(exc, "title", None)
    if not isinstance(title, str) or not title:
        return None
    for suffix in _SCHEMA_SUFFIXES:
        if title.endswith(suffix) and len(title) > len(suffix):
            return title[: -len(suffix)]
    return title


def format_validation_error(exc: Any) -> str:
    """
    Flatten a pydantic/FastAPI validation error into one line.

    Works with anything exposing errors() in pydantic's format. Errors that
    carry a model title are prefixed with "<Model> validation failed: ".

    Example:
        "Product validation failed: name: Field required, price: Input should be a valid number"
    """
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    details = ", ".join(parts) or str(exc)

    model = validation_error_model(exc)
    if model:
        return f"{model} validation failed: {details}"
    return details
