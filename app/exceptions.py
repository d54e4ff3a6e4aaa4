# =============================================================================
# app/exceptions.py - Custom Exceptions and Error Handlers
# =============================================================================
# Centralized exception handling for the app. Errors are normalized in two
# stages:
#   1. Classify: schema validation failures (pydantic / FastAPI) are rewrapped
#      as an InvalidInputError with status 400.
#   2. Respond: the (possibly rewrapped) error's message becomes the entire
#      plain-text response body, sent with the error's status code.
# Anything unexpected is logged and answered with 500 "Something went wrong".
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import PlainTextResponse

from lib.utils import format_validation_error

logger = logging.getLogger(__name__)

DEFAULT_STATUS = 500
DEFAULT_MESSAGE = "Something went wrong"


class FarmStandException(Exception):
    """
    Base exception for the Farm Stand app.

    All application-raised errors inherit from this class. The message is
    shown to the user as-is.
    """

    def __init__(
        self,
        message: str = DEFAULT_MESSAGE,
        code: str = "FARMSTAND_ERROR",
        status_code: int = DEFAULT_STATUS,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}


# =============================================================================
# Not Found
# =============================================================================

class ProductNotFoundError(FarmStandException):
    """Raised when a product id doesn't resolve to a document."""

    def __init__(self, product_id: str):
        super().__init__(
            message="Product not found",
            code="PRODUCT_NOT_FOUND",
            status_code=404,
            details={"product_id": product_id},
        )


class FarmNotFoundError(FarmStandException):
    """Raised when a farm id doesn't resolve to a document."""

    def __init__(self, farm_id: str):
        super().__init__(
            message="Farm not found",
            code="FARM_NOT_FOUND",
            status_code=404,
            details={"farm_id": farm_id},
        )


# =============================================================================
# Validation
# =============================================================================

class InvalidInputError(FarmStandException):
    """Submitted fields violate the schema (missing field, bad category...)."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_FAILED",
            status_code=400,
            details={"errors": errors or []},
        )


def classify_validation_error(exc: Exception) -> InvalidInputError:
    """Rewrap a pydantic/FastAPI validation error as a 400 application error."""
    logger.warning(f"Validation failed: {exc!r}")
    return InvalidInputError(
        message=f"Validation failed... {format_validation_error(exc)}",
        errors=exc.errors(),
    )


# =============================================================================
# Exception Handlers
# =============================================================================

async def farmstand_exception_handler(
    request: Request,
    exc: FarmStandException,
) -> PlainTextResponse:
    """
    Terminal responder.

    The error message is the whole response body; no structured format.
    """
    status_code = getattr(exc, "status_code", None) or DEFAULT_STATUS
    message = getattr(exc, "message", None) or DEFAULT_MESSAGE
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.code}] {message}")
    return PlainTextResponse(message, status_code=status_code)


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> PlainTextResponse:
    """Handle pydantic and request validation errors."""
    return await farmstand_exception_handler(request, classify_validation_error(exc))


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> PlainTextResponse:
    """Handle unexpected exceptions (including store failures)."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return PlainTextResponse(DEFAULT_MESSAGE, status_code=DEFAULT_STATUS)
