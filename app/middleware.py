# =============================================================================
# app/middleware.py - HTTP Middleware
# =============================================================================
# - MethodOverrideMiddleware: lets HTML forms (GET/POST only) issue PUT,
#   PATCH and DELETE via ?_method=... or an X-HTTP-Method-Override header.
# - log_requests: logs every request and its response status.
# =============================================================================

import logging
from urllib.parse import parse_qs

from fastapi import Request
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("farmstand.request")

OVERRIDE_PARAM = "_method"
OVERRIDE_HEADER = b"x-http-method-override"
ALLOWED_OVERRIDES = frozenset({"PUT", "PATCH", "DELETE"})


class MethodOverrideMiddleware:
    """
    Rewrite the method of POST requests that ask for an override.

    Only POST is ever rewritten, and only to PUT, PATCH or DELETE.
    The query parameter wins over the header.
    """

    def __init__(self, app: ASGIApp, param: str = OVERRIDE_PARAM) -> None:
        self.app = app
        self.param = param

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "POST":
            method = self._requested_method(scope)
            if method in ALLOWED_OVERRIDES:
                logger.debug(f"Method override POST -> {method} for {scope['path']}")
                scope = dict(scope, method=method)
        await self.app(scope, receive, send)

    def _requested_method(self, scope: Scope) -> str | None:
        query = parse_qs(scope.get("query_string", b"").decode("latin-1"))
        values = query.get(self.param)
        if values:
            return values[-1].strip().upper()

        for name, value in scope.get("headers", []):
            if name == OVERRIDE_HEADER:
                return value.decode("latin-1").strip().upper()
        return None


async def log_requests(request: Request, call_next):
    """Log method, path and status of each request."""
    logger.info(f"Incoming {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"Completed {request.method} {request.url.path} -> {response.status_code}")
    return response
