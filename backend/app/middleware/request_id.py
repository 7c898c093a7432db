"""
TouristMap Backend: Request ID Middleware
===========================================

What:  Assigns a correlation ID to each request and returns it in the
       X-Request-ID response header.
How:   Reuses a client-provided X-Request-ID when it is short and printable,
       otherwise generates a short UUID. The ID lives in a ContextVar for
       loggers and error handlers.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on the same event loop each see
# their own value.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_REQUEST_ID_LENGTH = 64


def resolve_request_id(header_value: Optional[str]) -> str:
    """Client ID if usable in a log line and a header, else a fresh short UUID."""
    if (
        header_value
        and len(header_value) <= MAX_REQUEST_ID_LENGTH
        and header_value.isascii()
        and header_value.isprintable()
    ):
        return header_value
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags every request and response with a request ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID"))
        request_id_var.set(rid)
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
