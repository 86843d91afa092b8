"""Request IDs for the reviewer API.

Every request handled by the service carries one ID. It is read from the
caller's ``X-Correlation-ID`` header (falling back to ``X-Request-ID``, which
the error envelope already documents), or minted as ``req-<12 hex>``. The ID
is exposed to log formatters through a context variable, stored on
``request.state.correlation_id`` for the error handlers, and returned in both
headers on every response, error responses included.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response


CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

_current_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def new_request_id() -> str:
    return f"req-{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> Optional[str]:
    """ID of the request being handled, or None outside a request."""
    return _current_id.get()


def set_correlation_id(correlation_id: str) -> Token[Optional[str]]:
    return _current_id.set(correlation_id)


def reset_correlation_id(token: Token[Optional[str]]) -> None:
    _current_id.reset(token)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Tag each API request with an ID and echo it back.

    Args:
        app: ASGI application.
        generator: Produces IDs for requests that arrive without one.
    """

    def __init__(self, app, generator: Optional[Callable[[], str]] = None):
        super().__init__(app)
        self.generator = generator or new_request_id

    def _incoming_id(self, request: Request) -> Optional[str]:
        for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
            value = request.headers.get(header, "").strip()
            if value:
                return value
        return None

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = self._incoming_id(request) or self.generator()
        request.state.correlation_id = request_id

        token = set_correlation_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_correlation_id(token)

        response.headers[CORRELATION_ID_HEADER] = request_id
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
