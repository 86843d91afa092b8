"""
API Error Handling

Every failure is rendered as:

    {"error": {"code": "<ERROR_KIND>", "message": "<human readable>"}}

with the status code taken from ERROR_KIND_STATUS_MAP and the request ID
echoed in the X-Request-ID header.
"""

import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.errors import DEFAULT_MESSAGES, ErrorKind, ReviewError

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR KIND TO HTTP STATUS MAPPING
# =============================================================================

ERROR_KIND_STATUS_MAP = {
    ErrorKind.TEAM_EXISTS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PR_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTHOR_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.TEAM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PR_MERGED: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_ASSIGNED: status.HTTP_409_CONFLICT,
    ErrorKind.NO_CANDIDATE: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Framework HTTP errors (unknown route, wrong method) mapped onto error kinds
_HTTP_STATUS_KIND = {
    404: ErrorKind.NOT_FOUND,
    405: ErrorKind.INVALID_REQUEST,
}


def error_body(kind: ErrorKind, message: str) -> dict:
    return {"error": {"code": kind.value, "message": message}}


def get_request_id(request: Request) -> str:
    """Get or generate request ID for tracking."""
    request_id = getattr(request.state, "correlation_id", None)
    if not request_id:
        request_id = request.headers.get("X-Request-ID")
    if not request_id:
        request_id = str(uuid.uuid4())
    return request_id


def _error_response(request: Request, kind: ErrorKind, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(kind, message),
        headers={"X-Request-ID": get_request_id(request)},
    )


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Call this in your app initialization:
        from web.api_errors import register_exception_handlers
        register_exception_handlers(app)
    """

    @app.exception_handler(ReviewError)
    async def review_error_handler(request: Request, exc: ReviewError) -> JSONResponse:
        """Handle domain failures raised by the review service."""
        status_code = ERROR_KIND_STATUS_MAP.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
        log_level = logging.WARNING if status_code < 500 else logging.ERROR
        logger.log(
            log_level,
            f"{request.method} {request.url.path} -> {exc.kind.value}: {exc.message}",
            extra={"error_code": exc.kind.value, "status_code": status_code},
        )
        return _error_response(request, exc.kind, exc.message, status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle Pydantic validation errors."""
        problems = []
        for error in exc.errors():
            field_path = ".".join(str(loc) for loc in error["loc"] if loc not in ("body", "query"))
            problems.append(f"{field_path or 'body'}: {error['msg']}")

        logger.warning(
            f"Validation error on {request.url.path}: {len(problems)} field(s)",
            extra={"field_errors": problems},
        )
        message = "; ".join(problems) or DEFAULT_MESSAGES[ErrorKind.INVALID_REQUEST]
        return _error_response(
            request, ErrorKind.INVALID_REQUEST, message, status.HTTP_400_BAD_REQUEST
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle standard HTTP exceptions."""
        kind = _HTTP_STATUS_KIND.get(exc.status_code)
        if kind is None:
            kind = ErrorKind.INTERNAL if exc.status_code >= 500 else ErrorKind.INVALID_REQUEST

        logger.warning(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
        message = str(exc.detail) if exc.detail else DEFAULT_MESSAGES[kind]
        return _error_response(request, kind, message, exc.status_code)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global catch-all exception handler.

        Internal error details are logged, never returned to clients.
        """
        logger.error(
            f"Unhandled exception on {request.url.path}: {type(exc).__name__}: {exc}",
            extra={"exception_type": type(exc).__name__},
            exc_info=True,
        )
        return _error_response(
            request,
            ErrorKind.INTERNAL,
            DEFAULT_MESSAGES[ErrorKind.INTERNAL],
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
