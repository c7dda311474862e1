"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain, request validation, routing and unexpected) and return consistent
JSON responses with proper HTTP status codes and traceability.

Design:
- AppError subclasses → status from ``STATUS_BY_ERROR`` (400, 404, 429, 500, 502)
- RequestValidationError → 400 with every field message joined
- Unknown route → 404
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import (
    AppError,
    ExternalServiceAppError,
    NotFoundAppError,
    RateLimitAppError,
    StorageAppError,
    ValidationAppError,
)
from app.core.config import settings
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[AppError], int] = {
    ValidationAppError: 400,
    NotFoundAppError: 404,
    RateLimitAppError: 429,
    StorageAppError: 500,
    ExternalServiceAppError: 502,
}


def status_for(exc: AppError) -> int:
    """Resolve the HTTP status for a domain error (400 when unmapped)."""
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


def _request_id(request: Request) -> str | None:
    """Request id set by the middleware, or the one still held in context."""
    return getattr(request.state, "request_id", None) or get_request_id()


def _error_body(
    code: str,
    message: str,
    details: dict | None = None,
    *,
    request_id: str | None = None,
) -> dict:
    content = {
        "code": code,
        "message": message,
        "request_id": request_id or get_request_id(),
    }
    if details:
        content["details"] = details
    return {"error": content}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    All responses include:
    - error.code: Machine-readable error code
    - error.message: Human-readable message
    - error.request_id: For distributed tracing
    - error.details: Optional structured context

    Rate limit rejections also carry the X-RateLimit-* headers stashed on
    ``request.state`` by the rate limit dependency.
    """
    status_code = status_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
        },
    )

    headers = None
    if isinstance(exc, RateLimitAppError):
        headers = getattr(request.state, "rate_limit_headers", None)

    return JSONResponse(
        status_code=status_code,
        content=_error_body(exc.code, exc.message, exc.details),
        headers=headers,
    )


def _format_validation_error(error: dict) -> str:
    """Turn one pydantic error entry into a readable ``field: message`` string."""
    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    field = ".".join(location)
    message = error.get("msg", "Invalid value").removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Map request body/query validation failures to HTTP 400.

    Collects every failure rather than stopping at the first one.
    """
    message = ", ".join(_format_validation_error(err) for err in exc.errors())

    logger.warning(
        "request_validation_failed",
        extra={
            "error_count": len(exc.errors()),
            "request_path": request.url.path,
        },
    )

    return JSONResponse(
        status_code=400,
        content=_error_body("validation_error", message),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework HTTP errors (unknown routes, wrong methods) in our format."""
    if exc.status_code == 404:
        message = f"Route {request.method} {request.url.path} not found"
        logger.warning("route_not_found", extra={"request_path": request.url.path})
        return JSONResponse(status_code=404, content=_error_body("not_found", message))

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("http_error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces or exception text reach the client.

    This handler runs outside the request id middleware, so the id is read
    from ``request.state`` and echoed back as a header here.
    """
    request_id = _request_id(request)
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": request_id,
        },
    )

    headers = {settings.log.request_id_header: request_id} if request_id else None
    return JSONResponse(
        status_code=500,
        content=_error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
            request_id=request_id,
        ),
        headers=headers,
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
