"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return JSON bodies of the form
``{"message": "<reason>"}`` with the matching HTTP status code.

Design:
- AppError subclasses → their own status (400, 404, 409, 429)
- Starlette HTTPException (router 404/405) → same body shape
- Request validation errors → 400 Bad Request
- Unexpected Exception → generic 500 (safety net)
- Every failure is logged with method, path and reason before responding
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kv_api.core.errors import AppError
from kv_api.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _log_errors_enabled(request: Request) -> bool:
    app_settings = getattr(request.app.state, "settings", None)
    return app_settings is None or app_settings.log.log_errors


def log_failure(request: Request, status_code: int, reason: str, *, code: str | None = None) -> None:
    """Log a failed request with method, path and reason."""
    if not _log_errors_enabled(request):
        return
    logger.warning(
        "kv.request_failed",
        extra={
            "method": request.method,
            "path": request.url.path,
            "reason": reason,
            "status_code": status_code,
            "error_code": code,
            "request_id": get_request_id(),
        },
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the error's status code and ``message`` body.
    """
    reason = exc.response_message
    log_failure(request, exc.status_code, reason, code=exc.code)

    return JSONResponse(
        status_code=exc.status_code,
        content={"message": reason},
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render router-level HTTP errors (unknown path, wrong method) in the same shape."""
    try:
        reason = HTTPStatus(exc.status_code).phrase
    except ValueError:
        reason = "Error"
    if isinstance(exc.detail, str) and exc.detail and exc.detail != reason:
        reason = f"{reason}: {exc.detail}"

    log_failure(request, exc.status_code, reason)

    return JSONResponse(
        status_code=exc.status_code,
        content={"message": reason},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map framework-level request validation failures to 400 Bad Request."""
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    reason = "Bad Request: invalid " + (", ".join(fields) if fields else "request")
    log_failure(request, 400, reason, code="request_validation")

    return JSONResponse(status_code=400, content={"message": reason})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces or exception text reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "method": request.method,
            "path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error"},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app.

    Example:
        >>> from fastapi import FastAPI
        >>> from kv_api.core.exception_handlers import setup_exception_handlers
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
