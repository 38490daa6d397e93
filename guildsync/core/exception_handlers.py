"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps GuildSyncException
error codes (raised directly or re-raised from a failed OperationResult) to
HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from guildsync.core.config import get_settings
from guildsync.domain.exceptions import GuildSyncException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status; unknown codes fall back to 400
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "USER_NOT_FOUND": 404,
    "EVENT_NOT_FOUND": 404,
    "ROLES_NOT_FOUND": 400,
    "ROLE_ALREADY_EXISTS": 409,
    "TAG_ALREADY_EXISTS": 409,
    "ROLE_IN_USE": 409,
    "TAG_IN_USE": 409,
    "DUPLICATE_ASSIGNMENT": 409,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "REMOTE_SYNC_FAILED": 502,
    "DISCORD_ACCESS_FAILED": 502,
    "SERVICE_UNAVAILABLE": 503,
    "DATABASE_ERROR": 500,
    "INTERNAL_ERROR": 500,
    "REVOKE_FAILED": 500,
    "ADMIN_GRANT_FAILED": 500,
    "CLEANUP_FAILED": 500,
}


def status_for_error_code(error_code: str) -> int:
    """HTTP status for a domain error code (400 for business rule failures)."""
    return _ERROR_CODE_STATUS.get(error_code, 400)


def _guildsync_exception_handler(request: Request, exc: GuildSyncException) -> JSONResponse:
    """Return JSON from GuildSyncException.to_dict() with the mapped status code."""
    status = status_for_error_code(exc.error_code)
    if status >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.error_code, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: GuildSyncException (and
    subclasses), RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(GuildSyncException, _guildsync_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
