"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Every error body has the
shape {"error", "message", "details"}; the status code is derived from the
domain error_code. Cache failures never reach this layer (the cached store
absorbs them), so a 503 always means the source store is unreachable.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import UserServiceException

logger = logging.getLogger(__name__)

# Domain error_code -> HTTP status; unknown codes are client errors (400)
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "SERVICE_UNAVAILABLE": 503,
}

# Seconds a client should wait before retrying after a 503
SOURCE_RETRY_AFTER_SECONDS = 5


def _error_body(error: str, message: Any, details: Any = None) -> dict[str, Any]:
    return {"error": error, "message": message, "details": details if details is not None else {}}


def _domain_exception_handler(request: Request, exc: UserServiceException) -> JSONResponse:
    """Map a UserServiceException to its status code.

    404/400 are expected outcomes and logged at debug; 503 is logged as an
    error and carries Retry-After.
    """
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    headers: dict[str, str] | None = None
    if status == 503:
        logger.error(
            "%s %s: source store unavailable (%s)",
            request.method,
            request.url.path,
            exc.details.get("reason", "no reason given"),
        )
        headers = {"Retry-After": str(SOURCE_RETRY_AFTER_SECONDS)}
    else:
        logger.debug("%s %s -> %d %s", request.method, request.url.path, status, exc.error_code)
    return JSONResponse(status_code=status, content=exc.to_dict(), headers=headers)


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 for malformed path parameters or bodies (before the store is called)."""
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_ERROR", "Request validation failed", details),
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return JSON for routing errors (unknown path, wrong method)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", exc.detail),
        headers=getattr(exc, "headers", None),
    )


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include the exception text only when debug is True."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(status_code=500, content=_error_body("INTERNAL_ERROR", message))


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app. Call once after creating it."""
    app.add_exception_handler(UserServiceException, _domain_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
