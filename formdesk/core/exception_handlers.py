"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to the failure envelope:
{"success": false, "message": ..., "error": {"code": ..., "details": {...}}}.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from formdesk.core.config import get_settings
from formdesk.domain.exceptions import FormdeskException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "ALREADY_EXISTS": 409,
    "LIMIT_EXCEEDED": 400,
    "DOCUMENT_VERSION_CONFLICT": 409,
}

_HTTP_ERROR_CODES: dict[int, str] = {
    401: "AUTHENTICATION_ERROR",
    403: "PERMISSION_DENIED",
    404: "RESOURCE_NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Failure envelope for errors that do not come from FormdeskException."""
    return {
        "success": False,
        "message": message,
        "error": {"code": code, "details": details or {}},
    }


def _formdesk_exception_handler(
    request: Request, exc: FormdeskException
) -> JSONResponse:
    """Return JSON from FormdeskException.to_dict() with appropriate status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    return JSONResponse(status_code=status, content=jsonable_encoder(exc.to_dict()))


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 400 with the request validation errors."""
    return JSONResponse(
        status_code=400,
        content=error_body(
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": jsonable_encoder(exc.errors())},
        ),
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def _rate_limit_exception_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Return 429 when a slowapi limit is hit."""
    return JSONResponse(
        status_code=429,
        content=error_body("RATE_LIMITED", f"Rate limit exceeded: {exc.detail}"),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    message = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(status_code=500, content=error_body("INTERNAL_ERROR", message))


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: FormdeskException (and
    subclasses), RequestValidationError, RateLimitExceeded,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(FormdeskException, _formdesk_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
