"""
Global Exception Handlers for the Plugin Host

Centralized exception handling for consistent error responses.

Error Response Format:
{
    "error": {
        "status_code": 404,
        "error_code": "PLUGIN_NOT_FOUND",
        "message": "Plugin not found: theme",
        "type": "Not Found",
        "details": {"plugin": "theme"},
        "path": "/api/v1/plugins/theme",
        "request_id": "..."
    }
}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from plugin_host.exceptions import ErrorCode, PluginHostError
from plugin_host.middleware.logging import get_request_id

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    message: str,
    error_code: str | ErrorCode | None = None,
    details: dict[str, Any] | None = None,
    path: str | None = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        status_code: HTTP status code
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Additional error details
        path: Request path that caused the error

    Returns:
        JSONResponse with standardized error format
    """
    error: dict[str, Any] = {
        "status_code": status_code,
        "message": message,
        "type": get_error_type(status_code),
    }
    if error_code:
        error["error_code"] = error_code.value if isinstance(error_code, ErrorCode) else error_code
    if details:
        error["details"] = details
    if path:
        error["path"] = path
    request_id = get_request_id()
    if request_id:
        error["request_id"] = request_id

    return JSONResponse(status_code=status_code, content={"error": error})


def get_error_type(status_code: int) -> str:
    """Get a human-readable error type based on status code."""
    error_types = {
        400: "Bad Request",
        404: "Not Found",
        409: "Conflict",
        422: "Validation Error",
        500: "Internal Server Error",
        502: "Bad Gateway",
        503: "Service Unavailable",
    }
    return error_types.get(status_code, "Error")


def get_http_error_code(status_code: int) -> str:
    """Map HTTP status codes to error codes for HTTPException."""
    error_code_map = {
        400: ErrorCode.VALIDATION_FAILED.value,
        404: ErrorCode.RESOURCE_NOT_FOUND.value,
        409: ErrorCode.PLUGIN_DUPLICATE.value,
        422: ErrorCode.VALIDATION_FAILED.value,
        500: ErrorCode.INTERNAL_ERROR.value,
        502: ErrorCode.FETCH_FAILED.value,
        503: ErrorCode.SERVICE_UNAVAILABLE.value,
    }
    return error_code_map.get(status_code, ErrorCode.UNKNOWN_ERROR.value)


async def plugin_host_exception_handler(request: Request, exc: PluginHostError) -> JSONResponse:
    """Handle PluginHostError and its subclasses."""
    logger.error(
        "PluginHostError: %s",
        exc.message,
        extra={
            "status_code": exc.status_code,
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )
    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details or None,
        path=request.url.path,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle standard HTTP exceptions."""
    logger.warning("HTTPException: %s", exc.detail, extra={"status_code": exc.status_code, "path": request.url.path})
    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=get_http_error_code(exc.status_code),
        path=request.url.path,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body / query validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors.append({"field": field, "message": error["msg"], "type": error["type"]})

    return create_error_response(
        status_code=422,
        message="Request validation failed",
        error_code=ErrorCode.VALIDATION_FAILED,
        details={"errors": errors},
        path=request.url.path,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle anything that escaped the handlers above."""
    logger.exception("Unhandled exception on %s", request.url.path)
    return create_error_response(
        status_code=500,
        message="An unexpected error occurred",
        error_code=ErrorCode.INTERNAL_ERROR,
        path=request.url.path,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(PluginHostError, plugin_host_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
