"""
Structured Logging

JSON-formatted logging for the plugin host plus a request logging
middleware.  Every record carries the current request ID so plugin
failures logged deep inside registration or composition can be tied back
to the request that triggered them.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_EXTRA_FIELDS = ("method", "path", "status_code", "duration_ms", "client_ip", "error_code", "details")


class RequestIdFilter(logging.Filter):
    """Logging filter to add request ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("")
        return True


class StructuredFormatter(logging.Formatter):
    """JSON formatter: one object per line, suitable for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", ""),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data, default=str)


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its ID, status and duration."""

    def __init__(self, app: ASGIApp, logger_name: str = "plugin_host.access"):
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request_id_var.set(request_id)
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            self._log_request(request, 500, (time.perf_counter() - start_time) * 1000, client_ip, error=str(e))
            raise

        response.headers["X-Request-ID"] = request_id
        self._log_request(request, response.status_code, (time.perf_counter() - start_time) * 1000, client_ip)
        return response

    def _log_request(
        self,
        request: Request,
        status_code: int,
        duration_ms: float,
        client_ip: str,
        error: str | None = None,
    ) -> None:
        if request.url.path == "/health":
            return

        if status_code >= 500:
            log_level = logging.ERROR
        elif status_code >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        extra = {
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
            "client_ip": client_ip,
        }

        message = f"{request.method} {request.url.path} - {status_code} ({duration_ms:.2f}ms)"
        if error:
            message += f" - Error: {error}"

        self.logger.log(log_level, message, extra=extra)


def setup_structured_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """
    Configure root logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON formatter (True for production)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"))
    handler.addFilter(RequestIdFilter())
    root_logger.addHandler(handler)

    for logger_name, level in {
        "plugin_host": log_level,
        "plugin_host.access": log_level,
        "uvicorn": "WARNING",
        "uvicorn.access": "WARNING",
        "httpx": "WARNING",
    }.items():
        logging.getLogger(logger_name).setLevel(getattr(logging, level.upper()))


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get("")
