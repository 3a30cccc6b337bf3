"""
Logging for the Personnel API.

Production writes one JSON object per line; development writes colored
single-line records. Every HTTP request gets a short id that is attached to
its access log line and echoed back in the X-Request-ID response header.
"""

import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from app.core.config import settings

SERVICE_NAME = "personnel-api"
REQUEST_ID_HEADER = b"x-request-id"

_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "request_id"}

# Libraries that are chatty at DEBUG/INFO
_QUIET_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "sqlalchemy.engine",
    "aiosqlite",
    "asyncpg",
    "httpx",
    "httpcore",
)

_UNLOGGED_PATHS = frozenset({"/health"})


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregators."""

    def __init__(self, service_name: str = SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": settings.ENVIRONMENT,
            "source": {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored single-line output for the development console."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        request_id = getattr(record, "request_id", None)
        origin = f"{record.name} [{request_id}]" if request_id else record.name

        message = f"{color}{timestamp} {record.levelname:<8}{self.RESET} {origin}: {record.getMessage()}"
        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"
        return message


def setup_logging(
    service_name: str = SERVICE_NAME,
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
) -> None:
    """
    Configure the root logger with a single stdout handler.

    Args:
        service_name: Value of the "service" field in JSON records
        log_level: Overrides LOG_LEVEL (defaults to DEBUG when DEBUG is on, else INFO)
        json_logs: Overrides JSON_LOGS (defaults to JSON in production)
    """
    level_name = (log_level or settings.LOG_LEVEL or ("DEBUG" if settings.DEBUG else "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    if json_logs is None:
        json_logs = settings.JSON_LOGS if settings.JSON_LOGS is not None else settings.is_production

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service_name) if json_logs else ColoredFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger("personnel.logging").info(
        f"Logging configured: level={level_name}, format={'JSON' if json_logs else 'colored'}, "
        f"environment={settings.ENVIRONMENT}"
    )


def generate_request_id() -> str:
    """Short request id for correlating log lines."""
    return uuid.uuid4().hex[:8]


class RequestLoggingMiddleware:
    """
    Pure ASGI access logger.

    Logs method, path, status and duration once per request (WARNING for
    4xx/5xx), stores the request id in request.state and adds it to the
    response headers.
    """

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger("personnel.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = generate_request_id()
        scope.setdefault("state", {})["request_id"] = request_id
        started = time.perf_counter()
        response_status = 0

        async def send_with_request_id(message):
            nonlocal response_status
            if message["type"] == "http.response.start":
                response_status = message["status"]
                headers = list(message.get("headers", []))
                headers.append((REQUEST_ID_HEADER, request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        except Exception:
            response_status = 500
            raise
        finally:
            path = scope.get("path", "/")
            if path not in _UNLOGGED_PATHS:
                method = scope.get("method", "UNKNOWN")
                duration_ms = (time.perf_counter() - started) * 1000
                self.logger.log(
                    logging.WARNING if response_status >= 400 else logging.INFO,
                    f"{method} {path} {response_status} {duration_ms:.1f}ms",
                    extra={
                        "request_id": request_id,
                        "method": method,
                        "path": path,
                        "status": response_status,
                        "duration_ms": round(duration_ms, 1),
                    },
                )
