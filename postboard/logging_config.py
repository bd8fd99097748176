"""
Postboard Logging Configuration

Keyword arguments passed to a logger call become structured fields. While a
request is being served its ``request_id`` is attached to every record, so the
API error, the store write and the upload event of one request can be matched
up. Output is one JSON object per line, or a compact text line when
``POSTBOARD_LOG_FORMAT=text``.
"""
import json
import logging
import os
import re
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Optional

LOG_LEVEL = os.environ.get("POSTBOARD_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("POSTBOARD_LOG_FORMAT", "json")  # json or text

# ============================================================
# REQUEST CONTEXT
# ============================================================

request_id_var: ContextVar[Optional[str]] = ContextVar("postboard_request_id", default=None)

_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_request_id() -> str:
    return uuid.uuid4().hex[:16]


def accept_request_id(candidate: Optional[str]) -> str:
    """Reuse a caller-supplied id when it is short and printable."""
    if candidate and _REQUEST_ID.match(candidate):
        return candidate
    return new_request_id()


# ============================================================
# FORMATTERS
# ============================================================

def _record_context(record: logging.LogRecord) -> dict:
    return dict(getattr(record, "context", None) or {})


class StructuredFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_record_context(record))
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL logger [request_id] message key=value ...``"""

    def format(self, record: logging.LogRecord) -> str:
        context = _record_context(record)
        request_id = context.pop("request_id", None) or "-"
        trace = context.pop("traceback", None)

        stamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%H:%M:%S")
        line = f"{stamp} {record.levelname:<7} {record.name} [{request_id}] {record.getMessage()}"
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        if trace:
            line += "\n" + trace.rstrip()
        return line


FORMATTERS = {
    "json": StructuredFormatter,
    "text": TextFormatter,
}


def build_formatter(name: str) -> logging.Formatter:
    # unknown names fall back to JSON
    return FORMATTERS.get(name.lower(), StructuredFormatter)()


# ============================================================
# LOGGERS
# ============================================================

class StructuredLogger:
    """Named logger that records keyword arguments as fields"""

    def __init__(self, name: str, log_format: str = LOG_FORMAT):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

        # get_logger may hand out the same name more than once
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(build_formatter(log_format))
            self.logger.addHandler(handler)

    def _log(self, level: int, message: str, error: Optional[BaseException] = None, **context):
        request_id = request_id_var.get()
        if request_id is not None:
            context.setdefault("request_id", request_id)
        if error is not None:
            context["error_type"] = type(error).__name__
            context["error_message"] = str(error)
            context["traceback"] = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        self.logger.log(level, message, extra={"context": context})

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, **context)

    def error(self, message: str, error: Optional[BaseException] = None, **context):
        self._log(logging.ERROR, message, error=error, **context)


def timed(logger: StructuredLogger):
    """Log how long each call of the wrapped store operation takes."""
    def decorator(func):
        operation = func.__qualname__

        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{operation} failed",
                    error=e,
                    operation=operation,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise
            logger.debug(
                f"{operation} finished",
                operation=operation,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return result

        return wrapper

    return decorator


api_logger = StructuredLogger("postboard.api")
db_logger = StructuredLogger("postboard.db")
upload_logger = StructuredLogger("postboard.uploads")


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(f"postboard.{name}")
