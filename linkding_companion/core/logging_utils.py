from __future__ import annotations

import datetime as dt
import json
import logging
import os
import sys
import uuid
from typing import Any

from loguru import logger as loguru_logger

UTC = dt.UTC

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_FIELDS = frozenset(
    {
        "args",
        "msg",
        "name",
        "levelno",
        "levelname",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "message",
    }
)

_NOISY_LOGGERS = ("httpx", "httpcore", "apscheduler.executors.default", "trafilatura")


class EnhancedJsonFormatter(logging.Formatter):
    """JSON formatter that folds ``extra`` fields and correlation ids into one line."""

    def __init__(self, include_location: bool = True, include_process_info: bool = False):
        super().__init__()
        self.include_location = include_location
        self.include_process_info = include_process_info
        self.hostname = os.uname().nodename if hasattr(os, "uname") else "unknown"

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "timestamp": dt.datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "hostname": self.hostname,
        }

        if self.include_location:
            base.update(
                {
                    "module": record.module,
                    "function": record.funcName,
                    "line": record.lineno,
                }
            )

        if self.include_process_info:
            base.update(
                {
                    "process": record.process,
                    "thread_name": getattr(record, "threadName", "MainThread"),
                }
            )

        if record.exc_info:
            base["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_FIELDS and key not in base
        }
        correlation_id = extra_fields.pop("correlation_id", None) or extra_fields.pop("cid", None)
        if correlation_id:
            base["correlation_id"] = correlation_id
        if "bookmark_id" in extra_fields:
            base["bookmark_id"] = extra_fields.pop("bookmark_id")
        if extra_fields:
            base["extra"] = extra_fields

        return json.dumps(
            base, ensure_ascii=False, default=self._json_serializer, separators=(",", ":")
        )

    def _json_serializer(self, obj: Any) -> str:
        if isinstance(obj, dt.datetime):
            return obj.isoformat()
        return str(obj)


class InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping ``extra`` fields as bound context."""

    def emit(self, record: logging.LogRecord) -> None:
        level: int | str
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_FIELDS
        }
        loguru_logger.bind(logger_name=record.name, **extra).opt(
            depth=6, exception=record.exc_info
        ).log(level, record.getMessage())


def setup_json_logging(
    level: str = "INFO",
    log_format: str = "json",
    include_location: bool = True,
    log_file: str | None = None,
) -> None:
    """Configure process logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: ``json`` for stdlib handlers with :class:`EnhancedJsonFormatter`,
            ``loguru`` to route every stdlib record through a serialized loguru sink
        include_location: Include module/function/line in JSON records
        log_file: Optional file path receiving the same records
    """
    lvl = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(lvl)

    if log_format == "loguru":
        loguru_logger.remove()
        loguru_logger.add(sys.stdout, level=level.upper(), serialize=True, enqueue=True)
        if log_file:
            loguru_logger.add(
                log_file,
                level=level.upper(),
                serialize=True,
                rotation="100 MB",
                retention="30 days",
                enqueue=True,
            )
        root.addHandler(InterceptHandler())
    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(EnhancedJsonFormatter(include_location=include_location))
        root.addHandler(console_handler)

        if log_file:
            from logging.handlers import RotatingFileHandler

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=100 * 1024 * 1024,
                backupCount=5,
            )
            file_handler.setFormatter(EnhancedJsonFormatter(include_location=include_location))
            root.addHandler(file_handler)

    for noisy_logger in _NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(max(lvl, logging.WARNING))

    logging.getLogger(__name__).debug(
        "logging_initialized",
        extra={"level": level, "log_format": log_format, "log_file": log_file},
    )


def generate_correlation_id() -> str:
    """Generate a short correlation ID for tracing one sweep or job across logs."""
    return uuid.uuid4().hex[:12]


def truncate_log_content(content: str | None, max_length: int = 200) -> str | None:
    """Truncate large content (LLM replies, extracted text) before logging it."""
    if not content or len(content) <= max_length:
        return content
    return content[: max_length - 3] + "..."
