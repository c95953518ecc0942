"""
Structured JSON logging utilities.

The access controller logs tier changes and storage fallbacks with extra
context (``user_key``, ``tier``). These helpers render that context as
single-line JSON so it is searchable in whatever log sink the clinic uses.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any


class StructuredJsonFormatter(logging.Formatter):
    """
    JSON formatter for access control logs.

    Every line carries the same leading fields so tier changes can be
    filtered per user:
    - timestamp: record creation time, ISO 8601 in UTC
    - level, logger, message
    - user_key: active user key, or null outside the controller
    - tier: tier involved in the event, or null

    Other ``extra`` fields follow. Fields whose name suggests a secret are
    masked.
    """

    standard_attrs = {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "taskName", "message",
    }
    context_fields = ("user_key", "tier")
    secret_markers = ("password", "credential", "secret", "token")
    mask = "***"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in self.context_fields:
            log_obj[key] = self._render(key, getattr(record, key, None))

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in log_obj or key in self.standard_attrs or key.startswith("_"):
                continue
            log_obj[key] = self._render(key, value)

        return json.dumps(log_obj, default=str)

    def _render(self, key: str, value: Any) -> Any:
        if value is not None and any(marker in key.lower() for marker in self.secret_markers):
            return self.mask
        if isinstance(value, IntEnum):
            return int(value)
        try:
            json.dumps(value)
            return value
        except (TypeError, ValueError):
            return str(value)


def configure_structured_logging(
    level: int | str = logging.INFO,
    logger_name: str | None = None,
) -> logging.Logger:
    """
    Configure structured JSON logging on stderr.

    Args:
        level: Logging level or level name (default: INFO)
        logger_name: Specific logger to configure (default: root logger)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredJsonFormatter())

    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    return logger


class AccessLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that stamps the active user key on every record.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Add extra context to log record."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs
