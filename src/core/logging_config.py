"""Structured logging configuration for the playlist campaign engine.

Supports two modes:
- Production: JSON format for log aggregation
- Development: Human-readable format
"""

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any

# Standard LogRecord attributes that are not "extra" fields
_STANDARD_ATTRS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "exc_info",
    "exc_text",
    "thread",
    "threadName",
    "taskName",
    "message",
}


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production environments.

    Outputs single-line JSON that log aggregators handle correctly.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Fields passed via extra={}
        extra_fields = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str)


def _is_production_logging() -> bool:
    return bool(os.environ.get("PRODUCTION")) or os.environ.get("ENVIRONMENT", "").lower() == "production"


def setup_structured_logging(level: int = logging.INFO) -> None:
    """Setup logging for the engine.

    In production, configures all loggers to output single-line JSON so multiline
    messages do not show up as separate log entries.
    """
    if _is_production_logging():
        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root_logger.addHandler(handler)

        # Library loggers that might carry their own handlers
        for logger_name in ["httpx", "httpcore", "sqlalchemy.engine"]:
            lib_logger = logging.getLogger(logger_name)
            lib_logger.handlers = []
            lib_logger.addHandler(handler)
            lib_logger.propagate = False

        logging.info("JSON structured logging enabled for production")
    else:
        # force=True ensures configuration is applied even if logging was already configured
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )
