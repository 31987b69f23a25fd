"""Logging configuration for Newton.

Every module logs through ``logging.getLogger(__name__)``; this module wires
a single handler onto the ``newton`` logger, either as plain text or as JSON.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

LOG_NAME = "newton"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(filename)s:%(lineno)d %(message)s"

# Attributes present on every LogRecord. Anything else is an extra field.
DEFAULT_LOG_RECORD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
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
    "message",
    "asctime",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    """Formatter returning log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "site": f"{record.filename}:{record.lineno}",
            "message": record.getMessage(),
        }
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in DEFAULT_LOG_RECORD_ATTRS
        }
        if extras:
            base["extra"] = extras
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", fmt: str = "text") -> logging.Logger:
    """Attach a stream handler to the ``newton`` logger.

    Calling this again replaces the previous handler instead of stacking a
    second one.
    """
    logger = logging.getLogger(LOG_NAME)
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_newton_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._newton_handler = True  # type: ignore[attr-defined]
    if fmt.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
