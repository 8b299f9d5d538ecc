"""Logging configuration for Community Hub sync.

All package loggers are children of the ``communityhub_sync`` logger, so a
host application can route or silence them with a single logger name.

Environment variables:
    LOG_LEVEL: Log level name (default: INFO)
    LOG_FORMAT: 'text' (default) or 'json'
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import msgspec

ROOT_LOGGER_NAME = "communityhub_sync"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a record as one JSON line."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return msgspec.json.encode(log_data).decode("utf-8")


def setup_logging(level: str | None = None, json_format: bool | None = None) -> None:
    """Configure the package logger.

    Args:
        level: Log level name; falls back to LOG_LEVEL, then INFO
        json_format: Emit JSON lines; falls back to LOG_FORMAT == 'json'
    """
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "text").lower() == "json"

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level, logging.INFO))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a package logger, e.g. ``get_logger("token_manager")``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
