"""
Logging configuration for the geyser engine.

Engine modules log through module-level loggers with structured ``extra``
payloads (``{"event": "geyser.stake", ...}``). This module installs a handler
on the ``geyser`` logger that renders those payloads either as JSON lines or
as plain text.

Usage:
    from geyser.logging_config import setup_logging

    logger = setup_logging(level="DEBUG", json_format=True)
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

ROOT_LOGGER_NAME = "geyser"


class GeyserJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service fields."""

    def __init__(
        self,
        fmt: str = "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name: str = "geyser",
    ):
        super().__init__(fmt=fmt)
        self.service_name = service_name

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        if "timestamp" not in log_record or not log_record["timestamp"]:
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname.lower()
        log_record["service"] = self.service_name


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    stream: Optional[Any] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Calling this more than once replaces the previously installed handler.

    Args:
        level: Log level name
        json_format: Emit JSON lines instead of plain text
        stream: Output stream (defaults to stderr)

    Returns:
        The configured ``geyser`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_geyser_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(GeyserJsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))
    handler._geyser_handler = True
    logger.addHandler(handler)
    return logger


def setup_logging_from_config(config) -> logging.Logger:
    """Configure the package logger from a ``LoggingConfig`` section."""
    return setup_logging(level=config.level, json_format=config.json_format)
