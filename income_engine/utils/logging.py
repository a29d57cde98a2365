# income_engine/utils/logging.py
"""
Logging configuration for the Portfolio Income Engine.

This module provides centralized logging setup with:
- Level taken from settings (LOG_LEVEL)
- Correlation ID on every record
- Ticker and snapshot key fields, passed by the calculators via `extra=`
- JSON format option for log aggregation

Usage:
    from income_engine.utils import setup_logging

    setup_logging()

Log Levels:
    DEBUG   - Per-ticker attribution detail, cache hits/misses
    INFO    - Snapshot computed, cache cleared
    WARNING - Data integrity issues (oversold positions, unknown labels)
    ERROR   - Unexpected failures
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from income_engine.config import settings
from income_engine.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_TEXT_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(ticker)s | %(message)s"
)
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

# Engine fields callers pass through `extra=`; "-" when a record has none
ENGINE_FIELDS = ("ticker", "snapshot_key")
NO_VALUE = "-"

# Standard LogRecord attributes that never go into the JSON "extra" block
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
    *ENGINE_FIELDS,
}


# =============================================================================
# CORRELATION ID FILTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """Adds the current correlation ID to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        record.correlation_id = correlation_id or NO_CORRELATION_ID
        return True


class EngineFieldsFilter(logging.Filter):
    """
    Gives every record the engine fields (ticker, snapshot_key).

    Calculators pass them with `extra={"ticker": ...}`; records without
    them get "-" so the text format never fails on a missing attribute.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for name in ENGINE_FIELDS:
            if getattr(record, name, None) is None:
                setattr(record, name, NO_VALUE)
        return True


# =============================================================================
# JSON FORMATTER
# =============================================================================

class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.123Z",
        "level": "INFO",
        "logger": "income_engine.services.portfolio.service",
        "correlation_id": "abc-123-def",
        "message": "Snapshot computed",
        "snapshot_key": "snapshot:9f2c...",   # only when set
        "ticker": "MXRF11",                  # only when set
        "extra": { ... }
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = getattr(record, "correlation_id", NO_CORRELATION_ID)

        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": correlation_id,
            "message": record.getMessage(),
        }

        for name in ENGINE_FIELDS:
            value = getattr(record, name, NO_VALUE)
            if value != NO_VALUE:
                log_entry[name] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                try:
                    json.dumps(value)
                    extra[key] = value
                except (TypeError, ValueError):
                    extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry)


# =============================================================================
# SETUP FUNCTION
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
) -> None:
    """
    Configure engine-wide logging with correlation ID support.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.log_level.
        log_format: Output format ('text' or 'json').
                    Defaults to settings.log_format.

    Example:
        setup_logging(level="DEBUG", log_format="text")
    """
    log_level_str = level or settings.log_level
    log_level = _get_log_level(log_level_str)

    format_type = log_format or settings.log_format

    if format_type.lower() == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt=DEFAULT_TEXT_FORMAT,
            datefmt=DEFAULT_DATE_FORMAT,
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())
    handler.addFilter(EngineFieldsFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured: level={log_level_str}, format={format_type}",
        extra={"config": {"level": log_level_str, "format": format_type}},
    )


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _get_log_level(level_str: str) -> int:
    """
    Convert string log level to logging constant.

    Raises:
        ValueError: If level_str is not a valid log level
    """
    level_str = level_str.upper().strip()

    level_mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if level_str not in level_mapping:
        valid_levels = ", ".join(level_mapping.keys())
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {valid_levels}"
        )

    return level_mapping[level_str]


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    The correlation ID is added to all messages by the filter
    installed in setup_logging().
    """
    return logging.getLogger(name)
