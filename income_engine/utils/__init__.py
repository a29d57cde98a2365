"""
Utility modules for the Portfolio Income Engine.

This package contains cross-cutting utilities:
- logging: Logging configuration and setup with correlation ID support
- context: Correlation ID storage
- date_utils: Month/year bucket keys and month arithmetic
- decimal_utils: Decimal conversion, rounding and safe division

Usage:
    from income_engine.utils import setup_logging, get_logger
    from income_engine.utils import get_correlation_id, set_correlation_id
    from income_engine.utils.date_utils import month_key
"""

from income_engine.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from income_engine.utils.logging import setup_logging, get_logger

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
