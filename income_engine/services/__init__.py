# income_engine/services/__init__.py
"""
Service layer for the income calculations.

Services:
- Have NO knowledge of storage or providers (inputs are plain records)
- Raise domain-specific exceptions
- Are pure functions of their inputs, easily testable

Usage:
    from income_engine.services import IncomeService
    from income_engine.services import (
        ServiceError,
        InvalidWindowError,
        InvalidYearError,
        PayloadError,
    )

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants and the sector table
    └── portfolio/                   # Positions, dividends, income views
"""

from income_engine.services.exceptions import (
    InvalidWindowError,
    InvalidYearError,
    PayloadError,
    ServiceError,
    ValidationError,
)
from income_engine.services.portfolio import IncomeService, SnapshotCache

__all__ = [
    # Services
    "IncomeService",
    "SnapshotCache",
    # Exceptions
    "ServiceError",
    "ValidationError",
    "InvalidWindowError",
    "InvalidYearError",
    "PayloadError",
]
