# income_engine/schemas/validators.py
"""
Reusable validation functions for the payload schemas.

This module provides:
- Ticker normalization
- Transaction type normalization (English and Portuguese labels)
- Lenient date and number coercion for provider payloads

These validators ensure consistent input handling across all schemas.
"""

from datetime import date, datetime
from decimal import Decimal

from income_engine.models import TransactionType
from income_engine.utils.decimal_utils import to_decimal

# =============================================================================
# CONSTANTS
# =============================================================================

TICKER_MAX_LENGTH = 20

# Labels accepted for each transaction type, compared case-insensitively
TRANSACTION_TYPE_ALIASES: dict[str, TransactionType] = {
    "BUY": TransactionType.BUY,
    "COMPRA": TransactionType.BUY,
    "SELL": TransactionType.SELL,
    "VENDA": TransactionType.SELL,
}


# =============================================================================
# TICKER
# =============================================================================

def normalize_ticker(value: str) -> str:
    """
    Normalize a ticker symbol (trim and uppercase).

    Raises:
        ValueError: If the ticker is empty or too long
    """
    normalized = value.strip().upper() if value else ""

    if not normalized:
        raise ValueError("Ticker cannot be empty")
    if len(normalized) > TICKER_MAX_LENGTH:
        raise ValueError(f"Ticker cannot exceed {TICKER_MAX_LENGTH} characters")

    return normalized


# =============================================================================
# TRANSACTION TYPE
# =============================================================================

def normalize_transaction_type(value: str | TransactionType) -> TransactionType:
    """
    Map a transaction type label to TransactionType.

    Accepts "BUY"/"SELL" and the Portuguese "Compra"/"Venda", in any case.

    Raises:
        ValueError: If the label is not recognized
    """
    if isinstance(value, TransactionType):
        return value

    label = str(value).strip().upper()
    try:
        return TRANSACTION_TYPE_ALIASES[label]
    except KeyError:
        raise ValueError(
            f"Unknown transaction type: '{value}'. "
            "Expected one of: Compra, Venda, BUY, SELL"
        ) from None


# =============================================================================
# COERCION
# =============================================================================

def coerce_date(value):
    """
    Reduce datetimes and ISO timestamps to a plain date.

    Other values are returned unchanged for pydantic to validate.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        return value[:10]
    return value


def coerce_decimal(value):
    """
    Convert floats through str() so 0.11 stays Decimal("0.11").

    Other values are returned unchanged for pydantic to validate.
    """
    if isinstance(value, float):
        return to_decimal(value)
    return value


def optional_decimal(value) -> Decimal | None:
    """Like coerce_decimal, but empty strings become None."""
    if isinstance(value, str) and not value.strip():
        return None
    return coerce_decimal(value)
