# income_engine/schemas/__init__.py
"""
Pydantic schemas for collaborator payloads.

Schemas validate and normalize the dicts handed over by the persistence
layer and the market data providers, then convert them into the
immutable domain records in income_engine.models.
"""

from income_engine.schemas.market_data import (
    DividendEventPayload,
    MarketQuotePayload,
    PricePointPayload,
    parse_market_data,
)
from income_engine.schemas.transactions import TransactionPayload, parse_transactions

__all__ = [
    "TransactionPayload",
    "DividendEventPayload",
    "PricePointPayload",
    "MarketQuotePayload",
    "parse_transactions",
    "parse_market_data",
]
