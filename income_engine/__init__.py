# income_engine/__init__.py
"""
Portfolio Income Engine.

Computes positions, weighted-average cost basis and dividend income from
a list of buy/sell transactions and sparse per-ticker market data.

Usage:
    from income_engine import IncomeService, parse_market_data, parse_transactions

    transactions = parse_transactions(stored_rows)
    market_data = parse_market_data(provider_payload)

    snapshot = IncomeService().compute(transactions, market_data)
"""

from income_engine.models import (
    ConfirmedDividend,
    DividendEvent,
    MarketQuote,
    PricePoint,
    ProvisionedDividend,
    Transaction,
    TransactionType,
)
from income_engine.schemas import parse_market_data, parse_transactions
from income_engine.services.exceptions import (
    InvalidWindowError,
    InvalidYearError,
    PayloadError,
    ServiceError,
)
from income_engine.services.portfolio import (
    IncomeService,
    attribute_dividends,
    average_price_before,
    compute_positions,
    compute_yield,
    enrich_assets,
    portfolio_evolution,
    rank_payers,
    realized_gains,
    rolling_income,
    year_report,
)

__version__ = "0.1.0"

__all__ = [
    # Domain records
    "Transaction",
    "TransactionType",
    "ConfirmedDividend",
    "ProvisionedDividend",
    "DividendEvent",
    "PricePoint",
    "MarketQuote",
    # Boundary
    "parse_transactions",
    "parse_market_data",
    # Operations
    "compute_positions",
    "enrich_assets",
    "attribute_dividends",
    "compute_yield",
    "rolling_income",
    "year_report",
    "rank_payers",
    "average_price_before",
    "realized_gains",
    "portfolio_evolution",
    # Service
    "IncomeService",
    # Exceptions
    "ServiceError",
    "InvalidWindowError",
    "InvalidYearError",
    "PayloadError",
]
