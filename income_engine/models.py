# income_engine/models.py
"""
Domain entities handed to the engine by its collaborators.

These are plain, immutable records. The persistence layer and the market
data providers own how they are stored and fetched; the engine only
reads them.

Entities:
    Transaction         - One buy or sell of a ticker
    ConfirmedDividend   - A paid distribution (realized income)
    ProvisionedDividend - An announced, not yet paid distribution (projected income)
    PricePoint          - One historical closing price
    MarketQuote         - Sparse market data for one ticker
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Union

from income_engine.utils.decimal_utils import ZERO, to_decimal


def _coerce_decimals(record: object, *names: str) -> None:
    """Convert numeric fields of a frozen record to Decimal, keeping None."""
    for name in names:
        value = getattr(record, name)
        if value is not None and not isinstance(value, Decimal):
            object.__setattr__(record, name, to_decimal(value))


class TransactionType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


# =============================================================================
# TRANSACTIONS
# =============================================================================

@dataclass(frozen=True)
class Transaction:
    """
    A single trade.

    Attributes:
        id: Caller-assigned identifier (uniqueness is not enforced)
        ticker: Trading symbol as recorded by the caller
        transaction_type: BUY or SELL
        quantity: Units traded (expected positive)
        price: Price per unit
        date: Trade date (no time of day)
        costs: Brokerage fees and taxes paid on the trade
    """

    id: str
    ticker: str
    transaction_type: TransactionType
    quantity: Decimal
    price: Decimal
    date: date
    costs: Decimal = ZERO

    def __post_init__(self) -> None:
        if self.costs is None:
            object.__setattr__(self, "costs", ZERO)
        _coerce_decimals(self, "quantity", "price", "costs")

    @property
    def is_buy(self) -> bool:
        return self.transaction_type == TransactionType.BUY

    @property
    def signed_quantity(self) -> Decimal:
        """Quantity with sign: positive for buys, negative for sells."""
        return self.quantity if self.is_buy else -self.quantity

    @property
    def gross_cost(self) -> Decimal:
        """quantity × price + costs (what a buy adds to cost basis)."""
        return self.quantity * self.price + self.costs


# =============================================================================
# DIVIDEND EVENTS
# =============================================================================

@dataclass(frozen=True)
class ConfirmedDividend:
    """
    A distribution that has been paid.

    Ownership is decided at ex_date; the cash lands in payment_date's month.
    """

    ticker: str
    ex_date: date
    payment_date: date
    value: Decimal

    is_provisioned = False

    def __post_init__(self) -> None:
        _coerce_decimals(self, "value")


@dataclass(frozen=True)
class ProvisionedDividend:
    """
    An announced distribution that has not been paid yet.

    Contributes to projected income only, never to realized totals.
    """

    ticker: str
    ex_date: date
    expected_payment_date: date
    value: Decimal

    is_provisioned = True

    def __post_init__(self) -> None:
        _coerce_decimals(self, "value")

    @property
    def payment_date(self) -> date:
        """Expected payment date, under the name shared with ConfirmedDividend."""
        return self.expected_payment_date


DividendEvent = Union[ConfirmedDividend, ProvisionedDividend]


# =============================================================================
# MARKET DATA
# =============================================================================

@dataclass(frozen=True)
class PricePoint:
    """One historical closing price."""

    date: date
    price: Decimal

    def __post_init__(self) -> None:
        _coerce_decimals(self, "price")


@dataclass(frozen=True)
class MarketQuote:
    """
    Market data for one ticker, as supplied by external providers.

    Every field is optional: providers are sparse and partial. Defaults are
    resolved in one place (AssetEnricher), in this order:
        current_price: quote price if > 0, else the position's average price
        dy:            quote dy, else 0
        sector:        asset_type, sector (unless "Outros"), static table, "Outros"

    Attributes:
        current_price: Last traded price
        dy: Trailing dividend yield, in percent
        pvp: Price to book value
        sector: Provider sector/segment label
        asset_type: Finer-grained segment label, preferred over sector
        administrator: Fund administrator
        dividends_history: Dividend events (may contain duplicates per ex-date)
        price_history: Historical prices, any order
    """

    current_price: Decimal | None = None
    dy: Decimal | None = None
    pvp: Decimal | None = None
    sector: str | None = None
    asset_type: str | None = None
    administrator: str | None = None
    dividends_history: tuple[DividendEvent, ...] = ()
    price_history: tuple[PricePoint, ...] = ()
    vacancy_rate: Decimal | None = None
    liquidity: Decimal | None = None
    shareholders: int | None = None
    last_dividend: Decimal | None = None
    next_payment_date: date | None = None

    def __post_init__(self) -> None:
        _coerce_decimals(
            self, "current_price", "dy", "pvp", "vacancy_rate", "liquidity", "last_dividend"
        )
        object.__setattr__(self, "dividends_history", tuple(self.dividends_history))
        object.__setattr__(self, "price_history", tuple(self.price_history))
