# tests/factories.py
"""
Factories for transactions, dividend events, quotes and assets.

Plain builders taking short string literals, so tests read like the
scenarios they check.
"""

from datetime import date
from decimal import Decimal
from itertools import count

from income_engine.models import (
    ConfirmedDividend,
    MarketQuote,
    PricePoint,
    ProvisionedDividend,
    Transaction,
    TransactionType,
)
from income_engine.services.portfolio.types import Asset

_ids = count(1)


# =============================================================================
# FACTORIES
# =============================================================================

def make_txn(
        ticker: str,
        transaction_type: TransactionType | str,
        quantity: str | int,
        price: str | int,
        on: date,
        costs: str | int = "0",
        txn_id: str | None = None,
) -> Transaction:
    """Build a Transaction from short literals."""
    return Transaction(
        id=txn_id or f"t{next(_ids)}",
        ticker=ticker,
        transaction_type=TransactionType(transaction_type),
        quantity=Decimal(str(quantity)),
        price=Decimal(str(price)),
        date=on,
        costs=Decimal(str(costs)),
    )


def buy(ticker, quantity, price, on, costs="0", txn_id=None) -> Transaction:
    return make_txn(ticker, TransactionType.BUY, quantity, price, on, costs, txn_id)


def sell(ticker, quantity, price, on, costs="0", txn_id=None) -> Transaction:
    return make_txn(ticker, TransactionType.SELL, quantity, price, on, costs, txn_id)


def confirmed(ticker: str, ex_date: date, payment_date: date, value: str) -> ConfirmedDividend:
    return ConfirmedDividend(
        ticker=ticker,
        ex_date=ex_date,
        payment_date=payment_date,
        value=Decimal(value),
    )


def provisioned(ticker: str, ex_date: date, payment_date: date, value: str) -> ProvisionedDividend:
    return ProvisionedDividend(
        ticker=ticker,
        ex_date=ex_date,
        expected_payment_date=payment_date,
        value=Decimal(value),
    )


def quote(
        current_price: str | None = None,
        dy: str | None = None,
        dividends=(),
        prices=(),
        **kwargs,
) -> MarketQuote:
    """Build a MarketQuote; prices is a sequence of (date, "price") pairs."""
    return MarketQuote(
        current_price=Decimal(current_price) if current_price is not None else None,
        dy=Decimal(dy) if dy is not None else None,
        dividends_history=tuple(dividends),
        price_history=tuple(PricePoint(date=d, price=Decimal(p)) for d, p in prices),
        **kwargs,
    )


def make_asset(
        ticker: str,
        quantity: str = "10",
        avg_price: str = "10",
        current_price: str | None = None,
        dy: str = "0",
        dividends=(),
        yield_on_cost: str = "0",
) -> Asset:
    """Build an Asset directly, bypassing the enricher."""
    qty = Decimal(quantity)
    avg = Decimal(avg_price)
    return Asset(
        ticker=ticker,
        quantity=qty,
        avg_price=avg,
        total_cost=qty * avg,
        current_price=Decimal(current_price) if current_price is not None else avg,
        dy=Decimal(dy),
        sector="Outros",
        yield_on_cost=Decimal(yield_on_cost),
        dividends_history=list(dividends),
    )

