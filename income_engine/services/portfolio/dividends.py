# income_engine/services/portfolio/dividends.py
"""
Dividend attribution.

Attributes each dividend event of an asset to the portfolio by replaying
the ticker's transactions up to the event's ex-date.

Ownership policy (ex-date exclusive):
    A unit counts for an event only if it was bought strictly before
    ex_date. A purchase dated exactly on ex_date is not entitled.
    A sale dated on ex_date still counts as held (the seller keeps the
    dividend), because only transactions before ex_date are replayed.

Confirmed events are realized income, bucketed by payment date.
Provisioned events only feed a ticker's projected amount.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from income_engine.models import (
    ConfirmedDividend,
    DividendEvent,
    ProvisionedDividend,
    Transaction,
)
from income_engine.services.constants import DEFAULT_ROLLING_MONTHS, MAX_AVERAGE_MONTHS
from income_engine.services.portfolio.calculators import group_by_ticker
from income_engine.services.portfolio.income import IncomeAggregator
from income_engine.services.portfolio.types import (
    Asset,
    IncomeAttribution,
    PayerSummary,
)
from income_engine.utils.date_utils import month_key, year_key
from income_engine.utils.decimal_utils import ZERO, round_money

logger = logging.getLogger(__name__)


def shares_held_before(transactions: Iterable[Transaction], ex_date: date) -> Decimal:
    """
    Units held at the end of the day before ex_date.

    Args:
        transactions: One ticker's transactions, sorted ascending by date
        ex_date: Event ex-date

    Returns:
        Signed quantity of every transaction strictly before ex_date,
        clamped at 0
    """
    held = ZERO
    for txn in transactions:
        if txn.date >= ex_date:
            break
        held += txn.signed_quantity
    return max(ZERO, held)


class DividendAttributionCalculator:
    """
    Builds realized and projected income for the whole portfolio.

    For every asset with transactions, each event in its history is
    attributed independently:
        owned = shares_held_before(transactions, ex_date)
        amount = round(owned × value, 2)

    Realized income (confirmed events) flows into:
        total_received, the payer's total_paid and count,
        full_income_history["YYYY-MM" of payment] and
        annual_distribution["YYYY" of payment][ticker]

    Every running sum is rounded to cents right after each addition.

    Note:
        Events whose ex_date precedes the ticker's first transaction are
        skipped. Assets must be enriched with include_closed=True for fully
        exited tickers to keep their past income.
    """

    def __init__(
            self,
            aggregator: IncomeAggregator | None = None,
            rolling_months: int = DEFAULT_ROLLING_MONTHS,
    ) -> None:
        self._aggregator = aggregator or IncomeAggregator()
        self._rolling_months = rolling_months

    def calculate(
            self,
            assets: Sequence[Asset],
            transactions: Sequence[Transaction],
            as_of: date | None = None,
    ) -> IncomeAttribution:
        """
        Attribute every asset's dividend history.

        Args:
            assets: Enriched assets (with dividend histories)
            transactions: All transactions, any order
            as_of: End of the rolling monthly series (defaults to today)

        Returns:
            IncomeAttribution with payers in asset order
        """
        as_of = as_of or date.today()
        by_ticker = group_by_ticker(transactions)

        payers: list[PayerSummary] = []
        total_received = ZERO
        full_history: dict[str, Decimal] = {}
        annual: dict[str, dict[str, Decimal]] = {}

        for asset in assets:
            ticker_txns = by_ticker.get(asset.ticker)
            if not ticker_txns:
                continue

            first_trade = ticker_txns[0].date
            total_paid = ZERO
            projected = ZERO
            count = 0

            for event in asset.dividends_history:
                if event.ex_date < first_trade:
                    continue

                owned = shares_held_before(ticker_txns, event.ex_date)
                if owned <= ZERO:
                    continue

                amount = round_money(owned * event.value)

                if isinstance(event, ProvisionedDividend):
                    projected = round_money(projected + amount)
                elif isinstance(event, ConfirmedDividend):
                    total_received = round_money(total_received + amount)
                    total_paid = round_money(total_paid + amount)
                    count += 1

                    month = month_key(event.payment_date)
                    full_history[month] = round_money(full_history.get(month, ZERO) + amount)

                    year_bucket = annual.setdefault(year_key(event.payment_date), {})
                    year_bucket[asset.ticker] = round_money(
                        year_bucket.get(asset.ticker, ZERO) + amount
                    )
                else:
                    raise TypeError(f"Unknown dividend event type: {type(event).__name__}")

            payers.append(
                self._summarize(asset, total_paid, count, projected)
            )

        logger.debug(
            f"Attributed dividends for {len(payers)} tickers: "
            f"total received {total_received} over {len(full_history)} months"
        )

        return IncomeAttribution(
            monthly_income=self._aggregator.monthly_series(
                full_history, as_of, self._rolling_months
            ),
            payers=payers,
            total_received=total_received,
            annual_distribution=annual,
            full_income_history=full_history,
            as_of=as_of,
        )

    @staticmethod
    def _summarize(
            asset: Asset,
            total_paid: Decimal,
            count: int,
            projected: Decimal,
    ) -> PayerSummary:
        history: list[DividendEvent] = list(asset.dividends_history)
        provisioned = [e for e in history if isinstance(e, ProvisionedDividend)]
        latest = max(history, key=lambda e: e.ex_date) if history else None

        if provisioned:
            next_payment = min(e.expected_payment_date for e in provisioned)
        elif latest is not None:
            next_payment = latest.payment_date
        else:
            next_payment = None

        divisor = max(1, min(count, MAX_AVERAGE_MONTHS))

        return PayerSummary(
            ticker=asset.ticker,
            total_paid=total_paid,
            count=count,
            projected_amount=projected,
            last_ex_date=latest.ex_date if latest is not None else None,
            next_payment_date=next_payment,
            is_provisioned=bool(provisioned),
            average_monthly=round_money(total_paid / divisor),
            yield_on_cost=asset.yield_on_cost,
        )
