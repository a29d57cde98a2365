# income_engine/services/portfolio/history_calculator.py
"""
Evolution Calculator for the monthly invested vs market value series.

Positions change over time as buys and sells occur, so the series cannot
apply today's positions to historical prices. Instead it walks the sorted
transactions once (Rolling State pattern), snapshotting the state at every
month end:

    for month_end in months:
        apply transactions dated on or before month_end
        snapshot invested and market value

Complexity: O(M + T) state updates for M months and T transactions.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal

from income_engine.models import MarketQuote, PricePoint, Transaction
from income_engine.services.constants import QUANTITY_EPSILON
from income_engine.services.portfolio.calculators import (
    AssetEnricher,
    PositionCalculator,
    sort_by_date,
)
from income_engine.services.portfolio.types import (
    ALL_SECTORS_KEY,
    EvolutionPoint,
    PortfolioEvolution,
)
from income_engine.utils.date_utils import iter_month_starts, month_end, month_key
from income_engine.utils.decimal_utils import ZERO, round_money

logger = logging.getLogger(__name__)

_EMPTY_QUOTE = MarketQuote()


def closest_price(history: Sequence[PricePoint], target: date) -> Decimal | None:
    """
    Latest price dated on or before target.

    Args:
        history: Price points in any order
        target: Date to look up

    Returns:
        The price, or None if every point is after target
    """
    best: PricePoint | None = None
    for point in history:
        if point.date <= target and (best is None or point.date >= best.date):
            best = point
    return best.price if best is not None else None


class EvolutionCalculator:
    """
    Monthly evolution of invested capital and market value.

    For each month end from the first transaction's month to as_of's month:
        invested = Σ total_cost of open positions
        market_value = Σ quantity × closest price on or before month end
                       (total_cost when the ticker has no such price)

    Values are reported overall ("all_types") and per resolved sector.

    Attributes:
        _position_calc: Provides apply_transaction for the rolling state
        _enricher: Provides sector resolution
    """

    def __init__(
            self,
            position_calc: PositionCalculator | None = None,
            enricher: AssetEnricher | None = None,
    ) -> None:
        self._position_calc = position_calc or PositionCalculator()
        self._enricher = enricher or AssetEnricher()

    def calculate(
            self,
            transactions: Sequence[Transaction],
            market_data: Mapping[str, MarketQuote],
            as_of: date | None = None,
    ) -> PortfolioEvolution:
        """
        Build the evolution series.

        Args:
            transactions: All transactions, any order
            market_data: Quotes keyed by upper-cased ticker (price history, sector)
            as_of: Last month of the series (defaults to today)

        Returns:
            PortfolioEvolution, empty when there are no transactions
        """
        as_of = as_of or date.today()
        ordered = sort_by_date(transactions)

        if not ordered:
            return PortfolioEvolution()

        months = iter_month_starts(ordered[0].date, as_of)
        sectors = {
            txn.ticker: self._enricher.resolve_sector(
                txn.ticker, market_data.get(txn.ticker.upper(), _EMPTY_QUOTE)
            )
            for txn in ordered
        }

        state: dict[str, dict[str, Decimal]] = {}
        series: dict[str, list[EvolutionPoint]] = {ALL_SECTORS_KEY: []}
        txn_index = 0

        for start in months:
            end = month_end(start)

            # === PHASE 1: Apply transactions up to and including month end ===
            while txn_index < len(ordered) and ordered[txn_index].date <= end:
                self._position_calc.apply_transaction(state, ordered[txn_index])
                txn_index += 1

            # === PHASE 2: Snapshot ===
            self._snapshot(state, market_data, sectors, end, series)

        logger.debug(
            f"Computed evolution over {len(months)} months "
            f"for {len(series) - 1} sectors"
        )
        return PortfolioEvolution(series=series)

    @staticmethod
    def _snapshot(
            state: dict[str, dict[str, Decimal]],
            market_data: Mapping[str, MarketQuote],
            sectors: dict[str, str],
            end: date,
            series: dict[str, list[EvolutionPoint]],
    ) -> None:
        totals: dict[str, list[Decimal]] = {ALL_SECTORS_KEY: [ZERO, ZERO]}

        for ticker, position in state.items():
            if position["quantity"] <= QUANTITY_EPSILON:
                continue

            quote = market_data.get(ticker.upper(), _EMPTY_QUOTE)
            price = closest_price(quote.price_history, end)
            value = (
                position["quantity"] * price
                if price is not None
                else position["total_cost"]
            )

            for key in (ALL_SECTORS_KEY, sectors[ticker]):
                bucket = totals.setdefault(key, [ZERO, ZERO])
                bucket[0] += position["total_cost"]
                bucket[1] += value

        key_month = month_key(end)
        for key, (invested, market_value) in totals.items():
            series.setdefault(key, []).append(
                EvolutionPoint(
                    month_key=key_month,
                    invested=round_money(invested),
                    market_value=round_money(market_value),
                )
            )
