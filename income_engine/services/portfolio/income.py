# income_engine/services/portfolio/income.py
"""
Income aggregation and portfolio yield.

IncomeAggregator reshapes the all-time monthly history produced by the
attribution calculator into the views the caller displays:
- Rolling N-month series ending at a reference date
- Fixed calendar-year report with a per-payer breakdown
- Payer ranking

YieldCalculator computes the portfolio-wide yield on cost.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from decimal import Decimal

from income_engine.services.constants import DEFAULT_ROLLING_MONTHS, MONTHS_PER_YEAR
from income_engine.services.exceptions import InvalidWindowError, InvalidYearError
from income_engine.services.portfolio.types import (
    Asset,
    IncomeAttribution,
    MonthlyIncomePoint,
    PayerShare,
    PayerSummary,
    RollingIncome,
    YearReport,
    YieldSummary,
)
from income_engine.utils.date_utils import last_n_month_starts, month_key
from income_engine.utils.decimal_utils import HUNDRED, ZERO, round_money, safe_divide

logger = logging.getLogger(__name__)

MIN_YEAR = 1
MAX_YEAR = 9999


class IncomeAggregator:
    """
    Builds monthly and yearly income views from a "YYYY-MM" history.

    Missing months are zero-filled. Histories are never mutated.
    """

    def monthly_series(
            self,
            history: Mapping[str, Decimal],
            as_of: date,
            months: int = DEFAULT_ROLLING_MONTHS,
    ) -> list[MonthlyIncomePoint]:
        """
        Exactly `months` buckets ending at as_of's month, oldest first.

        Raises:
            InvalidWindowError: If months < 1
        """
        if months < 1:
            raise InvalidWindowError(months)

        return [
            MonthlyIncomePoint(
                month_key=month_key(start),
                year=start.year,
                month=start.month,
                total=history.get(month_key(start), ZERO),
            )
            for start in last_n_month_starts(as_of, months)
        ]

    def rolling(
            self,
            history: Mapping[str, Decimal],
            as_of: date,
            months: int = DEFAULT_ROLLING_MONTHS,
    ) -> RollingIncome:
        """
        Rolling income view.

        The average divides by the months elapsed since the first month
        with income inside the window, so a portfolio that started paying
        three months ago averages over three months, not twelve.

        Raises:
            InvalidWindowError: If months < 1
        """
        points = self.monthly_series(history, as_of, months)
        total = round_money(sum((p.total for p in points), ZERO))

        first_paid = next(
            (index for index, point in enumerate(points) if point.total > ZERO),
            len(points),
        )
        divisor = max(1, len(points) - first_paid)

        return RollingIncome(
            points=points,
            total=total,
            average_income=round_money(total / divisor),
            current_month_value=points[-1].total,
        )

    def year_report(self, attribution: IncomeAttribution, year: int) -> YearReport:
        """
        January to December income for one calendar year.

        Raises:
            InvalidYearError: If year is outside 1..9999
        """
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise InvalidYearError(year)

        history = attribution.full_income_history
        points = [
            MonthlyIncomePoint(
                month_key=f"{year:04d}-{month:02d}",
                year=year,
                month=month,
                total=history.get(f"{year:04d}-{month:02d}", ZERO),
            )
            for month in range(1, MONTHS_PER_YEAR + 1)
        ]

        total = round_money(sum((p.total for p in points), ZERO))
        paid_months = sum(1 for p in points if p.total > ZERO)
        average = round_money(total / paid_months) if paid_months else ZERO

        by_ticker = attribution.annual_distribution.get(f"{year:04d}", {})
        payers = sorted(
            (
                PayerShare(
                    ticker=ticker,
                    amount=amount,
                    percentage=round_money(safe_divide(amount, total) * HUNDRED),
                )
                for ticker, amount in by_ticker.items()
            ),
            key=lambda share: share.amount,
            reverse=True,
        )

        logger.debug(f"Year report {year}: total {total} from {len(payers)} payers")

        return YearReport(
            year=year,
            points=points,
            total=total,
            average=average,
            payers=payers,
        )

    @staticmethod
    def rank_payers(payers: Iterable[PayerSummary]) -> list[PayerSummary]:
        """Payers that paid or will pay something, largest total_paid first."""
        return sorted(
            (p for p in payers if p.total_paid > ZERO or p.projected_amount > ZERO),
            key=lambda p: p.total_paid,
            reverse=True,
        )


class YieldCalculator:
    """
    Portfolio-wide yield on cost.

    Formulas:
        projected_annual_income = Σ quantity × current_price × dy / 100
        total_invested = Σ quantity × avg_price
        yield_on_cost = projected_annual_income / total_invested × 100

    Only held assets count; exited or oversold tickers in an
    include_closed list are skipped.
    """

    def calculate(self, assets: Sequence[Asset]) -> YieldSummary:
        held = [a for a in assets if a.has_position]
        projected = sum((a.projected_annual_income for a in held), ZERO)
        invested = sum((a.invested for a in held), ZERO)

        return YieldSummary(
            yield_on_cost=round_money(safe_divide(projected, invested) * HUNDRED),
            projected_annual_income=round_money(projected),
            total_invested=round_money(invested),
        )
