# income_engine/services/portfolio/operations.py
"""
Functional API over the portfolio calculators.

Each operation is a pure function of its arguments: inputs are never
mutated and the same inputs always give the same result. Use IncomeService
instead when the whole snapshot is needed and caching matters.
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from decimal import Decimal

from income_engine.models import MarketQuote, Transaction
from income_engine.services.constants import DEFAULT_ROLLING_MONTHS
from income_engine.services.portfolio.calculators import (
    AssetEnricher,
    PositionCalculator,
    RealizedGainCalculator,
)
from income_engine.services.portfolio.dividends import DividendAttributionCalculator
from income_engine.services.portfolio.history_calculator import EvolutionCalculator
from income_engine.services.portfolio.income import IncomeAggregator, YieldCalculator
from income_engine.services.portfolio.types import (
    Asset,
    IncomeAttribution,
    PayerSummary,
    PortfolioEvolution,
    Position,
    PositionsResult,
    RealizedGain,
    RollingIncome,
    YearReport,
    YieldSummary,
)


def compute_positions(transactions: Sequence[Transaction]) -> PositionsResult:
    """Fold transactions into weighted-average positions, one per ticker."""
    return PositionCalculator().calculate(transactions)


def enrich_assets(
        positions: Mapping[str, Position] | PositionsResult,
        market_data: Mapping[str, MarketQuote],
        include_closed: bool = False,
) -> list[Asset]:
    """Merge positions with market data; exited positions are dropped unless include_closed."""
    return AssetEnricher().enrich(positions, market_data, include_closed=include_closed)


def attribute_dividends(
        assets: Sequence[Asset],
        transactions: Sequence[Transaction],
        as_of: date | None = None,
) -> IncomeAttribution:
    """Attribute every asset's dividend history using ex-date exclusive ownership."""
    return DividendAttributionCalculator().calculate(assets, transactions, as_of)


def compute_yield(assets: Sequence[Asset]) -> YieldSummary:
    return YieldCalculator().calculate(assets)


def rolling_income(
        full_income_history: Mapping[str, Decimal],
        as_of: date,
        months: int = DEFAULT_ROLLING_MONTHS,
) -> RollingIncome:
    """Rolling view of `months` buckets ending at as_of's month."""
    return IncomeAggregator().rolling(full_income_history, as_of, months)


def year_report(attribution: IncomeAttribution, year: int) -> YearReport:
    return IncomeAggregator().year_report(attribution, year)


def rank_payers(payers: Iterable[PayerSummary]) -> list[PayerSummary]:
    return IncomeAggregator.rank_payers(payers)


def average_price_before(
        transactions: Sequence[Transaction],
        target: Transaction,
) -> Decimal:
    """Average price of target's ticker just before target was applied."""
    return PositionCalculator().average_price_before(transactions, target)


def realized_gains(transactions: Sequence[Transaction]) -> list[RealizedGain]:
    return RealizedGainCalculator().calculate(transactions)


def portfolio_evolution(
        transactions: Sequence[Transaction],
        market_data: Mapping[str, MarketQuote],
        as_of: date | None = None,
) -> PortfolioEvolution:
    return EvolutionCalculator().calculate(transactions, market_data, as_of)
