# income_engine/services/portfolio/types.py
"""
Internal data types for the portfolio calculators.

These dataclasses are the outputs of the calculators. They are NOT
Pydantic schemas - those parse collaborator payloads and live in
income_engine/schemas/.

Design Principles:
- Immutable where possible (frozen=True for value objects)
- Decimal for all money and quantities (never float)
- date (not datetime) for trade, ex and payment dates
- Ratios resolve to 0 instead of raising on a zero denominator
- Warnings accumulate for data quality tracking

Type Hierarchy:
    Position            - Quantity and cost basis for one ticker
    PositionsResult     - All positions plus data integrity warnings
    Asset               - Position merged with resolved market data
    PayerSummary        - Dividend attribution for one ticker
    IncomeAttribution   - Attribution for the whole portfolio
    MonthlyIncomePoint  - One bucket of a monthly series
    RollingIncome       - Rolling N-month income view
    PayerShare          - One payer's slice of a year
    YearReport          - Fixed-year income report
    YieldSummary        - Portfolio-wide yield metrics
    RealizedGain        - Result of one sell
    EvolutionPoint      - Invested vs market value at a month end
    PortfolioEvolution  - Evolution series overall and per sector
    PortfolioSnapshot   - All outputs for one input snapshot
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from income_engine.models import DividendEvent, PricePoint
from income_engine.services.constants import QUANTITY_EPSILON
from income_engine.utils.decimal_utils import safe_divide


# =============================================================================
# POSITIONS
# =============================================================================

@dataclass(frozen=True)
class Position:
    """
    Quantity and weighted-average cost basis for one ticker.

    Attributes:
        ticker: Trading symbol
        quantity: Units currently held (negative after an oversell)
        total_cost: Cost basis of the units held (never negative)

    Note:
        avg_price × quantity == total_cost for any position with
        quantity > 0. Sells reduce total_cost at the current average,
        so they never change avg_price.
    """

    ticker: str
    quantity: Decimal
    total_cost: Decimal

    @property
    def avg_price(self) -> Decimal:
        """Average cost per unit held; 0 when nothing is held."""
        return safe_divide(self.total_cost, self.quantity)

    @property
    def has_position(self) -> bool:
        """True if more than dust is currently held."""
        return self.quantity > QUANTITY_EPSILON


@dataclass
class PositionsResult:
    """
    Result of folding all transactions into positions.

    Attributes:
        positions: Position per ticker, including fully exited ones
        warnings: Data integrity warnings (e.g. sells beyond the held quantity)

    Note:
        Warnings never stop the calculation. An oversold ticker keeps its
        negative quantity so the caller can see the inconsistency.
    """

    positions: dict[str, Position]
    warnings: list[str] = field(default_factory=list)

    def __getitem__(self, ticker: str) -> Position:
        return self.positions[ticker]

    def __contains__(self, ticker: object) -> bool:
        return ticker in self.positions

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def open_positions(self) -> dict[str, Position]:
        """Positions with more than dust held."""
        return {t: p for t, p in self.positions.items() if p.has_position}


# =============================================================================
# ASSETS
# =============================================================================

@dataclass
class Asset:
    """
    Display-ready holding: position fields plus resolved market data.

    Attributes:
        ticker: Trading symbol
        quantity: Units held
        avg_price: Average cost per unit
        total_cost: Cost basis of the units held
        current_price: Market price, or avg_price when the market has none
        dy: Dividend yield in percent (0 when unknown)
        sector: Resolved sector label (never empty)
        dividends_history: Events deduplicated by ex_date, newest first
        yield_on_cost: Projected yield on the average price, in percent
    """

    ticker: str
    quantity: Decimal
    avg_price: Decimal
    total_cost: Decimal
    current_price: Decimal
    dy: Decimal
    sector: str
    yield_on_cost: Decimal
    dividends_history: list[DividendEvent] = field(default_factory=list)
    price_history: list[PricePoint] = field(default_factory=list)
    pvp: Decimal | None = None
    administrator: str | None = None
    vacancy_rate: Decimal | None = None
    liquidity: Decimal | None = None
    shareholders: int | None = None
    last_dividend: Decimal | None = None
    next_payment_date: date | None = None

    @property
    def has_position(self) -> bool:
        """True if more than dust is currently held."""
        return self.quantity > QUANTITY_EPSILON

    @property
    def invested(self) -> Decimal:
        """quantity × avg_price."""
        return self.quantity * self.avg_price

    @property
    def market_value(self) -> Decimal:
        """quantity × current_price."""
        return self.quantity * self.current_price

    @property
    def projected_annual_income(self) -> Decimal:
        """Income over the next year if the current dy holds."""
        return self.market_value * self.dy / Decimal("100")


# =============================================================================
# DIVIDEND ATTRIBUTION
# =============================================================================

@dataclass(frozen=True)
class PayerSummary:
    """
    Dividend attribution for one ticker.

    Attributes:
        ticker: Trading symbol
        total_paid: Realized income from confirmed events
        count: Number of confirmed events that paid something
        projected_amount: Income expected from provisioned events
        last_ex_date: Latest ex-date in the ticker's history
        next_payment_date: Earliest provisioned payment, else the payment
                           date of the latest confirmed event
        is_provisioned: True if any provisioned event exists
        average_monthly: total_paid / max(1, min(count, 12))
        yield_on_cost: From the current asset state, in percent
    """

    ticker: str
    total_paid: Decimal
    count: int
    projected_amount: Decimal
    last_ex_date: date | None
    next_payment_date: date | None
    is_provisioned: bool
    average_monthly: Decimal
    yield_on_cost: Decimal


@dataclass(frozen=True)
class MonthlyIncomePoint:
    """One month of a monthly income series."""

    month_key: str  # "YYYY-MM"
    year: int
    month: int
    total: Decimal


@dataclass
class IncomeAttribution:
    """
    Realized and projected dividend income for the whole portfolio.

    Attributes:
        monthly_income: Rolling series ending at as_of
        payers: One PayerSummary per ticker with transactions
        total_received: Sum of all confirmed income
        annual_distribution: {"YYYY": {ticker: amount}} by payment year
        full_income_history: {"YYYY-MM": amount} by payment month, all time
        as_of: Reference date for the rolling series
    """

    monthly_income: list[MonthlyIncomePoint]
    payers: list[PayerSummary]
    total_received: Decimal
    annual_distribution: dict[str, dict[str, Decimal]]
    full_income_history: dict[str, Decimal]
    as_of: date

    def payer(self, ticker: str) -> PayerSummary | None:
        """Look up one ticker's summary."""
        for summary in self.payers:
            if summary.ticker == ticker:
                return summary
        return None


# =============================================================================
# INCOME REPORTS
# =============================================================================

@dataclass(frozen=True)
class RollingIncome:
    """
    Rolling N-month income view.

    Attributes:
        points: Exactly N monthly buckets, oldest first, last is as_of's month
        total: Sum of the buckets
        average_income: total / months since the first month with income
        current_month_value: Income in as_of's month
    """

    points: list[MonthlyIncomePoint]
    total: Decimal
    average_income: Decimal
    current_month_value: Decimal


@dataclass(frozen=True)
class PayerShare:
    """One ticker's income within a report year."""

    ticker: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class YearReport:
    """
    Fixed-year income report.

    Attributes:
        year: Calendar year
        points: January to December
        total: Year total
        average: total / months with nonzero income (0 if none)
        payers: Per-ticker breakdown, largest first
    """

    year: int
    points: list[MonthlyIncomePoint]
    total: Decimal
    average: Decimal
    payers: list[PayerShare]


@dataclass(frozen=True)
class YieldSummary:
    """
    Portfolio-wide yield metrics.

    Formulas:
        projected_annual_income = Σ quantity × current_price × dy / 100
        total_invested = Σ quantity × avg_price
        yield_on_cost = projected_annual_income / total_invested × 100
    """

    yield_on_cost: Decimal
    projected_annual_income: Decimal
    total_invested: Decimal


# =============================================================================
# REALIZED GAINS
# =============================================================================

@dataclass(frozen=True)
class RealizedGain:
    """
    Result of one sell, measured against the average price before it.

    Formulas:
        proceeds = quantity × sale_price - costs
        cost_of_sold = quantity × avg_price_before
        amount = proceeds - cost_of_sold
        percentage = amount / cost_of_sold × 100 (None if cost_of_sold is 0)
    """

    transaction_id: str
    ticker: str
    date: date
    quantity: Decimal
    sale_price: Decimal
    avg_price_before: Decimal
    proceeds: Decimal
    cost_of_sold: Decimal
    amount: Decimal
    percentage: Decimal | None


# =============================================================================
# PORTFOLIO EVOLUTION
# =============================================================================

@dataclass(frozen=True)
class EvolutionPoint:
    """Invested capital and market value at one month end."""

    month_key: str
    invested: Decimal
    market_value: Decimal


ALL_SECTORS_KEY = "all_types"


@dataclass
class PortfolioEvolution:
    """
    Monthly evolution series.

    Attributes:
        series: {"all_types": [...], sector: [...]}. The overall series has
                one point per month; a sector series only has points for
                months in which the sector was held.
    """

    series: dict[str, list[EvolutionPoint]] = field(default_factory=dict)

    @property
    def overall(self) -> list[EvolutionPoint]:
        return self.series.get(ALL_SECTORS_KEY, [])

    def sectors(self) -> list[str]:
        return [key for key in self.series if key != ALL_SECTORS_KEY]


# =============================================================================
# SNAPSHOT
# =============================================================================

@dataclass(frozen=True)
class PortfolioSnapshot:
    """
    Everything computed for one (transactions, market data, as_of) snapshot.

    Attributes:
        as_of: Reference date
        positions: All positions plus data integrity warnings
        assets: Open positions merged with market data (display list)
        attribution: Realized and projected dividend income
        rolling: Rolling income view ending at as_of
        payers: Payers ranked by total paid
        yield_summary: Portfolio-wide yield on cost
    """

    as_of: date
    positions: PositionsResult
    assets: list[Asset]
    attribution: IncomeAttribution
    rolling: RollingIncome
    payers: list[PayerSummary]
    yield_summary: YieldSummary

    @property
    def warnings(self) -> list[str]:
        return self.positions.warnings
