# income_engine/services/portfolio/__init__.py
"""
Portfolio Income Package.

This package provides position and dividend income capabilities:
- Weighted-average positions (compute_positions)
- Market data enrichment (enrich_assets)
- Dividend attribution with ex-date ownership (attribute_dividends)
- Rolling, yearly and per-payer income views
- Realized gains and monthly portfolio evolution

Usage:
    from income_engine.services.portfolio import IncomeService

    service = IncomeService()
    snapshot = service.compute(transactions, market_data, as_of=date(2024, 6, 30))

    snapshot.rolling.total          # last 12 months of income
    snapshot.payers                 # ranked payers
    service.year_report(snapshot, 2023)

Architecture:
    portfolio/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Internal data classes
    ├── calculators.py           # Positions, enrichment, realized gains
    ├── dividends.py             # Dividend attribution
    ├── income.py                # Income views and portfolio yield
    ├── history_calculator.py    # Monthly evolution series
    ├── operations.py            # Functional API
    └── service.py               # IncomeService (orchestrator) and cache

Data Flow:
    Transactions → PositionCalculator → PositionsResult
    Positions + MarketQuotes → AssetEnricher → Assets
    Assets + Transactions → DividendAttributionCalculator → IncomeAttribution
    IncomeAttribution → IncomeAggregator → RollingIncome / YearReport
    Assets → YieldCalculator → YieldSummary
"""

# Calculators (for testing / direct usage)
from income_engine.services.portfolio.calculators import (
    AssetEnricher,
    PositionCalculator,
    RealizedGainCalculator,
)
from income_engine.services.portfolio.dividends import (
    DividendAttributionCalculator,
    shares_held_before,
)
from income_engine.services.portfolio.history_calculator import EvolutionCalculator
from income_engine.services.portfolio.income import IncomeAggregator, YieldCalculator

# Functional API
from income_engine.services.portfolio.operations import (
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

# Service
from income_engine.services.portfolio.service import IncomeService, SnapshotCache

# Types
from income_engine.services.portfolio.types import (
    Asset,
    EvolutionPoint,
    IncomeAttribution,
    MonthlyIncomePoint,
    PayerShare,
    PayerSummary,
    PortfolioEvolution,
    PortfolioSnapshot,
    Position,
    PositionsResult,
    RealizedGain,
    RollingIncome,
    YearReport,
    YieldSummary,
)

__all__ = [
    # Service
    "IncomeService",
    "SnapshotCache",
    # Calculators
    "PositionCalculator",
    "AssetEnricher",
    "RealizedGainCalculator",
    "DividendAttributionCalculator",
    "IncomeAggregator",
    "YieldCalculator",
    "EvolutionCalculator",
    "shares_held_before",
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
    # Types
    "Position",
    "PositionsResult",
    "Asset",
    "PayerSummary",
    "MonthlyIncomePoint",
    "IncomeAttribution",
    "RollingIncome",
    "PayerShare",
    "YearReport",
    "YieldSummary",
    "RealizedGain",
    "EvolutionPoint",
    "PortfolioEvolution",
    "PortfolioSnapshot",
]
