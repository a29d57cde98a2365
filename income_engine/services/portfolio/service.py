# income_engine/services/portfolio/service.py
"""
Income Service orchestrator.

Main entry point of the engine. It:
1. Folds transactions into positions (PositionCalculator)
2. Merges positions with market data (AssetEnricher)
3. Attributes dividend histories (DividendAttributionCalculator)
4. Builds the rolling view, payer ranking and yield (IncomeAggregator, YieldCalculator)
5. Caches the resulting PortfolioSnapshot keyed on the input content

Architecture:
    IncomeService
        ├── uses → PositionCalculator (weighted-average cost)
        ├── uses → AssetEnricher (market data resolution)
        ├── uses → DividendAttributionCalculator (ex-date ownership)
        ├── uses → IncomeAggregator (rolling, yearly, ranking)
        ├── uses → YieldCalculator (portfolio yield on cost)
        ├── uses → RealizedGainCalculator / EvolutionCalculator (on demand)
        └── uses → SnapshotCache (LRU with TTL)

Usage:
    from income_engine.services.portfolio import IncomeService

    service = IncomeService()
    snapshot = service.compute(transactions, market_data, as_of=date(2024, 6, 30))
    report = service.year_report(snapshot, 2023)
"""

import hashlib
import logging
import threading
from collections import OrderedDict
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timedelta
from typing import Any

from income_engine.config import settings
from income_engine.models import MarketQuote, Transaction
from income_engine.services.exceptions import InvalidWindowError
from income_engine.services.portfolio.calculators import (
    AssetEnricher,
    PositionCalculator,
    RealizedGainCalculator,
)
from income_engine.services.portfolio.dividends import DividendAttributionCalculator
from income_engine.services.portfolio.history_calculator import EvolutionCalculator
from income_engine.services.portfolio.income import IncomeAggregator, YieldCalculator
from income_engine.services.portfolio.types import (
    PortfolioEvolution,
    PortfolioSnapshot,
    RealizedGain,
    YearReport,
)
from income_engine.utils.context import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CACHE
# =============================================================================

def snapshot_key(
        transactions: Sequence[Transaction],
        market_data: Mapping[str, MarketQuote],
        as_of: date,
        months: int,
) -> str:
    """
    Content hash of one input snapshot.

    Any change to a transaction, a quote or the reference date yields a
    different key. Market data is hashed in ticker order so the key does
    not depend on mapping insertion order.
    """
    digest = hashlib.sha256()
    digest.update(repr(list(transactions)).encode("utf-8"))
    digest.update(repr(sorted(market_data.items())).encode("utf-8"))
    digest.update(f"{as_of.isoformat()}:{months}".encode("utf-8"))
    return f"snapshot:{digest.hexdigest()}"


class SnapshotCache:
    """
    Thread-safe bounded LRU cache with TTL for computed snapshots.

    When the cache is full, the least recently used entry is evicted to
    make room for new entries. A ttl of 0 means entries never expire.

    Cache key format: "snapshot:{sha256 of inputs}"
    """

    def __init__(
            self,
            ttl_seconds: int | None = None,
            max_size: int | None = None,
    ) -> None:
        """
        Initialize cache with TTL and max size.

        Args:
            ttl_seconds: Time-to-live in seconds (default from settings)
            max_size: Maximum number of entries (default from settings)
        """
        if ttl_seconds is None:
            ttl_seconds = settings.cache_ttl_seconds
        if max_size is None:
            max_size = settings.cache_max_size

        self._cache: OrderedDict[str, tuple[datetime, Any]] = OrderedDict()
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds > 0 else None
        self._max_size = max_size
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """
        Get cached value if it exists and has not expired.

        Implements LRU by moving accessed entries to the end.
        """
        with self._lock:
            if key in self._cache:
                timestamp, value = self._cache[key]
                if self._ttl is None or datetime.now() - timestamp < self._ttl:
                    self._cache.move_to_end(key)
                    logger.debug(f"Cache hit for {key}")
                    return value

                del self._cache[key]
                logger.debug(f"Cache expired for {key}")

        return None

    def set(self, key: str, value: Any) -> None:
        """Store a value, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]
            while len(self._cache) >= self._max_size:
                oldest_key = next(iter(self._cache))
                del self._cache[oldest_key]
                logger.debug(f"Cache evicted {oldest_key} (LRU)")
            self._cache[key] = (datetime.now(), value)
        logger.debug(f"Cached result for {key}")

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
        logger.debug(f"Cleared {count} cache entries")

    def size(self) -> int:
        """Return current number of cached entries."""
        with self._lock:
            return len(self._cache)


# =============================================================================
# INCOME SERVICE
# =============================================================================

class IncomeService:
    """
    Orchestrates the calculators for one portfolio snapshot.

    Every method is a pure function of its arguments; the cache only
    avoids recomputing identical inputs.

    Attributes:
        _position_calc: Position fold
        _enricher: Market data resolution
        _attribution_calc: Dividend attribution
        _aggregator: Income views
        _yield_calc: Portfolio yield
        _cache: SnapshotCache for computed snapshots
    """

    # Shared cache instance (singleton pattern)
    _shared_cache: SnapshotCache | None = None

    def __init__(
            self,
            cache: SnapshotCache | None = None,
            rolling_months: int | None = None,
    ) -> None:
        """
        Initialize the Income Service.

        Args:
            cache: SnapshotCache instance. If None, uses the shared cache.
            rolling_months: Rolling view length (default from settings)

        Raises:
            InvalidWindowError: If rolling_months < 1
        """
        if rolling_months is None:
            rolling_months = settings.rolling_window_months
        if rolling_months < 1:
            raise InvalidWindowError(rolling_months)
        self._rolling_months = rolling_months

        self._position_calc = PositionCalculator()
        self._enricher = AssetEnricher()
        self._aggregator = IncomeAggregator()
        self._attribution_calc = DividendAttributionCalculator(
            aggregator=self._aggregator,
            rolling_months=self._rolling_months,
        )
        self._yield_calc = YieldCalculator()
        self._realized_calc = RealizedGainCalculator(self._position_calc)
        self._evolution_calc = EvolutionCalculator(self._position_calc, self._enricher)

        if cache is not None:
            self._cache = cache
        else:
            if IncomeService._shared_cache is None:
                IncomeService._shared_cache = SnapshotCache()
            self._cache = IncomeService._shared_cache

        logger.info("IncomeService initialized")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def compute(
            self,
            transactions: Sequence[Transaction],
            market_data: Mapping[str, MarketQuote],
            as_of: date | None = None,
    ) -> PortfolioSnapshot:
        """
        Compute (or fetch from cache) everything for one snapshot.

        Args:
            transactions: All transactions, any order
            market_data: Quotes keyed by upper-cased ticker
            as_of: Reference date for the rolling view (defaults to today)

        Returns:
            PortfolioSnapshot
        """
        as_of = as_of or date.today()
        key = snapshot_key(transactions, market_data, as_of, self._rolling_months)

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        # Tag log records of this computation unless the caller already did
        owns_correlation_id = get_correlation_id() is None
        if owns_correlation_id:
            set_correlation_id(key.split(":", 1)[1][:12])
        try:
            snapshot = self._compute(transactions, market_data, as_of, key)
        finally:
            if owns_correlation_id:
                clear_correlation_id()

        self._cache.set(key, snapshot)
        return snapshot

    def _compute(
            self,
            transactions: Sequence[Transaction],
            market_data: Mapping[str, MarketQuote],
            as_of: date,
            key: str,
    ) -> PortfolioSnapshot:
        logger.info(
            f"Computing income snapshot as of {as_of} "
            f"({len(transactions)} transactions, {len(market_data)} quotes)",
            extra={"snapshot_key": key},
        )

        positions = self._position_calc.calculate(transactions)

        # Closed positions keep their dividend history for attribution
        attribution_assets = self._enricher.enrich(
            positions, market_data, include_closed=True
        )
        assets = [a for a in attribution_assets if positions[a.ticker].has_position]

        attribution = self._attribution_calc.calculate(
            attribution_assets, transactions, as_of
        )
        rolling = self._aggregator.rolling(
            attribution.full_income_history, as_of, self._rolling_months
        )

        snapshot = PortfolioSnapshot(
            as_of=as_of,
            positions=positions,
            assets=assets,
            attribution=attribution,
            rolling=rolling,
            payers=self._aggregator.rank_payers(attribution.payers),
            yield_summary=self._yield_calc.calculate(assets),
        )

        if positions.warnings:
            logger.warning(
                f"Snapshot as of {as_of} has {len(positions.warnings)} data integrity warning(s)",
                extra={"snapshot_key": key},
            )

        return snapshot

    def year_report(self, snapshot: PortfolioSnapshot, year: int) -> YearReport:
        """Fixed-year income report for a computed snapshot."""
        return self._aggregator.year_report(snapshot.attribution, year)

    def realized_gains(self, transactions: Sequence[Transaction]) -> list[RealizedGain]:
        """Realized gain of every sell, in date order."""
        return self._realized_calc.calculate(transactions)

    def evolution(
            self,
            transactions: Sequence[Transaction],
            market_data: Mapping[str, MarketQuote],
            as_of: date | None = None,
    ) -> PortfolioEvolution:
        """Monthly invested vs market value series."""
        return self._evolution_calc.calculate(transactions, market_data, as_of)

    def clear_cache(self) -> None:
        self._cache.clear()
