# income_engine/services/portfolio/calculators.py
"""
Point-in-time portfolio calculators.

Each calculator does one thing:
- PositionCalculator: Folds transactions into quantity and cost basis
- AssetEnricher: Merges positions with market data into Asset records
- RealizedGainCalculator: Measures each sell against the prior average price

Design Principles:
- Stateless (no instance state, pure functions over their arguments)
- Inputs are never mutated
- Decimal for all money and quantities
- Ratios resolve to 0 instead of raising

Usage:
    positions = PositionCalculator().calculate(transactions)
    assets = AssetEnricher().enrich(positions.positions, market_data)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from income_engine.models import (
    DividendEvent,
    MarketQuote,
    Transaction,
    TransactionType,
)
from income_engine.services.constants import (
    DEFAULT_SECTOR,
    QUANTITY_EPSILON,
    STATIC_SECTORS,
)
from income_engine.services.portfolio.types import (
    Asset,
    Position,
    PositionsResult,
    RealizedGain,
)
from income_engine.utils.decimal_utils import (
    HUNDRED,
    ZERO,
    round_money,
    safe_divide,
    to_decimal,
)

logger = logging.getLogger(__name__)

_EMPTY_QUOTE = MarketQuote()


def sort_by_date(transactions: Iterable[Transaction]) -> list[Transaction]:
    """
    Return a new list sorted ascending by date.

    sorted() is stable, so same-day transactions keep their input order.
    """
    return sorted(transactions, key=lambda txn: txn.date)


def group_by_ticker(transactions: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    """Group transactions by ticker, each group sorted ascending by date."""
    grouped: dict[str, list[Transaction]] = {}
    for txn in sort_by_date(transactions):
        grouped.setdefault(txn.ticker, []).append(txn)
    return grouped


# =============================================================================
# POSITION CALCULATOR
# =============================================================================

class PositionCalculator:
    """
    Calculates positions from transactions using weighted-average cost.

    BUY:
        total_cost += quantity × price + costs
        quantity += quantity

    SELL:
        unit_cost = total_cost / quantity   (0 if nothing held)
        total_cost -= sell_quantity × unit_cost
        quantity -= sell_quantity

    Sells always use the current average, never a specific purchase lot,
    so a partial sell leaves avg_price unchanged.

    Note:
        Selling more than is held is not rejected. The quantity goes
        negative, cost basis resets to 0 and a warning is recorded.
    """

    def calculate(self, transactions: Sequence[Transaction]) -> PositionsResult:
        """
        Fold all transactions into one Position per ticker.

        Args:
            transactions: Any order; sorted by date internally (stable)

        Returns:
            PositionsResult with every ticker seen, including exited ones
        """
        state: dict[str, dict[str, Decimal]] = {}
        warnings: list[str] = []

        for txn in sort_by_date(transactions):
            warning = self.apply_transaction(state, txn)
            if warning:
                logger.warning(warning, extra={"ticker": txn.ticker})
                warnings.append(warning)

        result = PositionsResult(
            positions=self.state_to_positions(state),
            warnings=warnings,
        )
        logger.debug(
            f"Computed {len(result.positions)} positions "
            f"({len(result.open_positions)} open) from {len(transactions)} transactions"
        )
        return result

    def apply_transaction(
            self,
            state: dict[str, dict[str, Decimal]],
            transaction: Transaction,
    ) -> str | None:
        """
        Apply a single transaction to a rolling position state (mutates state).

        Used by the evolution and realized gain calculators, which walk the
        transactions once instead of re-folding them for every date.

        Args:
            state: {ticker: {"quantity": Decimal, "total_cost": Decimal}}
            transaction: Transaction to apply

        Returns:
            A warning message if the transaction oversold the position
        """
        position = state.setdefault(
            transaction.ticker,
            {"quantity": ZERO, "total_cost": ZERO},
        )

        if transaction.transaction_type == TransactionType.BUY:
            position["total_cost"] += transaction.gross_cost
            position["quantity"] += transaction.quantity
            return None

        held = position["quantity"]
        unit_cost = safe_divide(position["total_cost"], held)
        position["total_cost"] -= transaction.quantity * unit_cost
        position["quantity"] -= transaction.quantity

        # Dust left by decimal inputs counts as a full exit
        if abs(position["quantity"]) <= QUANTITY_EPSILON:
            position["quantity"] = ZERO

        if position["quantity"] <= ZERO:
            position["total_cost"] = ZERO

        if position["quantity"] < ZERO:
            return (
                f"Sell {transaction.id} of {transaction.quantity} {transaction.ticker} "
                f"on {transaction.date} exceeds held quantity {held}"
            )
        return None

    def state_to_positions(
            self,
            state: dict[str, dict[str, Decimal]],
    ) -> dict[str, Position]:
        """Convert a rolling state into Position objects (all tickers)."""
        return {
            ticker: Position(
                ticker=ticker,
                quantity=values["quantity"],
                total_cost=values["total_cost"],
            )
            for ticker, values in state.items()
        }

    def average_price_before(
            self,
            transactions: Sequence[Transaction],
            target: Transaction,
    ) -> Decimal:
        """
        Average price of target's ticker immediately before target.

        Transactions on earlier dates count; same-day transactions count
        only if they come before target in input order. Target itself never
        counts. If target is not in the list, every transaction dated on or
        before target's date counts.

        Returns:
            Average price, or 0 if nothing was held
        """
        state: dict[str, dict[str, Decimal]] = {}

        for txn in sort_by_date(transactions):
            if txn.ticker != target.ticker:
                continue
            if txn.date > target.date or txn is target or txn.id == target.id:
                break
            self.apply_transaction(state, txn)

        position = state.get(target.ticker)
        if position is None or position["quantity"] <= QUANTITY_EPSILON:
            return ZERO
        return position["total_cost"] / position["quantity"]


# =============================================================================
# ASSET ENRICHER
# =============================================================================

class AssetEnricher:
    """
    Merges positions with market data into Asset records.

    Resolution policy (the only place market defaults are applied):
        current_price:  quote price if > 0, else the position's avg_price
        dy:             quote dy, else 0
        yield_on_cost:  (current_price × dy / 100) / avg_price × 100, 0 if avg_price is 0
        sector:         asset_type → sector (unless "Outros") → static table → "Outros"
        dividends:      deduplicated by ex_date (last wins), newest first

    Note:
        Market data is looked up by upper-cased ticker. Positions holding
        no more than dust are dropped unless include_closed is set.
    """

    def enrich(
            self,
            positions: Mapping[str, Position] | PositionsResult,
            market_data: Mapping[str, MarketQuote],
            include_closed: bool = False,
    ) -> list[Asset]:
        """
        Build Asset records for positions.

        Args:
            positions: Positions keyed by ticker (or a PositionsResult)
            market_data: Quotes keyed by upper-cased ticker (sparse)
            include_closed: Keep fully exited positions (for income history)

        Returns:
            Assets in position order
        """
        if isinstance(positions, PositionsResult):
            positions = positions.positions

        assets: list[Asset] = []

        for ticker, position in positions.items():
            if not include_closed and not position.has_position:
                continue

            quote = market_data.get(ticker.upper(), _EMPTY_QUOTE)
            assets.append(self._build_asset(position, quote))

        return assets

    def _build_asset(self, position: Position, quote: MarketQuote) -> Asset:
        avg_price = position.avg_price
        current_price = self.resolve_current_price(quote, avg_price)
        dy = to_decimal(quote.dy)

        return Asset(
            ticker=position.ticker,
            quantity=position.quantity,
            avg_price=avg_price,
            total_cost=position.total_cost,
            current_price=current_price,
            dy=dy,
            sector=self.resolve_sector(position.ticker, quote),
            yield_on_cost=self.yield_on_cost(current_price, dy, avg_price),
            dividends_history=self.merge_dividend_history(quote.dividends_history),
            price_history=sorted(quote.price_history, key=lambda point: point.date),
            pvp=quote.pvp,
            administrator=quote.administrator,
            vacancy_rate=quote.vacancy_rate,
            liquidity=quote.liquidity,
            shareholders=quote.shareholders,
            last_dividend=quote.last_dividend,
            next_payment_date=quote.next_payment_date,
        )

    @staticmethod
    def resolve_current_price(quote: MarketQuote, avg_price: Decimal) -> Decimal:
        """Quote price when the market has one, else the average price."""
        price = to_decimal(quote.current_price)
        return price if price > ZERO else avg_price

    @staticmethod
    def resolve_sector(ticker: str, quote: MarketQuote) -> str:
        """
        Resolve a sector label, never returning an empty value.

        Order: asset_type, sector, static table, "Outros". A provider that
        sends the literal "Outros" is treated as not knowing the sector.
        """
        for candidate in (quote.asset_type, quote.sector):
            if candidate and candidate != DEFAULT_SECTOR:
                return candidate
        return STATIC_SECTORS.get(ticker.upper(), DEFAULT_SECTOR)

    @staticmethod
    def yield_on_cost(current_price: Decimal, dy: Decimal, avg_price: Decimal) -> Decimal:
        """Projected yield on the average price, in percent (2 dp)."""
        annual_per_share = current_price * dy / HUNDRED
        return round_money(safe_divide(annual_per_share, avg_price) * HUNDRED)

    @staticmethod
    def merge_dividend_history(events: Iterable[DividendEvent]) -> list[DividendEvent]:
        """Deduplicate by ex_date (last write wins) and sort newest first."""
        by_ex_date: dict = {}
        for event in events:
            by_ex_date[event.ex_date] = event
        return sorted(by_ex_date.values(), key=lambda event: event.ex_date, reverse=True)


# =============================================================================
# REALIZED GAIN CALCULATOR
# =============================================================================

class RealizedGainCalculator:
    """
    Measures each sell against the average price held just before it.

    Formulas:
        proceeds = quantity × sale_price - costs
        cost_of_sold = quantity × avg_price_before
        realized = proceeds - cost_of_sold
        realized_pct = realized / cost_of_sold × 100

    Note:
        Percentage is None when cost_of_sold is 0 (sell with nothing held).
    """

    def __init__(self, position_calc: PositionCalculator | None = None) -> None:
        self._position_calc = position_calc or PositionCalculator()

    def calculate(self, transactions: Sequence[Transaction]) -> list[RealizedGain]:
        """
        Realized gain for every sell, in date order.

        Walks the transactions once, reading the rolling state before
        applying each sell.
        """
        state: dict[str, dict[str, Decimal]] = {}
        gains: list[RealizedGain] = []

        for txn in sort_by_date(transactions):
            if txn.transaction_type == TransactionType.SELL:
                gains.append(self._measure(state.get(txn.ticker), txn))
            self._position_calc.apply_transaction(state, txn)

        return gains

    def total(self, gains: Iterable[RealizedGain]) -> Decimal:
        """Sum of realized amounts."""
        return round_money(sum((gain.amount for gain in gains), ZERO))

    @staticmethod
    def _measure(position: dict[str, Decimal] | None, txn: Transaction) -> RealizedGain:
        avg_before = ZERO
        if position is not None:
            avg_before = safe_divide(position["total_cost"], position["quantity"])

        proceeds = txn.quantity * txn.price - txn.costs
        cost_of_sold = txn.quantity * avg_before
        amount = proceeds - cost_of_sold

        percentage = None
        if cost_of_sold > ZERO:
            percentage = round_money(amount / cost_of_sold * HUNDRED)

        return RealizedGain(
            transaction_id=txn.id,
            ticker=txn.ticker,
            date=txn.date,
            quantity=txn.quantity,
            sale_price=txn.price,
            avg_price_before=avg_before,
            proceeds=round_money(proceeds),
            cost_of_sold=round_money(cost_of_sold),
            amount=round_money(amount),
            percentage=percentage,
        )

