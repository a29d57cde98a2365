# tests/services/test_history_calculator.py
"""
Unit tests for the monthly evolution series.

Test Coverage:
- closest_price: Lookup on or before a date
- EvolutionCalculator: Month range, rolling state, price fallback,
  per-sector series
"""

from datetime import date
from decimal import Decimal

from income_engine.models import PricePoint
from income_engine.services.portfolio.history_calculator import (
    EvolutionCalculator,
    closest_price,
)
from income_engine.services.portfolio.types import ALL_SECTORS_KEY
from tests.factories import buy, quote, sell


class TestClosestPrice:
    """Tests for the closest_price helper."""

    def test_latest_on_or_before(self):
        history = [
            PricePoint(date=date(2024, 1, 31), price=Decimal("11")),
            PricePoint(date=date(2024, 3, 1), price=Decimal("13")),
            PricePoint(date=date(2024, 2, 29), price=Decimal("12")),
        ]

        assert closest_price(history, date(2024, 2, 29)) == Decimal("12")
        assert closest_price(history, date(2024, 2, 28)) == Decimal("11")
        assert closest_price(history, date(2025, 1, 1)) == Decimal("13")

    def test_none_when_all_after(self):
        history = [PricePoint(date=date(2024, 1, 31), price=Decimal("11"))]

        assert closest_price(history, date(2024, 1, 30)) is None
        assert closest_price([], date(2024, 1, 30)) is None


class TestEvolutionCalculator:
    """Tests for EvolutionCalculator."""

    def test_empty_transactions(self):
        evolution = EvolutionCalculator().calculate([], {}, as_of=date(2024, 3, 1))

        assert evolution.series == {}
        assert evolution.overall == []

    def test_monthly_values_from_price_history(self):
        txns = [buy("MXRF11", 10, "10", date(2024, 1, 15))]
        market = {"MXRF11": quote(prices=[
            (date(2024, 1, 31), "11"),
            (date(2024, 2, 29), "12"),
        ])}

        evolution = EvolutionCalculator().calculate(txns, market, as_of=date(2024, 3, 10))

        assert [(p.month_key, p.invested, p.market_value) for p in evolution.overall] == [
            ("2024-01", Decimal("100.00"), Decimal("110.00")),
            ("2024-02", Decimal("100.00"), Decimal("120.00")),
            ("2024-03", Decimal("100.00"), Decimal("120.00")),
        ]

    def test_missing_price_uses_cost(self):
        txns = [buy("ABCD11", 2, "50", date(2024, 1, 15), costs="1")]

        evolution = EvolutionCalculator().calculate(txns, {}, as_of=date(2024, 1, 31))

        point = evolution.overall[0]
        assert point.invested == Decimal("101.00")
        assert point.market_value == Decimal("101.00")

    def test_transactions_applied_through_month_end(self):
        """A buy on the last day of a month counts for that month."""
        txns = [
            buy("ABCD11", 1, "100", date(2024, 1, 10)),
            buy("ABCD11", 1, "100", date(2024, 1, 31)),
            buy("ABCD11", 1, "100", date(2024, 2, 1)),
        ]

        evolution = EvolutionCalculator().calculate(txns, {}, as_of=date(2024, 2, 5))

        assert [p.invested for p in evolution.overall] == [Decimal("200.00"), Decimal("300.00")]

    def test_sector_series(self):
        txns = [
            buy("MXRF11", 10, "10", date(2024, 1, 5)),
            buy("HGLG11", 1, "160", date(2024, 2, 5)),
        ]

        evolution = EvolutionCalculator().calculate(txns, {}, as_of=date(2024, 2, 20))

        assert set(evolution.sectors()) == {"Papel", "Tijolo - Logística"}
        assert [p.month_key for p in evolution.series["Papel"]] == ["2024-01", "2024-02"]
        assert [p.month_key for p in evolution.series["Tijolo - Logística"]] == ["2024-02"]
        assert evolution.series[ALL_SECTORS_KEY][-1].invested == Decimal("260.00")

    def test_exited_position_not_counted(self):
        txns = [
            buy("MXRF11", 10, "10", date(2024, 1, 5)),
            sell("MXRF11", 10, "11", date(2024, 2, 5)),
        ]

        evolution = EvolutionCalculator().calculate(txns, {}, as_of=date(2024, 2, 20))

        assert evolution.overall[-1].invested == Decimal("0.00")
        assert evolution.overall[-1].market_value == Decimal("0.00")
        assert [p.month_key for p in evolution.series["Papel"]] == ["2024-01"]

    def test_future_transactions_outside_series(self):
        txns = [buy("MXRF11", 10, "10", date(2024, 5, 5))]

        evolution = EvolutionCalculator().calculate(txns, {}, as_of=date(2024, 3, 1))

        assert evolution.overall == []
