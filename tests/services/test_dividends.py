# tests/services/test_dividends.py
"""
Unit tests for dividend attribution.

Test Coverage:
- shares_held_before: Ex-date exclusive ownership
- DividendAttributionCalculator: Realized vs projected income, buckets,
  per-payer summaries, exited tickers
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import pytest

from income_engine import (
    attribute_dividends,
    compute_positions,
    enrich_assets,
    portfolio_evolution,
)
from income_engine.models import (
    ConfirmedDividend,
    MarketQuote,
    PricePoint,
    ProvisionedDividend,
    Transaction,
    TransactionType,
)
from income_engine.services.portfolio.calculators import AssetEnricher, PositionCalculator
from income_engine.services.portfolio.dividends import (
    DividendAttributionCalculator,
    shares_held_before,
)
from tests.factories import buy, confirmed, make_asset, provisioned, quote, sell

AS_OF = date(2023, 12, 31)


@dataclass(frozen=True)
class SpecialDividend:
    """An event shape the attribution calculator does not know."""
    ticker: str
    ex_date: date
    payment_date: date
    value: Decimal


def attribute(assets, txns, as_of=AS_OF):
    return DividendAttributionCalculator().calculate(assets, txns, as_of)


# =============================================================================
# OWNERSHIP
# =============================================================================

class TestSharesHeldBefore:
    """Tests for the ex-date ownership helper."""

    def test_counts_only_transactions_before_ex_date(self):
        txns = [
            buy("MXRF11", 100, "10", date(2023, 4, 30)),
            buy("MXRF11", 50, "10", date(2023, 5, 1)),
        ]

        assert shares_held_before(txns, date(2023, 5, 1)) == Decimal("100")

    def test_sells_reduce_ownership(self):
        txns = [
            buy("MXRF11", 100, "10", date(2023, 1, 1)),
            sell("MXRF11", 40, "10", date(2023, 2, 1)),
        ]

        assert shares_held_before(txns, date(2023, 3, 1)) == Decimal("60")

    def test_negative_clamped_to_zero(self):
        txns = [sell("MXRF11", 10, "10", date(2023, 1, 1))]

        assert shares_held_before(txns, date(2023, 3, 1)) == Decimal("0")


# =============================================================================
# ATTRIBUTION
# =============================================================================

class TestDividendAttribution:
    """Tests for DividendAttributionCalculator."""

    def test_contribution_in_payment_month(self):
        """100 shares × 0.11 = 11.00, bucketed in the payment month."""
        txns = [buy("MXRF11", 100, "10", date(2023, 4, 10))]
        asset = make_asset("MXRF11", "100", dividends=[
            confirmed("MXRF11", date(2023, 4, 28), date(2023, 5, 14), "0.11"),
        ])

        result = attribute([asset], txns)

        assert result.total_received == Decimal("11.00")
        assert result.full_income_history == {"2023-05": Decimal("11.00")}
        assert result.annual_distribution == {"2023": {"MXRF11": Decimal("11.00")}}

        payer = result.payer("MXRF11")
        assert payer.total_paid == Decimal("11.00")
        assert payer.count == 1

    def test_purchase_on_ex_date_not_entitled(self):
        txns = [buy("MXRF11", 100, "10", date(2023, 5, 1))]
        asset = make_asset("MXRF11", "100", dividends=[
            confirmed("MXRF11", date(2023, 5, 1), date(2023, 5, 14), "0.11"),
        ])

        result = attribute([asset], txns)

        assert result.total_received == Decimal("0")
        assert result.payer("MXRF11").count == 0
        assert result.full_income_history == {}

    def test_purchase_day_before_ex_date_entitled(self):
        txns = [buy("MXRF11", 100, "10", date(2023, 4, 30))]
        asset = make_asset("MXRF11", "100", dividends=[
            confirmed("MXRF11", date(2023, 5, 1), date(2023, 5, 14), "0.11"),
        ])

        assert attribute([asset], txns).total_received == Decimal("11.00")

    def test_sale_on_ex_date_keeps_dividend(self):
        txns = [
            buy("MXRF11", 100, "10", date(2023, 4, 1)),
            sell("MXRF11", 100, "10", date(2023, 5, 1)),
        ]
        asset = make_asset("MXRF11", "0", dividends=[
            confirmed("MXRF11", date(2023, 5, 1), date(2023, 5, 14), "0.11"),
        ])

        assert attribute([asset], txns).total_received == Decimal("11.00")

    def test_ex_date_before_first_trade_excluded(self):
        txns = [buy("MXRF11", 100, "10", date(2023, 6, 1))]
        asset = make_asset("MXRF11", "100", dividends=[
            confirmed("MXRF11", date(2023, 5, 1), date(2023, 5, 14), "0.11"),
            provisioned("MXRF11", date(2023, 5, 20), date(2023, 6, 14), "0.11"),
        ])

        result = attribute([asset], txns)

        assert result.total_received == Decimal("0")
        assert result.payer("MXRF11").projected_amount == Decimal("0")

    def test_provisioned_only_projected(self):
        txns = [buy("MXRF11", 100, "10", date(2023, 4, 1))]
        asset = make_asset("MXRF11", "100", dividends=[
            provisioned("MXRF11", date(2023, 12, 1), date(2024, 1, 14), "0.12"),
        ])

        result = attribute([asset], txns)

        payer = result.payer("MXRF11")
        assert payer.projected_amount == Decimal("12.00")
        assert payer.total_paid == Decimal("0")
        assert payer.count == 0
        assert payer.is_provisioned is True
        assert payer.next_payment_date == date(2024, 1, 14)
        assert result.total_received == Decimal("0")
        assert result.full_income_history == {}

    def test_next_payment_without_provisioned_is_latest_confirmed(self):
        txns = [buy("MXRF11", 10, "10", date(2023, 1, 1))]
        asset = make_asset("MXRF11", dividends=[
            confirmed("MXRF11", date(2023, 3, 1), date(2023, 3, 14), "0.10"),
            confirmed("MXRF11", date(2023, 2, 1), date(2023, 2, 14), "0.10"),
        ])

        payer = attribute([asset], txns).payer("MXRF11")

        assert payer.is_provisioned is False
        assert payer.last_ex_date == date(2023, 3, 1)
        assert payer.next_payment_date == date(2023, 3, 14)

    def test_earliest_provisioned_payment_wins(self):
        txns = [buy("MXRF11", 10, "10", date(2023, 1, 1))]
        asset = make_asset("MXRF11", dividends=[
            provisioned("MXRF11", date(2024, 1, 1), date(2024, 1, 20), "0.10"),
            provisioned("MXRF11", date(2023, 12, 1), date(2023, 12, 15), "0.10"),
            confirmed("MXRF11", date(2023, 11, 1), date(2023, 11, 14), "0.10"),
        ])

        payer = attribute([asset], txns).payer("MXRF11")

        assert payer.next_payment_date == date(2023, 12, 15)
        assert payer.last_ex_date == date(2024, 1, 1)

    def test_average_monthly(self):
        """Two payments of 11.00: 22.00 / 2."""
        txns = [buy("MXRF11", 100, "10", date(2023, 1, 1))]
        asset = make_asset("MXRF11", "100", dividends=[
            confirmed("MXRF11", date(2023, 3, 1), date(2023, 3, 14), "0.11"),
            confirmed("MXRF11", date(2023, 4, 1), date(2023, 4, 14), "0.11"),
        ])

        assert attribute([asset], txns).payer("MXRF11").average_monthly == Decimal("11.00")

    def test_average_monthly_capped_at_twelve(self):
        """Fourteen payments of 1.00 average over 12 months."""
        txns = [buy("MXRF11", 10, "10", date(2021, 12, 1))]
        events = [
            confirmed("MXRF11", date(2022 + m // 12, m % 12 + 1, 2), date(2022 + m // 12, m % 12 + 1, 15), "0.10")
            for m in range(14)
        ]
        asset = make_asset("MXRF11", dividends=events)

        payer = attribute([asset], txns).payer("MXRF11")

        assert payer.count == 14
        assert payer.total_paid == Decimal("14.00")
        assert payer.average_monthly == Decimal("1.17")

    def test_amount_rounded_half_up(self):
        """3 × 0.335 = 1.005 → 1.01."""
        txns = [buy("MXRF11", 3, "10", date(2023, 1, 1))]
        asset = make_asset("MXRF11", "3", dividends=[
            confirmed("MXRF11", date(2023, 3, 1), date(2023, 3, 14), "0.335"),
        ])

        assert attribute([asset], txns).total_received == Decimal("1.01")

    def test_yield_on_cost_from_asset(self):
        txns = [buy("MXRF11", 10, "10", date(2023, 1, 1))]
        asset = make_asset("MXRF11", yield_on_cost="12.34")

        assert attribute([asset], txns).payer("MXRF11").yield_on_cost == Decimal("12.34")

    def test_assets_without_transactions_skipped(self):
        txns = [buy("MXRF11", 10, "10", date(2023, 1, 1))]
        assets = [make_asset("MXRF11"), make_asset("HGLG11")]

        result = attribute(assets, txns)

        assert [p.ticker for p in result.payers] == ["MXRF11"]
        assert result.payer("HGLG11") is None

    def test_annual_distribution_by_payment_year(self):
        """A December ex-date paid in January lands in the next year."""
        txns = [
            buy("MXRF11", 100, "10", date(2022, 1, 1)),
            buy("HGLG11", 10, "160", date(2022, 1, 1)),
        ]
        assets = [
            make_asset("MXRF11", "100", dividends=[
                confirmed("MXRF11", date(2022, 12, 30), date(2023, 1, 13), "0.10"),
                confirmed("MXRF11", date(2022, 11, 30), date(2022, 12, 14), "0.10"),
            ]),
            make_asset("HGLG11", "10", dividends=[
                confirmed("HGLG11", date(2023, 1, 31), date(2023, 2, 14), "1.10"),
            ]),
        ]

        result = attribute(assets, txns)

        assert result.annual_distribution == {
            "2022": {"MXRF11": Decimal("10.00")},
            "2023": {"MXRF11": Decimal("10.00"), "HGLG11": Decimal("11.00")},
        }
        assert result.full_income_history == {
            "2022-12": Decimal("10.00"),
            "2023-01": Decimal("10.00"),
            "2023-02": Decimal("11.00"),
        }
        assert result.total_received == Decimal("31.00")

    def test_appending_confirmed_event_increases_total(self):
        txns = [buy("MXRF11", 100, "10", date(2023, 1, 1))]
        base = [confirmed("MXRF11", date(2023, 3, 1), date(2023, 3, 14), "0.11")]
        extra = confirmed("MXRF11", date(2023, 4, 1), date(2023, 4, 14), "0.09")

        before = attribute([make_asset("MXRF11", "100", dividends=base)], txns)
        after = attribute([make_asset("MXRF11", "100", dividends=base + [extra])], txns)

        assert after.total_received - before.total_received == Decimal("9.00")

    def test_rolling_series_ends_at_as_of(self):
        """A payment 13 months before as_of is outside the 12-month series."""
        txns = [buy("MXRF11", 100, "10", date(2023, 1, 1))]
        asset = make_asset("MXRF11", "100", dividends=[
            confirmed("MXRF11", date(2023, 5, 1), date(2023, 5, 14), "0.11"),
            confirmed("MXRF11", date(2024, 6, 1), date(2024, 6, 14), "0.10"),
        ])

        result = attribute([asset], txns, as_of=date(2024, 6, 20))

        keys = [p.month_key for p in result.monthly_income]
        assert len(keys) == 12
        assert keys[0] == "2023-07"
        assert keys[-1] == "2024-06"
        assert "2023-05" not in keys
        assert result.monthly_income[-1].total == Decimal("10.00")
        assert result.full_income_history["2023-05"] == Decimal("11.00")

    def test_fully_sold_ticker_keeps_past_income(self):
        """Exited positions leave the display list but keep their dividends."""
        txns = [
            buy("MXRF11", 100, "10", date(2023, 1, 10)),
            sell("MXRF11", 100, "11", date(2023, 6, 10)),
        ]
        market = {"MXRF11": quote(dividends=[
            confirmed("MXRF11", date(2023, 3, 1), date(2023, 3, 15), "0.10"),
        ])}
        positions = PositionCalculator().calculate(txns)

        shown = AssetEnricher().enrich(positions, market)
        for_income = AssetEnricher().enrich(positions, market, include_closed=True)
        result = attribute(for_income, txns)

        assert shown == []
        assert result.total_received == Decimal("10.00")
        assert result.full_income_history == {"2023-03": Decimal("10.00")}

    def test_unknown_event_type_raises(self):
        txns = [buy("MXRF11", 10, "10", date(2023, 1, 1))]
        asset = make_asset("MXRF11", dividends=[
            SpecialDividend("MXRF11", date(2023, 3, 1), date(2023, 3, 14), Decimal("1")),
        ])

        with pytest.raises(TypeError, match="SpecialDividend"):
            attribute([asset], txns)

    def test_inputs_not_mutated(self):
        txns = [buy("MXRF11", 100, "10", date(2023, 1, 1))]
        events = [confirmed("MXRF11", date(2023, 3, 1), date(2023, 3, 14), "0.11")]
        asset = make_asset("MXRF11", "100", dividends=events)

        first = attribute([asset], txns)
        second = attribute([asset], txns)

        assert first == second
        assert asset.dividends_history == events


# =============================================================================
# FLOAT PROVIDER VALUES
# =============================================================================

class TestFloatInputs:
    """Providers and callers may hand floats; every record converts them."""

    def test_floats_flow_through_enrich_and_attribute(self):
        txns = [
            Transaction(
                id="1",
                ticker="MXRF11",
                transaction_type=TransactionType.BUY,
                quantity=100,
                price=10.1,
                date=date(2023, 1, 2),
                costs=0.5,
            ),
        ]
        market = {
            "MXRF11": MarketQuote(
                current_price=10.2,
                dy=12,
                dividends_history=[
                    ConfirmedDividend("MXRF11", date(2023, 3, 1), date(2023, 3, 14), 0.11),
                    ProvisionedDividend("MXRF11", date(2023, 12, 28), date(2024, 1, 12), 0.1),
                ],
            ),
        }

        positions = compute_positions(txns)
        assets = enrich_assets(positions, market, include_closed=True)
        result = attribute_dividends(assets, txns, as_of=AS_OF)

        assert assets[0].avg_price == Decimal("10.105")
        assert assets[0].yield_on_cost == Decimal("12.11")
        assert result.total_received == Decimal("11.00")
        assert result.full_income_history == {"2023-03": Decimal("11.00")}
        assert result.payers[0].projected_amount == Decimal("10.00")

    def test_float_price_history_in_evolution(self):
        txns = [buy("MXRF11", 100, "10.105", date(2023, 1, 2))]
        market = {"MXRF11": MarketQuote(price_history=[PricePoint(date(2023, 2, 28), 10.3)])}

        evolution = portfolio_evolution(txns, market, as_of=date(2023, 2, 28))

        assert evolution.overall[-1].market_value == Decimal("1030.00")
