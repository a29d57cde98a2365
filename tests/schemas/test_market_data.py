# tests/schemas/test_market_data.py
"""
Tests for the market data payload schema.
"""

from datetime import date
from decimal import Decimal

import pytest

from income_engine.models import ConfirmedDividend, ProvisionedDividend
from income_engine.schemas.market_data import MarketQuotePayload, parse_market_data
from income_engine.services.exceptions import PayloadError


PAYLOAD = {
    "mxrf11": {
        "currentPrice": 10.2,
        "dy": 12.1,
        "pvp": "1.01",
        "assetType": "Papel",
        "sector": "",
        "administrator": "BTG Pactual",
        "dividendsHistory": [
            {"exDate": "2023-04-28", "paymentDate": "2023-05-14", "value": 0.11, "isProvisioned": False},
            {"exDate": "2023-05-31", "paymentDate": "2023-06-14", "value": 0.1, "isProvisioned": True},
        ],
        "priceHistory": [{"date": "2023-05-31", "price": 10.4}],
        "nextPaymentDate": "",
        "unknownField": "ignored",
    },
}


class TestMarketQuotePayload:
    """Tests for MarketQuotePayload validation."""

    def test_all_fields_optional(self):
        quote = MarketQuotePayload.model_validate({}).to_domain("MXRF11")

        assert quote.current_price is None
        assert quote.dy is None
        assert quote.dividends_history == ()
        assert quote.price_history == ()

    def test_blank_values_become_none(self):
        payload = MarketQuotePayload.model_validate({"sector": "  ", "dy": "", "nextPaymentDate": ""})

        assert payload.sector is None
        assert payload.dy is None
        assert payload.next_payment_date is None


class TestParseMarketData:
    """Tests for parse_market_data."""

    def test_keyed_by_upper_cased_ticker(self):
        quotes = parse_market_data(PAYLOAD)

        assert list(quotes) == ["MXRF11"]

    def test_values_converted(self):
        quote = parse_market_data(PAYLOAD)["MXRF11"]

        assert quote.current_price == Decimal("10.2")
        assert quote.dy == Decimal("12.1")
        assert quote.pvp == Decimal("1.01")
        assert quote.asset_type == "Papel"
        assert quote.sector is None
        assert quote.price_history[0].date == date(2023, 5, 31)
        assert quote.price_history[0].price == Decimal("10.4")

    def test_dividend_variants(self):
        paid, announced = parse_market_data(PAYLOAD)["MXRF11"].dividends_history

        assert isinstance(paid, ConfirmedDividend)
        assert paid.ticker == "MXRF11"
        assert paid.value == Decimal("0.11")
        assert paid.payment_date == date(2023, 5, 14)

        assert isinstance(announced, ProvisionedDividend)
        assert announced.expected_payment_date == date(2023, 6, 14)
        assert announced.is_provisioned

    def test_invalid_quote_reports_ticker(self):
        payload = {"MXRF11": {"dividendsHistory": [{"exDate": "not a date", "paymentDate": "2023-05-14", "value": 1}]}}

        with pytest.raises(PayloadError) as exc_info:
            parse_market_data(payload)

        assert exc_info.value.source == "market_data"
        assert exc_info.value.errors[0]["ticker"] == "MXRF11"

    def test_empty_ticker_rejected(self):
        with pytest.raises(PayloadError) as exc_info:
            parse_market_data({"": {}})

        assert exc_info.value.errors[0]["msg"] == "Ticker cannot be empty"

    def test_empty_payload(self):
        assert parse_market_data({}) == {}
