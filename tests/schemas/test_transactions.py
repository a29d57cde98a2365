# tests/schemas/test_transactions.py
"""
Tests for the transaction payload schema.

Verifies normalization (tickers, type labels, dates, decimals) and the
error reporting of parse_transactions.
"""

from datetime import date
from decimal import Decimal

import pytest

from income_engine.models import TransactionType
from income_engine.schemas.transactions import TransactionPayload, parse_transactions
from income_engine.services.exceptions import PayloadError


def _row(**overrides) -> dict:
    row = {
        "id": "t1",
        "ticker": "MXRF11",
        "type": "Compra",
        "quantity": 10,
        "price": 10.5,
        "date": "2023-01-10",
    }
    row.update(overrides)
    return row


class TestTransactionPayload:
    """Tests for TransactionPayload validation."""

    def test_portuguese_labels(self):
        assert TransactionPayload.model_validate(_row(type="Compra")).transaction_type == TransactionType.BUY
        assert TransactionPayload.model_validate(_row(type="Venda")).transaction_type == TransactionType.SELL

    @pytest.mark.parametrize("label", ["BUY", "buy", " compra ", "COMPRA"])
    def test_buy_labels_case_insensitive(self, label):
        assert TransactionPayload.model_validate(_row(type=label)).transaction_type == TransactionType.BUY

    def test_unknown_label_rejected(self):
        with pytest.raises(ValueError, match="Unknown transaction type"):
            TransactionPayload.model_validate(_row(type="Transferência"))

    def test_ticker_normalized(self):
        assert TransactionPayload.model_validate(_row(ticker="  mxrf11 ")).ticker == "MXRF11"

    def test_empty_ticker_rejected(self):
        with pytest.raises(ValueError, match="Ticker cannot be empty"):
            TransactionPayload.model_validate(_row(ticker="   "))

    def test_float_converted_through_str(self):
        payload = TransactionPayload.model_validate(_row(price=0.11, costs=0.1))

        assert payload.price == Decimal("0.11")
        assert payload.costs == Decimal("0.1")

    def test_numeric_id_coerced(self):
        assert TransactionPayload.model_validate(_row(id=42)).id == "42"

    def test_timestamp_reduced_to_date(self):
        payload = TransactionPayload.model_validate(_row(date="2023-05-14T10:30:00Z"))

        assert payload.trade_date == date(2023, 5, 14)

    def test_populate_by_field_name(self):
        row = _row()
        row["transaction_type"] = row.pop("type")
        row["trade_date"] = row.pop("date")

        payload = TransactionPayload.model_validate(row)

        assert payload.transaction_type == TransactionType.BUY
        assert payload.trade_date == date(2023, 1, 10)

    def test_to_domain_defaults_costs(self):
        txn = TransactionPayload.model_validate(_row()).to_domain()

        assert txn.costs == Decimal("0")
        assert txn.quantity == Decimal("10")
        assert txn.date == date(2023, 1, 10)
        assert txn.is_buy


class TestParseTransactions:
    """Tests for parse_transactions."""

    def test_preserves_order(self):
        rows = [_row(id="a"), _row(id="b", type="Venda"), _row(id="c")]

        txns = parse_transactions(rows)

        assert [t.id for t in txns] == ["a", "b", "c"]
        assert txns[1].transaction_type == TransactionType.SELL

    def test_empty(self):
        assert parse_transactions([]) == []

    def test_errors_collected_with_index(self):
        rows = [_row(), _row(type="Bonificação"), _row(price="abc")]

        with pytest.raises(PayloadError) as exc_info:
            parse_transactions(rows)

        error = exc_info.value
        assert error.source == "transactions"
        assert sorted({e["index"] for e in error.errors}) == [1, 2]
        assert "transactions" in str(error)

    def test_missing_field_reported(self):
        row = _row()
        del row["price"]

        with pytest.raises(PayloadError) as exc_info:
            parse_transactions([row])

        assert exc_info.value.errors[0]["type"] == "missing"
