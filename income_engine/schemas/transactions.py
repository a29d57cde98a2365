# income_engine/schemas/transactions.py
"""
Pydantic schemas for transaction payloads.

Collaborators send transactions as camelCase dicts:
    {"id": "t1", "ticker": "mxrf11", "type": "Compra",
     "quantity": 10, "price": 10.5, "date": "2023-01-10", "costs": 1}

Validation layers:
- Field constraints: types, numeric limits
- Field validators: normalization (uppercase tickers, type labels, dates)
- to_domain(): conversion into the immutable Transaction record

IMPORTANT: All financial values use Decimal for precision.
Never use float for money!
"""

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from income_engine.models import Transaction, TransactionType
from income_engine.schemas.validators import (
    coerce_date,
    coerce_decimal,
    normalize_ticker,
    normalize_transaction_type,
)
from income_engine.services.exceptions import PayloadError
from income_engine.utils.decimal_utils import ZERO

logger = logging.getLogger(__name__)


class TransactionPayload(BaseModel):
    """
    One transaction as sent by the persistence layer.

    Quantity positivity is enforced by the form layer, not here; the
    engine is best-effort on the values it receives.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str = Field(..., description="Caller-assigned identifier")

    ticker: str = Field(..., description="Trading symbol", examples=["MXRF11"])

    transaction_type: TransactionType = Field(
        ...,
        alias="type",
        description="Compra/Venda or BUY/SELL",
        examples=["Compra", "SELL"],
    )

    quantity: Decimal = Field(..., description="Units traded", examples=["10", "0.5"])

    price: Decimal = Field(..., description="Price per unit", examples=["10.50"])

    trade_date: date = Field(
        ...,
        alias="date",
        description="Trade date",
        examples=["2023-01-10"],
    )

    costs: Decimal | None = Field(
        default=None,
        description="Brokerage fees and taxes (absent means 0)",
        examples=["0", "1.25"],
    )

    # =========================================================================
    # FIELD VALIDATORS (Normalization)
    # =========================================================================

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Numeric ids from older exports become strings."""
        return str(v) if isinstance(v, int) else v

    @field_validator("ticker")
    @classmethod
    def validate_ticker_field(cls, v: str) -> str:
        return normalize_ticker(v)

    @field_validator("transaction_type", mode="before")
    @classmethod
    def validate_transaction_type(cls, v):
        return normalize_transaction_type(v)

    @field_validator("quantity", "price", "costs", mode="before")
    @classmethod
    def validate_decimal(cls, v):
        return coerce_decimal(v)

    @field_validator("trade_date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return coerce_date(v)

    def to_domain(self) -> Transaction:
        return Transaction(
            id=self.id,
            ticker=self.ticker,
            transaction_type=self.transaction_type,
            quantity=self.quantity,
            price=self.price,
            date=self.trade_date,
            costs=self.costs if self.costs is not None else ZERO,
        )


def parse_transactions(payload: Iterable[dict]) -> list[Transaction]:
    """
    Parse a list of transaction dicts into Transaction records.

    Input order is preserved (it is the tie-break for same-day trades).

    Raises:
        PayloadError: If any row fails validation; errors are collected
                      for every failing row, each tagged with its index
    """
    transactions: list[Transaction] = []
    errors: list[dict] = []

    for index, row in enumerate(payload):
        try:
            transactions.append(TransactionPayload.model_validate(row).to_domain())
        except ValidationError as e:
            for error in e.errors(include_url=False):
                errors.append({"index": index, **error})

    if errors:
        logger.warning(f"Rejected transactions payload: {len(errors)} error(s), first: {errors[0]}")
        raise PayloadError("transactions", errors)

    logger.debug(f"Parsed {len(transactions)} transactions")
    return transactions
