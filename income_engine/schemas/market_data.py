# income_engine/schemas/market_data.py
"""
Pydantic schemas for market data payloads.

Providers send one camelCase dict per ticker:
    {"MXRF11": {"currentPrice": 10.2, "dy": 12.1, "assetType": "Papel",
                "dividendsHistory": [{"exDate": "2023-05-01",
                                      "paymentDate": "2023-05-14",
                                      "value": 0.11, "isProvisioned": false}],
                "priceHistory": [{"date": "2023-05-31", "price": 10.4}]}}

Every field is optional. Defaults are NOT applied here; AssetEnricher
resolves them in one place.
"""

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from income_engine.models import (
    ConfirmedDividend,
    DividendEvent,
    MarketQuote,
    PricePoint,
    ProvisionedDividend,
)
from income_engine.schemas.validators import (
    coerce_date,
    coerce_decimal,
    normalize_ticker,
    optional_decimal,
)
from income_engine.services.exceptions import PayloadError

logger = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# =============================================================================
# NESTED SCHEMAS
# =============================================================================

class DividendEventPayload(_CamelModel):
    """
    One dividend event.

    isProvisioned selects the variant: provisioned events carry an
    expected payment date and never count as realized income.
    """

    ex_date: date
    payment_date: date
    value: Decimal
    is_provisioned: bool = False

    @field_validator("ex_date", "payment_date", mode="before")
    @classmethod
    def validate_dates(cls, v):
        return coerce_date(v)

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v):
        return coerce_decimal(v)

    def to_domain(self, ticker: str) -> DividendEvent:
        if self.is_provisioned:
            return ProvisionedDividend(
                ticker=ticker,
                ex_date=self.ex_date,
                expected_payment_date=self.payment_date,
                value=self.value,
            )
        return ConfirmedDividend(
            ticker=ticker,
            ex_date=self.ex_date,
            payment_date=self.payment_date,
            value=self.value,
        )


class PricePointPayload(_CamelModel):
    point_date: date = Field(..., alias="date")
    price: Decimal

    @field_validator("point_date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return coerce_date(v)

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v):
        return coerce_decimal(v)

    def to_domain(self) -> PricePoint:
        return PricePoint(date=self.point_date, price=self.price)


# =============================================================================
# QUOTE SCHEMA
# =============================================================================

class MarketQuotePayload(_CamelModel):
    """Market data for one ticker. Absent fields stay None."""

    current_price: Decimal | None = None
    dy: Decimal | None = None
    pvp: Decimal | None = None
    sector: str | None = None
    asset_type: str | None = None
    administrator: str | None = None
    dividends_history: list[DividendEventPayload] = Field(default_factory=list)
    price_history: list[PricePointPayload] = Field(default_factory=list)
    vacancy_rate: Decimal | None = None
    liquidity: Decimal | None = None
    shareholders: int | None = None
    last_dividend: Decimal | None = None
    next_payment_date: date | None = None

    @field_validator(
        "current_price", "dy", "pvp", "vacancy_rate", "liquidity", "last_dividend",
        mode="before",
    )
    @classmethod
    def validate_decimals(cls, v):
        return optional_decimal(v)

    @field_validator("sector", "asset_type", "administrator")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Providers send "" for unknown labels."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("next_payment_date", mode="before")
    @classmethod
    def validate_next_payment(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return coerce_date(v)

    def to_domain(self, ticker: str) -> MarketQuote:
        return MarketQuote(
            current_price=self.current_price,
            dy=self.dy,
            pvp=self.pvp,
            sector=self.sector,
            asset_type=self.asset_type,
            administrator=self.administrator,
            dividends_history=tuple(e.to_domain(ticker) for e in self.dividends_history),
            price_history=tuple(p.to_domain() for p in self.price_history),
            vacancy_rate=self.vacancy_rate,
            liquidity=self.liquidity,
            shareholders=self.shareholders,
            last_dividend=self.last_dividend,
            next_payment_date=self.next_payment_date,
        )


def parse_market_data(payload: Mapping[str, dict]) -> dict[str, MarketQuote]:
    """
    Parse a {ticker: quote dict} payload into MarketQuote records.

    The result is keyed by upper-cased ticker, which is how the engine
    looks quotes up. If two keys normalize to the same ticker, the later
    one wins.

    Raises:
        PayloadError: If any quote fails validation; each error is tagged
                      with its ticker
    """
    quotes: dict[str, MarketQuote] = {}
    errors: list[dict] = []

    for raw_ticker, row in payload.items():
        try:
            ticker = normalize_ticker(raw_ticker)
        except ValueError as e:
            errors.append({"ticker": raw_ticker, "type": "value_error", "msg": str(e)})
            continue

        try:
            quotes[ticker] = MarketQuotePayload.model_validate(row).to_domain(ticker)
        except ValidationError as e:
            for error in e.errors(include_url=False):
                errors.append({"ticker": ticker, **error})

    if errors:
        logger.warning(f"Rejected market data payload: {len(errors)} error(s), first: {errors[0]}")
        raise PayloadError("market_data", errors)

    logger.debug(f"Parsed market data for {len(quotes)} tickers")
    return quotes
