# income_engine/utils/decimal_utils.py
"""
Decimal helpers shared by the calculators.

All money and share quantities are Decimal. Floats coming from market
data providers are converted through str() so 0.11 stays Decimal("0.11")
instead of the binary approximation.
"""

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """
    Convert a numeric value to Decimal.

    None becomes 0, which is the default for every absent market field.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Round a currency amount to cents (half up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    """
    Divide, resolving to 0 when the denominator is not positive.

    Every ratio in the engine (average price, yield on cost, monthly
    average) goes through here so NaN/Infinity never escape.
    """
    if denominator <= ZERO:
        return ZERO
    return numerator / denominator
