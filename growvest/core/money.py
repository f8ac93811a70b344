"""Decimal money helpers. Amounts are kept at two places, rounded half-even at every write."""

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Annotated, Any

from bson import Decimal128
from pydantic import BeforeValidator

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
# digits accepted in request amounts; keeps quantize within the 28-digit default context
MAX_DIGITS = 18


def quantize(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_EVEN)


def to_decimal(value: Any) -> Decimal:
    """Coerce BSON Decimal128, str, int or Decimal to Decimal."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through str so 0.1 stays 0.1
        value = repr(value)
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal value: {value!r}") from e


def to_bson(value: Decimal) -> Decimal128:
    """For raw update documents that bypass the Beanie encoder."""
    return Decimal128(quantize(value))


def money_str(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return str(quantize(to_decimal(value)))


def daily_profit(amount: Decimal, daily_percent: Decimal) -> Decimal:
    """One day of simple interest: amount * daily_percent / 100.

    >>> daily_profit(Decimal("500"), Decimal("3.00"))
    Decimal('15.00')
    """
    if amount <= 0 or daily_percent <= 0:
        return ZERO
    return quantize(amount * daily_percent / 100)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return quantize(amount * percent / 100)


# Document field type: accepts Decimal128 read back from Mongo
Money = Annotated[Decimal, BeforeValidator(to_decimal)]
