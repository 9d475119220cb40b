"""
Money Utilities - Decimal helpers for cart prices.

Prices arrive from the API as JSON numbers; they are converted through str()
so 19.9 stays 19.90 and never becomes 19.899999.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

MONEY_PRECISION = Decimal("0.01")

Number = Union[str, int, float, Decimal, None]


def to_decimal(value: Number) -> Decimal:
    """Convert a price to Decimal; None or garbage becomes Decimal("0")."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def parse_price(value: Number) -> Decimal:
    """
    Strict conversion for prices read from the API or a snapshot.

    Raises:
        ValueError: None, booleans, text that is not a number, NaN or Infinity
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"price is required, got {value!r}")
    try:
        if isinstance(value, Decimal):
            price = value
        elif isinstance(value, float):
            price = Decimal(str(value))
        else:
            price = Decimal(value)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"invalid price: {value!r}") from e
    if not price.is_finite():
        raise ValueError(f"price must be finite, got {value!r}")
    return price


def round_money(value: Number) -> Decimal:
    """Round to cents, half up."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def line_total(price: Number, amount: int) -> Decimal:
    """Price of ``amount`` units, rounded to cents."""
    return round_money(to_decimal(price) * amount)


def to_float(value: Number) -> float:
    """Convert to float for JSON responses."""
    return float(round_money(value))
