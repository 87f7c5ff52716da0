"""
Decimal helpers for money and hours
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
HOUR_PRECISION = Decimal("0.0001")


def to_decimal(value: Optional[Number], default: Decimal = Decimal("0")) -> Decimal:
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their printed value
    return Decimal(str(value))


def to_money(value: Optional[Number]) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_hours(value: Optional[Number]) -> Decimal:
    return to_decimal(value).quantize(HOUR_PRECISION, rounding=ROUND_HALF_UP)


def line_total(quantity: Number, unit_price: Number) -> Decimal:
    return to_money(to_decimal(quantity) * to_decimal(unit_price))


def money_sum(values: Iterable[Optional[Number]]) -> Decimal:
    total = Decimal("0")
    for value in values:
        total += to_decimal(value)
    return to_money(total)
