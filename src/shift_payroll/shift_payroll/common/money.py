from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

ZERO = Decimal("0")
_CENTS = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_money(value: Number | None) -> Decimal:
    """Coerce to Decimal rounded to cents; None becomes zero."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def non_negative(value: Decimal) -> Decimal:
    return value if value > ZERO else to_money(ZERO)
