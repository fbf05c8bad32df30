from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce numbers and numeric strings to Decimal without float noise."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def ceil_div(amount: Decimal, parts: int) -> Decimal:
    """ceil(amount / parts) to a whole currency unit."""
    return (amount / Decimal(parts)).quantize(Decimal("1"), rounding=ROUND_CEILING)
