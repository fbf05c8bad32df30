from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError
from .money import to_money

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", fields={field_name: "required"})
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(
            f"{field_name} must be at least {min_len} characters",
            fields={field_name: f"min length {min_len}"},
        )
    return value


def require_enum(value: Any, enum_cls: Type[E], field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {field_name}. Must be one of: {allowed}",
            fields={field_name: "invalid choice"},
        )


def optional_enum(value: Any, enum_cls: Type[E], field_name: str) -> Optional[E]:
    if value is None or value == "":
        return None
    return require_enum(value, enum_cls, field_name)


def require_amount(value: Any, field_name: str, *, allow_zero: bool = True) -> Decimal:
    try:
        amount = to_money(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a number", fields={field_name: "not a number"})
    if amount < 0 or (not allow_zero and amount == 0):
        raise ValidationError(f"{field_name} must be positive", fields={field_name: "out of range"})
    return amount


def require_int(value: Any, field_name: str, *, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", fields={field_name: "not an integer"})
    if (min_value is not None and number < min_value) or (max_value is not None and number > max_value):
        raise ValidationError(f"{field_name} is out of range", fields={field_name: "out of range"})
    return number


def require_period(month: Any, year: Any) -> tuple[int, int]:
    return (
        require_int(month, "month", min_value=1, max_value=12),
        require_int(year, "year", min_value=2000, max_value=2100),
    )
