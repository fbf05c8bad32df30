from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.money import to_money


@dataclass(frozen=True)
class PayrollPolicy:
    """Statutory and house rates applied by the salary generator.

    Rates are fractions (0.12 == 12%). Override any of them with the
    PAYROLL_POLICY mapping in the settings module.
    """

    night_duty_rate: Decimal = Decimal("200")
    pf_rate: Decimal = Decimal("0.12")
    pf_employer_rate: Decimal = Decimal("0.12")
    esi_rate: Decimal = Decimal("0.0075")
    esi_wage_ceiling: Decimal = Decimal("21000")
    default_hra_rate: Decimal = Decimal("0.40")
    working_week_days: int = 6

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "PayrollPolicy":
        values: dict[str, Any] = {}
        for f in fields(cls):
            if not data or data.get(f.name) is None:
                continue
            raw = data[f.name]
            values[f.name] = int(raw) if f.name == "working_week_days" else to_money(raw)

        policy = cls(**values)
        if not 1 <= policy.working_week_days <= 7:
            raise ValueError("working_week_days must be between 1 and 7")
        return policy
