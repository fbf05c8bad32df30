from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from ...attendance.model import AttendanceSummary
from ...common.money import ZERO, round_money
from ...employees.model import Employee
from ..policy import PayrollPolicy


@dataclass(frozen=True)
class SalaryComponents:
    """Earnings and statutory figures for one pay period."""

    basic_salary: Decimal
    hra: Decimal
    other_allowances: Decimal
    night_duty_allowance: Decimal
    provident_fund: Decimal
    esi: Decimal


class SalaryCalculator(ABC):
    """Calculator interface (Strategy Pattern, one per salary type)."""

    def __init__(self, policy: PayrollPolicy):
        self._policy = policy

    @abstractmethod
    def basic_salary(self, employee: Employee, summary: AttendanceSummary) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def hra(self, employee: Employee, basic: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def provident_fund(self, basic: Decimal) -> Decimal:
        raise NotImplementedError

    def night_duty_allowance(self, summary: AttendanceSummary) -> Decimal:
        return round_money(self._policy.night_duty_rate * summary.night_duty_days)

    def esi(self, basic: Decimal, hra: Decimal) -> Decimal:
        """Only wages at or under the ceiling are covered."""
        wages = basic + hra
        if wages > self._policy.esi_wage_ceiling:
            return ZERO
        return round_money(wages * self._policy.esi_rate)

    def compute(self, employee: Employee, summary: AttendanceSummary) -> SalaryComponents:
        basic = round_money(self.basic_salary(employee, summary))
        hra = round_money(self.hra(employee, basic))
        return SalaryComponents(
            basic_salary=basic,
            hra=hra,
            other_allowances=round_money(employee.other_allowances or ZERO),
            night_duty_allowance=self.night_duty_allowance(summary),
            provident_fund=round_money(self.provident_fund(basic)),
            esi=self.esi(basic, hra),
        )
