from __future__ import annotations

from decimal import Decimal

from ...attendance.model import AttendanceSummary
from ...employees.model import Employee
from .base import SalaryCalculator


class MonthlySalaryCalculator(SalaryCalculator):
    """Fixed monthly pay: configured basic, HRA defaulting to a share of basic, PF applies."""

    def basic_salary(self, employee: Employee, summary: AttendanceSummary) -> Decimal:
        return employee.basic_salary

    def hra(self, employee: Employee, basic: Decimal) -> Decimal:
        if employee.hra:
            return employee.hra
        return basic * self._policy.default_hra_rate

    def provident_fund(self, basic: Decimal) -> Decimal:
        return basic * self._policy.pf_rate
