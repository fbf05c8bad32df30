from __future__ import annotations

from decimal import Decimal

from ...attendance.model import AttendanceSummary
from ...common.money import ZERO
from ...employees.model import Employee
from .base import SalaryCalculator

HALF = Decimal("0.5")


class DailySalaryCalculator(SalaryCalculator):
    """Daily wage: rate x (present + half of half days). HRA and PF are folded into the rate."""

    def basic_salary(self, employee: Employee, summary: AttendanceSummary) -> Decimal:
        days = Decimal(summary.present_days) + HALF * Decimal(summary.half_days)
        return employee.basic_salary * days

    def hra(self, employee: Employee, basic: Decimal) -> Decimal:
        return ZERO

    def provident_fund(self, basic: Decimal) -> Decimal:
        return ZERO
