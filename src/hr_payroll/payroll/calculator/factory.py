from __future__ import annotations

from dataclasses import dataclass

from ...core.enums import SalaryType
from ..policy import PayrollPolicy
from .base import SalaryCalculator
from .daily_calculator import DailySalaryCalculator
from .monthly_calculator import MonthlySalaryCalculator


@dataclass
class SalaryCalculatorFactory:
    """Factory Pattern: choose the calculator for an employee's salary type."""

    policy: PayrollPolicy

    def for_salary_type(self, salary_type: SalaryType) -> SalaryCalculator:
        if salary_type == SalaryType.DAILY:
            return DailySalaryCalculator(self.policy)
        return MonthlySalaryCalculator(self.policy)
