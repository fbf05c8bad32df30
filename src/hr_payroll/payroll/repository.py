from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Department, PaymentStatus
from .model import Salary


class SalaryRepository(Protocol):
    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        raise NotImplementedError

    def get_for_period(self, employee_id: int, month: int, year: int) -> Optional[Salary]:
        raise NotImplementedError

    def create(self, salary: Salary) -> int:
        """Insert-if-absent on (employee, month, year); raises DuplicateError otherwise."""
        raise NotImplementedError

    def update_payment(self, salary: Salary) -> bool:
        """Only the payment fields are written; components stay as generated."""
        raise NotImplementedError

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        payment_status: Optional[PaymentStatus] = None,
        department: Optional[Department] = None,
    ) -> Sequence[Salary]:
        raise NotImplementedError
