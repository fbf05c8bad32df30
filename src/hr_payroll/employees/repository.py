from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Department, EmployeeStatus, SalaryType
from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def create(self, employee: Employee) -> int:
        """Insert; raises DuplicateError if the employee code (or Aadhaar/PAN) is taken."""
        raise NotImplementedError

    def update(self, employee: Employee) -> bool:
        raise NotImplementedError

    def list(
        self,
        *,
        department: Optional[Department] = None,
        status: Optional[EmployeeStatus] = None,
        salary_type: Optional[SalaryType] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Employee]:
        raise NotImplementedError

    def list_incomplete(self) -> Sequence[Employee]:
        raise NotImplementedError
