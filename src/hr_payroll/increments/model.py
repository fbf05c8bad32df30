from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO
from ..core.enums import ApprovalStatus, IncrementReason

PERCENT_PLACES = Decimal("0.0001")


@dataclass(frozen=True)
class Increment:
    """Audit trail of a permanent basic-salary change."""

    employee_id: int
    effective_date: date
    previous_salary: Decimal
    new_salary: Decimal
    reason: IncrementReason
    id: Optional[int] = None
    increment_amount: Decimal = ZERO
    increment_percentage: Optional[Decimal] = None
    remarks: Optional[str] = None
    approved_by: Optional[int] = None
    status: ApprovalStatus = ApprovalStatus.APPROVED

    def normalized(self) -> "Increment":
        amount = self.new_salary - self.previous_salary
        percentage = None
        if self.previous_salary:
            percentage = (amount / self.previous_salary * 100).quantize(PERCENT_PLACES)
        return replace(self, increment_amount=amount, increment_percentage=percentage)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee": self.employee_id,
            "effectiveDate": self.effective_date.isoformat(),
            "previousSalary": float(self.previous_salary),
            "newSalary": float(self.new_salary),
            "incrementAmount": float(self.increment_amount),
            "incrementPercentage": None if self.increment_percentage is None else float(self.increment_percentage),
            "reason": self.reason.value,
            "remarks": self.remarks,
            "approvedBy": self.approved_by,
            "status": self.status.value,
        }
