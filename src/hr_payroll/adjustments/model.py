from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from ..common.money import round_money
from ..core.enums import DeductionStatus, DeductionType, IncentiveStatus, IncentiveType


@dataclass(frozen=True)
class Incentive:
    """Period-scoped earning added on top of the salary."""

    employee_id: int
    month: int
    year: int
    amount: Decimal
    type: IncentiveType
    status: IncentiveStatus = IncentiveStatus.PENDING
    id: Optional[int] = None
    description: Optional[str] = None
    remarks: Optional[str] = None
    added_by: Optional[int] = None
    approved_by: Optional[int] = None
    paid_in_salary_id: Optional[int] = None

    @property
    def is_consumed(self) -> bool:
        return self.status == IncentiveStatus.PAID

    def normalized(self) -> "Incentive":
        return replace(self, amount=round_money(self.amount))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee": self.employee_id,
            "month": self.month,
            "year": self.year,
            "amount": float(self.amount),
            "type": self.type.value,
            "description": self.description,
            "remarks": self.remarks,
            "status": self.status.value,
            "addedBy": self.added_by,
            "approvedBy": self.approved_by,
            "paidInSalary": self.paid_in_salary_id,
        }


@dataclass(frozen=True)
class Deduction:
    """Period-scoped subtraction from the salary (fine, damage, loss...)."""

    employee_id: int
    month: int
    year: int
    amount: Decimal
    type: DeductionType
    reason: str
    status: DeductionStatus = DeductionStatus.PENDING
    id: Optional[int] = None
    remarks: Optional[str] = None
    added_by: Optional[int] = None
    approved_by: Optional[int] = None
    deducted_in_salary_id: Optional[int] = None

    @property
    def is_consumed(self) -> bool:
        return self.status == DeductionStatus.DEDUCTED

    def normalized(self) -> "Deduction":
        return replace(self, amount=round_money(self.amount))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee": self.employee_id,
            "month": self.month,
            "year": self.year,
            "amount": float(self.amount),
            "type": self.type.value,
            "reason": self.reason,
            "remarks": self.remarks,
            "status": self.status.value,
            "addedBy": self.added_by,
            "approvedBy": self.approved_by,
            "deductedInSalary": self.deducted_in_salary_id,
        }
