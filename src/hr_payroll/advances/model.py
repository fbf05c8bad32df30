from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO, ceil_div, round_money
from ..core.enums import ApprovalStatus, RepaymentMode, RepaymentStatus


@dataclass(frozen=True)
class Repayment:
    month: int
    year: int
    amount: Decimal
    paid_date: datetime
    salary_id: Optional[int] = None
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "amount": float(self.amount),
            "paidDate": self.paid_date.isoformat(),
            "salaryId": self.salary_id,
        }


def repayment_status_for(amount: Decimal, paid_amount: Decimal) -> RepaymentStatus:
    if amount - paid_amount <= 0:
        return RepaymentStatus.COMPLETED
    if paid_amount > 0:
        return RepaymentStatus.IN_PROGRESS
    return RepaymentStatus.NOT_STARTED


@dataclass(frozen=True)
class Advance:
    """Cash advance recovered in installments.

    installment_amount, remaining_amount and repayment_status are derived;
    whatever a caller puts there is replaced by normalized().
    """

    employee_id: int
    amount: Decimal
    reason: str
    request_date: date
    id: Optional[int] = None
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    approved_by: Optional[int] = None
    approval_date: Optional[datetime] = None
    remarks: Optional[str] = None
    repayment_mode: RepaymentMode = RepaymentMode.SALARY_DEDUCTION
    installments: int = 1
    installment_amount: Decimal = ZERO
    paid_amount: Decimal = ZERO
    remaining_amount: Decimal = ZERO
    repayment_status: RepaymentStatus = RepaymentStatus.NOT_STARTED
    repayments: tuple[Repayment, ...] = field(default_factory=tuple)

    def normalized(self) -> "Advance":
        installments = max(int(self.installments), 1)
        return replace(
            self,
            installments=installments,
            installment_amount=ceil_div(self.amount, installments),
            remaining_amount=self.amount - self.paid_amount,
            repayment_status=repayment_status_for(self.amount, self.paid_amount),
        )

    @property
    def is_outstanding(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED and self.repayment_status in (
            RepaymentStatus.NOT_STARTED,
            RepaymentStatus.IN_PROGRESS,
        )

    def next_installment(self) -> Decimal:
        """Full installment while a balance is left; the last one may overshoot it."""
        current = self.normalized()
        return current.installment_amount if current.remaining_amount > 0 else ZERO

    def record_repayment(
        self,
        *,
        month: int,
        year: int,
        amount: Decimal,
        paid_date: datetime,
        salary_id: Optional[int] = None,
    ) -> "Advance":
        """paid_amount only ever grows."""
        amount = round_money(amount)
        if amount <= 0:
            raise ValueError("Repayment amount must be positive")
        entry = Repayment(month=month, year=year, amount=amount, paid_date=paid_date, salary_id=salary_id)
        return replace(
            self,
            paid_amount=self.paid_amount + amount,
            repayments=self.repayments + (entry,),
        ).normalized()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee": self.employee_id,
            "amount": float(self.amount),
            "reason": self.reason,
            "requestDate": self.request_date.isoformat(),
            "approvalStatus": self.approval_status.value,
            "approvedBy": self.approved_by,
            "approvalDate": self.approval_date.isoformat() if self.approval_date else None,
            "remarks": self.remarks,
            "repaymentMode": self.repayment_mode.value,
            "installments": self.installments,
            "installmentAmount": float(self.installment_amount),
            "paidAmount": float(self.paid_amount),
            "remainingAmount": float(self.remaining_amount),
            "repaymentStatus": self.repayment_status.value,
            "repayments": [r.to_dict() for r in self.repayments],
        }
