from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceSummary
from ..common.money import ZERO
from ..core.enums import PaymentMode, PaymentStatus

ALLOWED_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PROCESSING, PaymentStatus.HOLD, PaymentStatus.PAID}),
    PaymentStatus.PROCESSING: frozenset({PaymentStatus.PAID, PaymentStatus.HOLD}),
    PaymentStatus.HOLD: frozenset({PaymentStatus.PENDING, PaymentStatus.PROCESSING}),
    PaymentStatus.PAID: frozenset(),
}


@dataclass(frozen=True)
class Salary:
    """One employee's pay for one month.

    Components are snapshotted at generation; only the payment fields move
    afterwards. The three totals are always recomputed by normalized().
    """

    employee_id: int
    month: int
    year: int
    basic_salary: Decimal
    id: Optional[int] = None
    hra: Decimal = ZERO
    other_allowances: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    overtime_amount: Decimal = ZERO
    night_duty_allowance: Decimal = ZERO
    total_incentives: Decimal = ZERO
    provident_fund: Decimal = ZERO
    esi: Decimal = ZERO
    professional_tax: Decimal = ZERO
    tds: Decimal = ZERO
    total_advances: Decimal = ZERO
    total_deductions: Decimal = ZERO
    attendance: AttendanceSummary = field(default_factory=AttendanceSummary)
    gross_salary: Decimal = ZERO
    total_deductions_amount: Decimal = ZERO
    net_salary: Decimal = ZERO
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_date: Optional[datetime] = None
    payment_mode: Optional[PaymentMode] = None
    transaction_id: Optional[str] = None
    remarks: Optional[str] = None
    generated_by: Optional[int] = None
    approved_by: Optional[int] = None

    def normalized(self) -> "Salary":
        gross = (
            self.basic_salary
            + self.hra
            + self.other_allowances
            + self.overtime_amount
            + self.night_duty_allowance
            + self.total_incentives
        )
        deductions = (
            self.provident_fund
            + self.esi
            + self.professional_tax
            + self.tds
            + self.total_advances
            + self.total_deductions
        )
        return replace(
            self,
            gross_salary=gross,
            total_deductions_amount=deductions,
            net_salary=gross - deductions,
        )

    def can_move_to(self, status: PaymentStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.payment_status]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee": self.employee_id,
            "month": self.month,
            "year": self.year,
            "basicSalary": float(self.basic_salary),
            "hra": float(self.hra),
            "otherAllowances": float(self.other_allowances),
            "overtimeHours": float(self.overtime_hours),
            "overtimeAmount": float(self.overtime_amount),
            "nightDutyAllowance": float(self.night_duty_allowance),
            "totalIncentives": float(self.total_incentives),
            "providentFund": float(self.provident_fund),
            "esi": float(self.esi),
            "professionalTax": float(self.professional_tax),
            "tds": float(self.tds),
            "totalAdvances": float(self.total_advances),
            "totalDeductions": float(self.total_deductions),
            "attendanceSummary": self.attendance.to_dict(),
            "grossSalary": float(self.gross_salary),
            "totalDeductionsAmount": float(self.total_deductions_amount),
            "netSalary": float(self.net_salary),
            "paymentStatus": self.payment_status.value,
            "paymentDate": self.payment_date.isoformat() if self.payment_date else None,
            "paymentMode": self.payment_mode.value if self.payment_mode else None,
            "transactionId": self.transaction_id,
            "remarks": self.remarks,
            "generatedBy": self.generated_by,
            "approvedBy": self.approved_by,
        }
