from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Optional

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import optional_enum, require_amount, require_enum, require_int, require_non_empty, require_period
from ..core.enums import ApprovalStatus, Permission, RepaymentMode, RepaymentStatus, Role
from ..core.exceptions import AuthorizationError, BusinessRuleError, NotFoundError
from ..database.connection import TransactionManager
from ..employees.repository import EmployeeRepository
from ..users.authorization import require_permission, require_self_or_staff, scope_employee_filter
from ..users.model import Actor
from .model import Advance
from .repository import AdvanceRepository

logger = logging.getLogger(__name__)


class AdvanceService:
    def __init__(self, advances: AdvanceRepository, employees: EmployeeRepository, tx: TransactionManager):
        self._advances = advances
        self._employees = employees
        self._tx = tx

    def _require(self, advance_id: int) -> Advance:
        advance = self._advances.get_by_id(int(advance_id))
        if not advance:
            raise NotFoundError("Advance not found")
        return advance

    def _build(self, actor: Actor, data: dict[str, Any], *, approved: bool) -> Advance:
        employee_id = require_int(data.get("employee"), "employee", min_value=1)
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        request_date = data.get("requestDate")
        return Advance(
            employee_id=employee_id,
            amount=require_amount(data.get("amount"), "amount", allow_zero=False),
            reason=require_non_empty(data.get("reason"), "reason"),
            request_date=parse_iso_date(request_date) if request_date else date.today(),
            installments=require_int(data.get("installments", 1), "installments", min_value=1),
            repayment_mode=require_enum(
                data.get("repaymentMode") or RepaymentMode.SALARY_DEDUCTION.value, RepaymentMode, "repaymentMode"
            ),
            remarks=(data.get("remarks") or "").strip() or None,
            approval_status=ApprovalStatus.APPROVED if approved else ApprovalStatus.PENDING,
            approved_by=actor.user_id if approved else None,
            approval_date=now_local() if approved else None,
        ).normalized()

    def create_advance(self, *, actor: Actor, data: dict[str, Any]) -> Advance:
        """Staff-granted advance, approved on creation."""
        require_permission(actor, Permission.CAN_MANAGE_SALARY)
        advance = self._build(actor, data, approved=True)
        advance = replace(advance, id=self._advances.create(advance))
        logger.info("Advance %s of %s granted to employee %s", advance.id, advance.amount, advance.employee_id)
        return advance

    def request_advance(self, *, actor: Actor, data: dict[str, Any]) -> Advance:
        """Pending advance; employees may only request for themselves."""
        if actor.role == Role.EMPLOYEE:
            data = {**data, "employee": actor.employee_id}
        require_self_or_staff(actor, require_int(data.get("employee"), "employee", min_value=1))
        advance = self._build(actor, data, approved=False)
        return replace(advance, id=self._advances.create(advance))

    def _decide(self, actor: Actor, advance_id: int, status: ApprovalStatus, remarks: Optional[str]) -> Advance:
        require_permission(actor, Permission.CAN_MANAGE_SALARY)
        current = self._require(advance_id)
        if current.approval_status != ApprovalStatus.PENDING:
            raise BusinessRuleError(
                f"Advance is already {current.approval_status.value}",
                code="INVALID_STATUS_TRANSITION",
            )
        updated = replace(
            current,
            approval_status=status,
            approved_by=actor.user_id,
            approval_date=now_local(),
            remarks=(remarks or "").strip() or current.remarks,
        ).normalized()
        self._advances.update(updated)
        return updated

    def approve_advance(self, *, actor: Actor, advance_id: int, remarks: Optional[str] = None) -> Advance:
        return self._decide(actor, advance_id, ApprovalStatus.APPROVED, remarks)

    def reject_advance(self, *, actor: Actor, advance_id: int, remarks: Optional[str] = None) -> Advance:
        return self._decide(actor, advance_id, ApprovalStatus.REJECTED, remarks)

    def record_repayment(
        self,
        *,
        actor: Actor,
        advance_id: int,
        month: int,
        year: int,
        amount: Any,
        salary_id: Optional[int] = None,
    ) -> Advance:
        """Manual repayment (cash, other); salary deductions come from the salary run."""
        require_permission(actor, Permission.CAN_MANAGE_SALARY)
        month, year = require_period(month, year)
        amount = require_amount(amount, "amount", allow_zero=False)

        with self._tx.transaction():
            current = self._require(advance_id)
            if current.approval_status != ApprovalStatus.APPROVED:
                raise BusinessRuleError("Only approved advances can be repaid", code="ADVANCE_NOT_APPROVED")
            if current.repayment_status == RepaymentStatus.COMPLETED:
                raise BusinessRuleError("Advance is already fully repaid", code="ADVANCE_COMPLETED")

            updated = current.record_repayment(
                month=month, year=year, amount=amount, paid_date=now_local(), salary_id=salary_id
            )
            self._advances.add_repayment(current.id, updated.repayments[-1])
            self._advances.update(updated)

        logger.info("Advance %s repayment of %s recorded (%s/%s)", current.id, amount, month, year)
        return updated

    def get_advance(self, *, actor: Actor, advance_id: int) -> Advance:
        advance = self._require(advance_id)
        try:
            require_self_or_staff(actor, advance.employee_id)
        except AuthorizationError:
            raise NotFoundError("Advance not found")
        return advance

    def list_advances(
        self,
        *,
        actor: Actor,
        employee_id: Optional[int] = None,
        approval_status: Optional[str] = None,
        repayment_status: Optional[str] = None,
    ) -> list[Advance]:
        return list(
            self._advances.list(
                employee_id=scope_employee_filter(actor, int(employee_id) if employee_id else None),
                approval_status=optional_enum(approval_status, ApprovalStatus, "approvalStatus"),
                repayment_status=optional_enum(repayment_status, RepaymentStatus, "repaymentStatus"),
            )
        )
