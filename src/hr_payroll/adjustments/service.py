from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from ..common.validators import optional_enum, require_amount, require_enum, require_int, require_non_empty, require_period
from ..core.enums import DeductionStatus, DeductionType, IncentiveStatus, IncentiveType, Permission
from ..core.exceptions import BusinessRuleError, NotFoundError
from ..employees.repository import EmployeeRepository
from ..users.authorization import require_permission, scope_employee_filter
from ..users.model import Actor
from .model import Deduction, Incentive
from .repository import DeductionRepository, IncentiveRepository

logger = logging.getLogger(__name__)


class AdjustmentService:
    """Incentives and deductions feeding the monthly salary run."""

    def __init__(
        self,
        incentives: IncentiveRepository,
        deductions: DeductionRepository,
        employees: EmployeeRepository,
    ):
        self._incentives = incentives
        self._deductions = deductions
        self._employees = employees

    def _require_employee(self, employee_id: Any) -> int:
        employee_id = require_int(employee_id, "employee", min_value=1)
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")
        return employee_id

    # --- incentives -----------------------------------------------------

    def add_incentive(self, *, actor: Actor, data: dict[str, Any]) -> Incentive:
        """Staff-added incentives are approved on creation unless sent as Pending."""
        require_permission(actor, Permission.CAN_MANAGE_SALARY)
        pending = data.get("status") == "Pending"
        employee_id = self._require_employee(data.get("employee"))
        month, year = require_period(data.get("month"), data.get("year"))

        incentive = Incentive(
            employee_id=employee_id,
            month=month,
            year=year,
            amount=require_amount(data.get("amount"), "amount", allow_zero=False),
            type=require_enum(data.get("type"), IncentiveType, "type"),
            description=(data.get("description") or "").strip() or None,
            remarks=(data.get("remarks") or "").strip() or None,
            status=IncentiveStatus.PENDING if pending else IncentiveStatus.APPROVED,
            added_by=actor.user_id,
            approved_by=None if pending else actor.user_id,
        ).normalized()
        incentive = replace(incentive, id=self._incentives.create(incentive))
        logger.info("Incentive %s added for employee %s (%s/%s)", incentive.id, employee_id, month, year)
        return incentive

    def _decide_incentive(self, actor: Actor, incentive_id: int, status: IncentiveStatus) -> Incentive:
        require_permission(actor, Permission.CAN_MANAGE_SALARY)
        current = self._incentives.get_by_id(int(incentive_id))
        if not current:
            raise NotFoundError("Incentive not found")
        if current.status != IncentiveStatus.PENDING:
            raise BusinessRuleError(
                f"Incentive is already {current.status.value}",
                code="INVALID_STATUS_TRANSITION",
            )
        self._incentives.set_status(current.id, status=status, approved_by=actor.user_id)
        return replace(current, status=status, approved_by=actor.user_id)

    def approve_incentive(self, *, actor: Actor, incentive_id: int) -> Incentive:
        return self._decide_incentive(actor, incentive_id, IncentiveStatus.APPROVED)

    def reject_incentive(self, *, actor: Actor, incentive_id: int) -> Incentive:
        return self._decide_incentive(actor, incentive_id, IncentiveStatus.REJECTED)

    def list_incentives(
        self,
        *,
        actor: Actor,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[Incentive]:
        return list(
            self._incentives.list(
                employee_id=scope_employee_filter(actor, int(employee_id) if employee_id else None),
                month=int(month) if month else None,
                year=int(year) if year else None,
                status=optional_enum(status, IncentiveStatus, "status"),
            )
        )

    # --- deductions -----------------------------------------------------

    def add_deduction(self, *, actor: Actor, data: dict[str, Any]) -> Deduction:
        """Staff-added deductions are approved on creation unless sent as Pending."""
        require_permission(actor, Permission.CAN_MANAGE_SALARY)
        pending = data.get("status") == "Pending"
        employee_id = self._require_employee(data.get("employee"))
        month, year = require_period(data.get("month"), data.get("year"))

        deduction = Deduction(
            employee_id=employee_id,
            month=month,
            year=year,
            amount=require_amount(data.get("amount"), "amount", allow_zero=False),
            type=require_enum(data.get("type"), DeductionType, "type"),
            reason=require_non_empty(data.get("reason"), "reason"),
            remarks=(data.get("remarks") or "").strip() or None,
            status=DeductionStatus.PENDING if pending else DeductionStatus.APPROVED,
            added_by=actor.user_id,
            approved_by=None if pending else actor.user_id,
        ).normalized()
        deduction = replace(deduction, id=self._deductions.create(deduction))
        logger.info("Deduction %s added for employee %s (%s/%s)", deduction.id, employee_id, month, year)
        return deduction

    def _decide_deduction(self, actor: Actor, deduction_id: int, status: DeductionStatus) -> Deduction:
        require_permission(actor, Permission.CAN_MANAGE_SALARY)
        current = self._deductions.get_by_id(int(deduction_id))
        if not current:
            raise NotFoundError("Deduction not found")
        if current.status != DeductionStatus.PENDING:
            raise BusinessRuleError(
                f"Deduction is already {current.status.value}",
                code="INVALID_STATUS_TRANSITION",
            )
        self._deductions.set_status(current.id, status=status, approved_by=actor.user_id)
        return replace(current, status=status, approved_by=actor.user_id)

    def approve_deduction(self, *, actor: Actor, deduction_id: int) -> Deduction:
        return self._decide_deduction(actor, deduction_id, DeductionStatus.APPROVED)

    def reject_deduction(self, *, actor: Actor, deduction_id: int) -> Deduction:
        return self._decide_deduction(actor, deduction_id, DeductionStatus.REJECTED)

    def list_deductions(
        self,
        *,
        actor: Actor,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[Deduction]:
        return list(
            self._deductions.list(
                employee_id=scope_employee_filter(actor, int(employee_id) if employee_id else None),
                month=int(month) if month else None,
                year=int(year) if year else None,
                status=optional_enum(status, DeductionStatus, "status"),
            )
        )
