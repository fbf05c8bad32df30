from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import optional_enum, require_enum
from ..core.enums import Department, PaymentMode, PaymentStatus, Permission
from ..core.exceptions import AuthorizationError, BusinessRuleError, NotFoundError
from ..users.authorization import require_permission, require_self_or_staff, scope_employee_filter
from ..users.model import Actor
from .model import Salary
from .repository import SalaryRepository

logger = logging.getLogger(__name__)


class SalaryService:
    """Reads and payment-status updates of generated salaries."""

    def __init__(self, salaries: SalaryRepository):
        self._salaries = salaries

    def get_salary(self, *, actor: Actor, salary_id: int) -> Salary:
        salary = self._salaries.get_by_id(int(salary_id))
        if not salary:
            raise NotFoundError("Salary record not found")
        try:
            require_self_or_staff(actor, salary.employee_id)
        except AuthorizationError:
            raise NotFoundError("Salary record not found")
        return salary

    def list_salaries(
        self,
        *,
        actor: Actor,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        payment_status: Optional[str] = None,
        department: Optional[str] = None,
    ) -> list[Salary]:
        return list(
            self._salaries.list(
                employee_id=scope_employee_filter(actor, int(employee_id) if employee_id else None),
                month=int(month) if month else None,
                year=int(year) if year else None,
                payment_status=optional_enum(payment_status, PaymentStatus, "paymentStatus"),
                department=optional_enum(department, Department, "department"),
            )
        )

    def update_payment_status(
        self,
        *,
        actor: Actor,
        salary_id: int,
        status: str,
        payment_date: Optional[str] = None,
        payment_mode: Optional[str] = None,
        transaction_id: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> Salary:
        require_permission(actor, Permission.CAN_MANAGE_SALARY)
        target = require_enum(status, PaymentStatus, "paymentStatus")

        current = self._salaries.get_by_id(int(salary_id))
        if not current:
            raise NotFoundError("Salary record not found")
        if not current.can_move_to(target):
            raise BusinessRuleError(
                f"Cannot change payment status from {current.payment_status.value} to {target.value}",
                code="INVALID_STATUS_TRANSITION",
            )

        updated = replace(
            current,
            payment_status=target,
            remarks=(remarks or "").strip() or current.remarks,
        )
        if target == PaymentStatus.PAID:
            updated = replace(
                updated,
                payment_date=parse_iso_datetime(payment_date) or now_local(),
                payment_mode=optional_enum(payment_mode, PaymentMode, "paymentMode") or current.payment_mode,
                transaction_id=(transaction_id or "").strip() or current.transaction_id,
                approved_by=actor.user_id,
            )

        self._salaries.update_payment(updated)
        logger.info(
            "Salary %s payment status %s -> %s", current.id, current.payment_status.value, target.value
        )
        return updated
