from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Optional

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_amount, require_enum
from ..core.enums import IncrementReason, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..database.connection import TransactionManager
from ..employees.repository import EmployeeRepository
from ..users.authorization import require_roles, scope_employee_filter
from ..users.model import Actor
from .model import Increment
from .repository import IncrementRepository

logger = logging.getLogger(__name__)


class IncrementService:
    def __init__(self, increments: IncrementRepository, employees: EmployeeRepository, tx: TransactionManager):
        self._increments = increments
        self._employees = employees
        self._tx = tx

    def apply_increment(
        self,
        *,
        actor: Actor,
        employee_id: int,
        effective_date: date | str,
        new_salary: Any,
        reason: str,
        remarks: Optional[str] = None,
    ) -> Increment:
        """Store the increment and move the employee's basic salary, all or nothing."""
        require_roles(actor, Role.ADMIN)
        new_salary = require_amount(new_salary, "newSalary", allow_zero=False)
        reason_enum = require_enum(reason, IncrementReason, "reason")
        effective = effective_date if isinstance(effective_date, date) else parse_iso_date(effective_date)

        with self._tx.transaction():
            employee = self._employees.get_by_id(int(employee_id))
            if not employee:
                raise NotFoundError("Employee not found")
            if new_salary == employee.basic_salary:
                raise ValidationError("New salary must differ from the current salary", fields={"newSalary": "unchanged"})

            increment = Increment(
                employee_id=employee.id,
                effective_date=effective,
                previous_salary=employee.basic_salary,
                new_salary=new_salary,
                reason=reason_enum,
                remarks=(remarks or "").strip() or None,
                approved_by=actor.user_id,
            ).normalized()
            increment = replace(increment, id=self._increments.create(increment))
            self._employees.update(replace(employee, basic_salary=new_salary, updated_by=actor.user_id))

        logger.info(
            "Increment %s applied to %s: %s -> %s",
            increment.id, employee.employee_code, increment.previous_salary, increment.new_salary,
        )
        return increment

    def list_increments(self, *, actor: Actor, employee_id: Optional[int] = None, year: Optional[int] = None) -> list[Increment]:
        return list(
            self._increments.list(
                employee_id=scope_employee_filter(actor, int(employee_id) if employee_id else None),
                year=int(year) if year else None,
            )
        )
