from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from ..adjustments.repository import DeductionRepository, IncentiveRepository
from ..advances.model import Advance
from ..advances.repository import AdvanceRepository
from ..attendance.aggregator import AttendanceAggregator
from ..common.datetime_utils import now_local
from ..common.money import ZERO
from ..common.validators import require_int, require_period
from ..core.enums import DeductionStatus, IncentiveStatus, Permission
from ..core.exceptions import BusinessRuleError, DomainError, DuplicateError, NotFoundError
from ..database.connection import TransactionManager
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..integrations.sheets import NullSheetSync, SheetSync, best_effort_sync
from ..users.authorization import require_permission
from ..users.model import Actor
from .calculator.factory import SalaryCalculatorFactory
from .model import Salary
from .policy import PayrollPolicy
from .repository import SalaryRepository

logger = logging.getLogger(__name__)


class SalaryGenerator:
    """Monthly payroll run for one employee.

    Everything from the precondition checks to the advance repayments runs
    in one transaction; the unique (employee, month, year) key on salaries
    is the final guard against a concurrent run for the same period.
    """

    def __init__(
        self,
        *,
        employees: EmployeeRepository,
        salaries: SalaryRepository,
        incentives: IncentiveRepository,
        deductions: DeductionRepository,
        advances: AdvanceRepository,
        aggregator: AttendanceAggregator,
        tx: TransactionManager,
        policy: Optional[PayrollPolicy] = None,
        sheets: Optional[SheetSync] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._employees = employees
        self._salaries = salaries
        self._incentives = incentives
        self._deductions = deductions
        self._advances = advances
        self._aggregator = aggregator
        self._tx = tx
        self._calculators = SalaryCalculatorFactory(policy or PayrollPolicy())
        self._sheets = sheets or NullSheetSync()
        self._clock = clock

    def _check_preconditions(self, employee: Optional[Employee], month: int, year: int) -> Employee:
        if employee is None:
            raise NotFoundError("Employee not found")

        profile = employee.normalized().profile_status
        if not profile.is_complete:
            raise BusinessRuleError(
                "Employee profile is incomplete. Please complete the profile before generating salary.",
                code="INCOMPLETE_PROFILE",
                details={"missingFields": list(profile.missing_fields)},
            )

        if self._salaries.get_for_period(employee.id, month, year) is not None:
            raise DuplicateError("Salary already generated for this month", code="DUPLICATE_SALARY")
        return employee

    def generate(self, *, actor: Actor, employee_id: int, month: int, year: int, remarks: Optional[str] = None) -> Salary:
        require_permission(actor, Permission.CAN_MANAGE_SALARY)
        employee_id = require_int(employee_id, "employeeId", min_value=1)
        month, year = require_period(month, year)

        try:
            with self._tx.transaction():
                salary, employee = self._generate(actor, employee_id, month, year, remarks)
        except DomainError as e:
            logger.warning("Salary generation for employee %s (%s/%s) rejected: %s", employee_id, month, year, e.message)
            raise

        logger.info(
            "Generated salary %s for %s (%s/%s): gross=%s net=%s",
            salary.id, employee.employee_code, month, year, salary.gross_salary, salary.net_salary,
        )
        best_effort_sync(
            lambda: self._sheets.sync_salary(salary, employee),
            what=f"salary {employee.employee_code} {month}/{year}",
        )
        return salary

    def _generate(self, actor: Actor, employee_id: int, month: int, year: int, remarks: Optional[str]):
        employee = self._check_preconditions(self._employees.get_by_id(employee_id), month, year)

        summary = self._aggregator.summarize(employee.id, month, year)
        incentives = self._incentives.list(
            employee_id=employee.id, month=month, year=year, status=IncentiveStatus.APPROVED, for_update=True
        )
        deductions = self._deductions.list(
            employee_id=employee.id, month=month, year=year, status=DeductionStatus.APPROVED, for_update=True
        )
        advances = self._advances.list_outstanding(employee.id, for_update=True)
        installments: list[tuple[Advance, Decimal]] = [
            (a, a.next_installment()) for a in advances if a.is_outstanding and a.next_installment() > 0
        ]

        components = self._calculators.for_salary_type(employee.salary_type).compute(employee, summary)
        salary = Salary(
            employee_id=employee.id,
            month=month,
            year=year,
            basic_salary=components.basic_salary,
            hra=components.hra,
            other_allowances=components.other_allowances,
            night_duty_allowance=components.night_duty_allowance,
            total_incentives=sum((i.amount for i in incentives), ZERO),
            provident_fund=components.provident_fund,
            esi=components.esi,
            total_advances=sum((amount for _, amount in installments), ZERO),
            total_deductions=sum((d.amount for d in deductions), ZERO),
            attendance=summary,
            remarks=(remarks or "").strip() or None,
            generated_by=actor.user_id,
        ).normalized()

        # Raises DuplicateError if another run inserted the period first; the
        # transaction then rolls back everything below as well.
        salary_id = self._salaries.create(salary)
        salary = replace(salary, id=salary_id)

        paid_at = self._clock()
        for advance, amount in installments:
            updated = advance.record_repayment(
                month=month, year=year, amount=amount, paid_date=paid_at, salary_id=salary_id
            )
            self._advances.add_repayment(advance.id, updated.repayments[-1])
            self._advances.update(updated)

        self._incentives.mark_paid([i.id for i in incentives], salary_id=salary_id)
        self._deductions.mark_deducted([d.id for d in deductions], salary_id=salary_id)
        return salary, employee
