from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional

from ..adjustments.repository import DeductionRepository, IncentiveRepository
from ..advances.repository import AdvanceRepository
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds, parse_iso_date
from ..common.money import ZERO, round_money
from ..common.validators import optional_enum, require_period
from ..core.enums import (
    ApprovalStatus,
    AttendanceStatus,
    DeductionStatus,
    DeductionType,
    Department,
    EmployeeStatus,
    IncentiveStatus,
    IncentiveType,
    IncrementReason,
    PaymentStatus,
    RepaymentStatus,
    Role,
    SalaryType,
)
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..increments.repository import IncrementRepository
from ..payroll.policy import PayrollPolicy
from ..payroll.repository import SalaryRepository
from ..users.authorization import require_roles
from ..users.model import Actor


def _money(value: Decimal) -> float:
    return float(round_money(value))


def _employee_ref(employee: Optional[Employee]) -> dict:
    if employee is None:
        return {"id": None, "name": None, "department": None, "designation": None}
    return {
        "id": employee.employee_code,
        "name": employee.full_name,
        "department": employee.department.value,
        "designation": employee.designation.value,
    }


@dataclass(frozen=True)
class Report:
    rows: list[dict]
    totals: dict
    filters: dict

    def to_dict(self) -> dict:
        return {"report": self.rows, "totals": self.totals, "count": len(self.rows), "filters": self.filters}


class ReportService:
    """Read-only roll-ups for dashboards and exports (admin / hr)."""

    def __init__(
        self,
        *,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        salaries: SalaryRepository,
        incentives: IncentiveRepository,
        deductions: DeductionRepository,
        advances: AdvanceRepository,
        increments: IncrementRepository,
        policy: Optional[PayrollPolicy] = None,
        today: Callable[[], date] = date.today,
    ):
        self._employees = employees
        self._attendance = attendance
        self._salaries = salaries
        self._incentives = incentives
        self._deductions = deductions
        self._advances = advances
        self._increments = increments
        self._policy = policy or PayrollPolicy()
        self._today = today

    def _employee_map(self) -> dict[int, Employee]:
        return {e.id: e for e in self._employees.list()}

    def _resolve_code(self, employee_code: Optional[str]) -> Optional[int]:
        if not employee_code:
            return None
        employee = self._employees.get_by_code(employee_code)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee.id

    def salary_report(
        self,
        *,
        actor: Actor,
        month,
        year,
        department: Optional[str] = None,
        payment_status: Optional[str] = None,
    ) -> Report:
        require_roles(actor, Role.ADMIN, Role.HR)
        if not month or not year:
            raise ValidationError("Month and year are required")
        month, year = require_period(month, year)

        salaries = self._salaries.list(
            month=month,
            year=year,
            department=optional_enum(department, Department, "department"),
            payment_status=optional_enum(payment_status, PaymentStatus, "paymentStatus"),
        )
        people = self._employee_map()
        rows = [
            {**s.to_dict(), "employee": _employee_ref(people.get(s.employee_id))}
            for s in sorted(salaries, key=lambda s: people[s.employee_id].employee_code if s.employee_id in people else "")
        ]
        totals = {
            "count": len(rows),
            "totalGrossSalary": _money(sum((s.gross_salary for s in salaries), ZERO)),
            "totalDeductions": _money(sum((s.total_deductions_amount for s in salaries), ZERO)),
            "totalNetSalary": _money(sum((s.net_salary for s in salaries), ZERO)),
            "totalIncentives": _money(sum((s.total_incentives for s in salaries), ZERO)),
            "totalAdvances": _money(sum((s.total_advances for s in salaries), ZERO)),
        }
        filters = {"month": month, "year": year, "department": department, "paymentStatus": payment_status}
        return Report(rows=rows, totals=totals, filters=filters)

    def attendance_report(
        self,
        *,
        actor: Actor,
        start_date: Optional[str],
        end_date: Optional[str],
        department: Optional[str] = None,
        employee_code: Optional[str] = None,
    ) -> Report:
        """Per active employee counts over an inclusive date range."""
        require_roles(actor, Role.ADMIN, Role.HR)
        if not start_date or not end_date:
            raise ValidationError("Start date and end date are required")
        start, end = parse_iso_date(start_date), parse_iso_date(end_date)
        if end < start:
            raise ValidationError("endDate must not be before startDate")

        dept = optional_enum(department, Department, "department")
        employees = [
            e
            for e in self._employees.list(status=EmployeeStatus.ACTIVE, department=dept)
            if not employee_code or e.employee_code == employee_code
        ]
        records = self._attendance.list(start_date=start, end_date=end + timedelta(days=1), department=dept)
        by_employee: dict[int, list] = defaultdict(list)
        for r in records:
            by_employee[r.employee_id].append(r)

        rows = []
        for e in employees:
            marks = by_employee.get(e.id, [])
            counts = Counter(r.status for r in marks)
            rows.append(
                {
                    "employee": _employee_ref(e),
                    "present": counts[AttendanceStatus.PRESENT],
                    "absent": counts[AttendanceStatus.ABSENT],
                    "halfDay": counts[AttendanceStatus.HALF_DAY],
                    "leave": counts[AttendanceStatus.LEAVE],
                    "holiday": counts[AttendanceStatus.HOLIDAY],
                    "nightDuty": sum(1 for r in marks if r.is_night_duty),
                    "totalWorkingHours": float(sum((r.working_hours or ZERO for r in marks), ZERO)),
                }
            )
        filters = {"startDate": start.isoformat(), "endDate": end.isoformat(), "department": department, "employeeId": employee_code}
        return Report(rows=rows, totals={"count": len(rows)}, filters=filters)

    def pf_esi_report(self, *, actor: Actor, month, year) -> Report:
        """Employee PF as stored; employer PF from the policy rate over the stored basic."""
        require_roles(actor, Role.ADMIN, Role.HR)
        if not month or not year:
            raise ValidationError("Month and year are required")
        month, year = require_period(month, year)

        people = self._employee_map()
        rows = []
        pf_employee = pf_employer = esi = ZERO
        for s in self._salaries.list(month=month, year=year):
            e = people.get(s.employee_id)
            employer = round_money(s.basic_salary * self._policy.pf_employer_rate) if s.provident_fund else ZERO
            pf_employee += s.provident_fund
            pf_employer += employer
            esi += s.esi
            rows.append(
                {
                    "employeeId": e.employee_code if e else None,
                    "name": e.full_name if e else None,
                    "pfNumber": e.pf_number if e else None,
                    "esiNumber": e.esi_number if e else None,
                    "uanNumber": e.uan_number if e else None,
                    "basicSalary": _money(s.basic_salary),
                    "hra": _money(s.hra),
                    "pfEmployee": _money(s.provident_fund),
                    "pfEmployer": _money(employer),
                    "esi": _money(s.esi),
                    "grossSalary": _money(s.gross_salary),
                }
            )
        totals = {
            "totalPFEmployee": _money(pf_employee),
            "totalPFEmployer": _money(pf_employer),
            "totalESI": _money(esi),
        }
        return Report(rows=rows, totals=totals, filters={"month": month, "year": year})

    def incentive_report(
        self,
        *,
        actor: Actor,
        month=None,
        year=None,
        type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Report:
        require_roles(actor, Role.ADMIN, Role.HR)
        kind = optional_enum(type, IncentiveType, "type")
        items = [
            i
            for i in self._incentives.list(
                month=int(month) if month else None,
                year=int(year) if year else None,
                status=optional_enum(status, IncentiveStatus, "status"),
            )
            if kind is None or i.type == kind
        ]
        people = self._employee_map()
        rows = [{**i.to_dict(), "employee": _employee_ref(people.get(i.employee_id))} for i in items]
        totals = {"totalAmount": _money(sum((i.amount for i in items), ZERO))}
        return Report(rows=rows, totals=totals, filters={"month": month, "year": year, "type": type, "status": status})

    def deduction_report(
        self,
        *,
        actor: Actor,
        month=None,
        year=None,
        type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Report:
        require_roles(actor, Role.ADMIN, Role.HR)
        kind = optional_enum(type, DeductionType, "type")
        items = [
            d
            for d in self._deductions.list(
                month=int(month) if month else None,
                year=int(year) if year else None,
                status=optional_enum(status, DeductionStatus, "status"),
            )
            if kind is None or d.type == kind
        ]
        people = self._employee_map()
        rows = [{**d.to_dict(), "employee": _employee_ref(people.get(d.employee_id))} for d in items]
        totals = {"totalAmount": _money(sum((d.amount for d in items), ZERO))}
        return Report(rows=rows, totals=totals, filters={"month": month, "year": year, "type": type, "status": status})

    def increment_report(
        self,
        *,
        actor: Actor,
        year=None,
        reason: Optional[str] = None,
        employee_code: Optional[str] = None,
    ) -> Report:
        require_roles(actor, Role.ADMIN, Role.HR)
        why = optional_enum(reason, IncrementReason, "reason")
        items = [
            i
            for i in self._increments.list(
                employee_id=self._resolve_code(employee_code),
                year=int(year) if year else None,
            )
            if why is None or i.reason == why
        ]
        people = self._employee_map()
        rows = [{**i.to_dict(), "employee": _employee_ref(people.get(i.employee_id))} for i in items]
        totals = {"totalIncrementAmount": _money(sum((i.increment_amount for i in items), ZERO))}
        return Report(rows=rows, totals=totals, filters={"year": year, "reason": reason, "employeeId": employee_code})

    def advance_report(
        self,
        *,
        actor: Actor,
        status: Optional[str] = None,
        repayment_status: Optional[str] = None,
        employee_code: Optional[str] = None,
    ) -> Report:
        require_roles(actor, Role.ADMIN, Role.HR)
        items = self._advances.list(
            employee_id=self._resolve_code(employee_code),
            approval_status=optional_enum(status, ApprovalStatus, "status"),
            repayment_status=optional_enum(repayment_status, RepaymentStatus, "repaymentStatus"),
        )
        people = self._employee_map()
        rows = [{**a.to_dict(), "employee": _employee_ref(people.get(a.employee_id))} for a in items]
        totals = {
            "totalAmount": _money(sum((a.amount for a in items), ZERO)),
            "totalPaid": _money(sum((a.paid_amount for a in items), ZERO)),
            "totalRemaining": _money(sum((a.remaining_amount for a in items), ZERO)),
        }
        filters = {"status": status, "repaymentStatus": repayment_status, "employeeId": employee_code}
        return Report(rows=rows, totals=totals, filters=filters)

    def employee_report(
        self,
        *,
        actor: Actor,
        department: Optional[str] = None,
        status: Optional[str] = None,
        salary_type: Optional[str] = None,
    ) -> Report:
        require_roles(actor, Role.ADMIN, Role.HR)
        employees = sorted(
            self._employees.list(
                department=optional_enum(department, Department, "department"),
                status=optional_enum(status, EmployeeStatus, "status"),
                salary_type=optional_enum(salary_type, SalaryType, "salaryType"),
            ),
            key=lambda e: (e.department.value, e.employee_code),
        )
        rows = [e.to_dict(include_documents=False) for e in employees]
        totals = {"byDepartment": self._group_by_department(employees), "totalCount": len(rows)}
        filters = {"department": department, "status": status, "salaryType": salary_type}
        return Report(rows=rows, totals=totals, filters=filters)

    @staticmethod
    def _group_by_department(employees: Iterable[Employee]) -> list[dict]:
        groups: dict[str, list[Decimal]] = defaultdict(list)
        for e in employees:
            groups[e.department.value].append(e.basic_salary)
        return [
            {
                "_id": dept,
                "count": len(salaries),
                "avgSalary": _money(sum(salaries, ZERO) / len(salaries)),
                "totalSalary": _money(sum(salaries, ZERO)),
            }
            for dept, salaries in sorted(groups.items())
        ]

    def department_summary(self, *, actor: Actor) -> list[dict]:
        require_roles(actor, Role.ADMIN, Role.HR)
        return self._group_by_department(self._employees.list(status=EmployeeStatus.ACTIVE))

    def dashboard_metrics(self, *, actor: Actor) -> dict:
        require_roles(actor, Role.ADMIN, Role.HR)
        today = self._today()
        active = self._employees.list(status=EmployeeStatus.ACTIVE)
        marks = Counter(r.status for r in self._attendance.list(start_date=today, end_date=today + timedelta(days=1)))
        return {
            "totalEmployees": len(active),
            "presentToday": marks[AttendanceStatus.PRESENT],
            "absentToday": marks[AttendanceStatus.ABSENT],
            "incompleteProfiles": sum(1 for e in active if not e.profile_status.is_complete),
            "pendingSalary": len(
                self._salaries.list(month=today.month, year=today.year, payment_status=PaymentStatus.PENDING)
            ),
            "pendingAdvances": len(self._advances.list(approval_status=ApprovalStatus.PENDING)),
        }

    def monthly_summary(self, *, actor: Actor, month=None, year=None) -> dict:
        require_roles(actor, Role.ADMIN, Role.HR)
        today = self._today()
        month, year = require_period(month or today.month, year or today.year)

        start, end = month_bounds(month, year)
        attendance = Counter(r.status.value for r in self._attendance.list(start_date=start, end_date=end))
        salaries = self._salaries.list(month=month, year=year)

        by_status: dict[str, list] = defaultdict(list)
        for s in salaries:
            by_status[s.payment_status.value].append(s.net_salary)

        return {
            "month": month,
            "year": year,
            "attendance": [{"_id": k, "count": v} for k, v in sorted(attendance.items())],
            "salary": [
                {"_id": k, "count": len(v), "totalAmount": _money(sum(v, ZERO))} for k, v in sorted(by_status.items())
            ],
            "payroll": {
                "totalGross": _money(sum((s.gross_salary for s in salaries), ZERO)),
                "totalDeductions": _money(sum((s.total_deductions_amount for s in salaries), ZERO)),
                "totalNet": _money(sum((s.net_salary for s in salaries), ZERO)),
            },
        }
