from __future__ import annotations

from typing import Optional, Sequence

from ..attendance.model import AttendanceSummary
from ..core.enums import Department, PaymentMode, PaymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, duplicate_key_guard, fetchall, fetchone
from .model import Salary
from .repository import SalaryRepository

_MONEY_COLUMNS = (
    "basic_salary", "hra", "other_allowances", "overtime_hours", "overtime_amount",
    "night_duty_allowance", "total_incentives", "provident_fund", "esi", "professional_tax",
    "tds", "total_advances", "total_deductions", "gross_salary", "total_deductions_amount", "net_salary",
)
_ATTENDANCE_COLUMNS = (
    "total_working_days", "present_days", "absent_days", "half_days", "leaves", "holidays", "night_duty_days",
)

_SELECT = (
    "SELECT s.id, s.employee_id, s.month, s.year, "
    + ", ".join(f"s.{c}" for c in _MONEY_COLUMNS + _ATTENDANCE_COLUMNS)
    + ", s.total_working_hours, s.payment_status, s.payment_date, s.payment_mode, s.transaction_id,"
    " s.remarks, s.generated_by, s.approved_by FROM salaries s"
)


def _to_salary(r: dict) -> Salary:
    return Salary(
        id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        **{c: as_decimal(r[c]) for c in _MONEY_COLUMNS},
        attendance=AttendanceSummary(
            **{c: int(r[c] or 0) for c in _ATTENDANCE_COLUMNS},
            total_working_hours=as_decimal(r.get("total_working_hours")),
        ),
        payment_status=PaymentStatus(r["payment_status"]),
        payment_date=r.get("payment_date"),
        payment_mode=PaymentMode(r["payment_mode"]) if r.get("payment_mode") else None,
        transaction_id=r.get("transaction_id"),
        remarks=r.get("remarks"),
        generated_by=r.get("generated_by"),
        approved_by=r.get("approved_by"),
    )


class MySQLSalaryRepository(SalaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.id=%s", (int(salary_id),))
            r = fetchone(cur)
            return _to_salary(r) if r else None

    def get_for_period(self, employee_id: int, month: int, year: int) -> Optional[Salary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE s.employee_id=%s AND s.month=%s AND s.year=%s",
                (int(employee_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return _to_salary(r) if r else None

    def create(self, salary: Salary) -> int:
        s = salary.normalized()
        columns = (
            ("employee_id", "month", "year")
            + _MONEY_COLUMNS
            + _ATTENDANCE_COLUMNS
            + ("total_working_hours", "payment_status", "remarks", "generated_by")
        )
        values = (
            (s.employee_id, s.month, s.year)
            + tuple(getattr(s, c) for c in _MONEY_COLUMNS)
            + tuple(getattr(s.attendance, c) for c in _ATTENDANCE_COLUMNS)
            + (s.attendance.total_working_hours, s.payment_status.value, s.remarks, s.generated_by)
        )
        sql = f"INSERT INTO salaries({', '.join(columns)}) VALUES({', '.join(['%s'] * len(columns))})"

        with duplicate_key_guard("Salary already generated for this month", code="DUPLICATE_SALARY"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(sql, values)
                return int(cur.lastrowid)

    def update_payment(self, salary: Salary) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salaries
                SET payment_status=%s, payment_date=%s, payment_mode=%s, transaction_id=%s,
                    remarks=%s, approved_by=%s
                WHERE id=%s
                """,
                (
                    salary.payment_status.value,
                    salary.payment_date,
                    salary.payment_mode.value if salary.payment_mode else None,
                    salary.transaction_id,
                    salary.remarks,
                    salary.approved_by,
                    int(salary.id),
                ),
            )
            return cur.rowcount > 0

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        payment_status: Optional[PaymentStatus] = None,
        department: Optional[Department] = None,
    ) -> Sequence[Salary]:
        sql = _SELECT
        where: list[str] = []
        params: list = []

        if department:
            sql += " JOIN employees e ON e.id = s.employee_id"
            where.append("e.department=%s")
            params.append(department.value)
        for column, value in (("s.employee_id", employee_id), ("s.month", month), ("s.year", year)):
            if value is not None:
                where.append(f"{column}=%s")
                params.append(int(value))
        if payment_status:
            where.append("s.payment_status=%s")
            params.append(payment_status.value)

        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY s.year DESC, s.month DESC, s.employee_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_salary(r) for r in fetchall(cur)]
