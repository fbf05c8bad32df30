from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ApprovalStatus, IncrementReason
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, as_optional_decimal, db_cursor, fetchall
from .model import Increment
from .repository import IncrementRepository


class MySQLIncrementRepository(IncrementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, increment: Increment) -> int:
        i = increment.normalized()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO increments(employee_id, effective_date, previous_salary, new_salary,
                                       increment_amount, increment_percentage, reason, remarks,
                                       approved_by, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    i.employee_id, i.effective_date, i.previous_salary, i.new_salary,
                    i.increment_amount, i.increment_percentage, i.reason.value, i.remarks,
                    i.approved_by, i.status.value,
                ),
            )
            return int(cur.lastrowid)

    def list(self, *, employee_id: Optional[int] = None, year: Optional[int] = None) -> Sequence[Increment]:
        sql = """
            SELECT id, employee_id, effective_date, previous_salary, new_salary, increment_amount,
                   increment_percentage, reason, remarks, approved_by, status
            FROM increments
        """
        where: list[str] = []
        params: list = []
        if employee_id:
            where.append("employee_id=%s")
            params.append(int(employee_id))
        if year:
            where.append("YEAR(effective_date)=%s")
            params.append(int(year))
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY effective_date DESC, id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                Increment(
                    id=int(r["id"]),
                    employee_id=int(r["employee_id"]),
                    effective_date=r["effective_date"],
                    previous_salary=as_decimal(r["previous_salary"]),
                    new_salary=as_decimal(r["new_salary"]),
                    increment_amount=as_decimal(r["increment_amount"]),
                    increment_percentage=as_optional_decimal(r.get("increment_percentage")),
                    reason=IncrementReason(r["reason"]),
                    remarks=r.get("remarks"),
                    approved_by=r.get("approved_by"),
                    status=ApprovalStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]
