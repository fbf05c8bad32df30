from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import DeductionStatus, DeductionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, in_clause
from .model import Deduction
from .repository import DeductionRepository

_SELECT = """
    SELECT id, employee_id, month, year, amount, type, reason, remarks, status,
           added_by, approved_by, deducted_in_salary_id
    FROM deductions
"""


def _to_deduction(r: dict) -> Deduction:
    return Deduction(
        id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        amount=as_decimal(r["amount"]),
        type=DeductionType(r["type"]),
        reason=r["reason"],
        remarks=r.get("remarks"),
        status=DeductionStatus(r["status"]),
        added_by=r.get("added_by"),
        approved_by=r.get("approved_by"),
        deducted_in_salary_id=r.get("deducted_in_salary_id"),
    )


class MySQLDeductionRepository(DeductionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, deduction_id: int) -> Optional[Deduction]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(deduction_id),))
            r = fetchone(cur)
            return _to_deduction(r) if r else None

    def create(self, deduction: Deduction) -> int:
        d = deduction.normalized()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO deductions(employee_id, month, year, amount, type, reason, remarks,
                                       status, added_by, approved_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    d.employee_id, d.month, d.year, d.amount, d.type.value, d.reason, d.remarks,
                    d.status.value, d.added_by, d.approved_by,
                ),
            )
            return int(cur.lastrowid)

    def set_status(self, deduction_id: int, *, status: DeductionStatus, approved_by: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE deductions SET status=%s, approved_by=%s WHERE id=%s AND status<>%s",
                (status.value, approved_by, int(deduction_id), DeductionStatus.DEDUCTED.value),
            )
            return cur.rowcount > 0

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[DeductionStatus] = None,
        for_update: bool = False,
    ) -> Sequence[Deduction]:
        where: list[str] = []
        params: list = []
        for column, value in (("employee_id", employee_id), ("month", month), ("year", year)):
            if value is not None:
                where.append(f"{column}=%s")
                params.append(int(value))
        if status:
            where.append("status=%s")
            params.append(status.value)

        sql = _SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY year DESC, month DESC, id"
        if for_update:
            sql += " FOR UPDATE"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_deduction(r) for r in fetchall(cur)]

    def mark_deducted(self, deduction_ids: Sequence[int], *, salary_id: int) -> int:
        if not deduction_ids:
            return 0
        placeholders, ids = in_clause(int(i) for i in deduction_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE deductions SET status=%s, deducted_in_salary_id=%s
                WHERE status=%s AND id IN ({placeholders})
                """,
                (DeductionStatus.DEDUCTED.value, int(salary_id), DeductionStatus.APPROVED.value, *ids),
            )
            return cur.rowcount
