from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import IncentiveStatus, IncentiveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, in_clause
from .model import Incentive
from .repository import IncentiveRepository

_SELECT = """
    SELECT id, employee_id, month, year, amount, type, description, remarks, status,
           added_by, approved_by, paid_in_salary_id
    FROM incentives
"""


def _to_incentive(r: dict) -> Incentive:
    return Incentive(
        id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        amount=as_decimal(r["amount"]),
        type=IncentiveType(r["type"]),
        description=r.get("description"),
        remarks=r.get("remarks"),
        status=IncentiveStatus(r["status"]),
        added_by=r.get("added_by"),
        approved_by=r.get("approved_by"),
        paid_in_salary_id=r.get("paid_in_salary_id"),
    )


class MySQLIncentiveRepository(IncentiveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, incentive_id: int) -> Optional[Incentive]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(incentive_id),))
            r = fetchone(cur)
            return _to_incentive(r) if r else None

    def create(self, incentive: Incentive) -> int:
        i = incentive.normalized()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO incentives(employee_id, month, year, amount, type, description, remarks,
                                       status, added_by, approved_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    i.employee_id, i.month, i.year, i.amount, i.type.value, i.description, i.remarks,
                    i.status.value, i.added_by, i.approved_by,
                ),
            )
            return int(cur.lastrowid)

    def set_status(self, incentive_id: int, *, status: IncentiveStatus, approved_by: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE incentives SET status=%s, approved_by=%s WHERE id=%s AND status<>%s",
                (status.value, approved_by, int(incentive_id), IncentiveStatus.PAID.value),
            )
            return cur.rowcount > 0

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[IncentiveStatus] = None,
        for_update: bool = False,
    ) -> Sequence[Incentive]:
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
            return [_to_incentive(r) for r in fetchall(cur)]

    def mark_paid(self, incentive_ids: Sequence[int], *, salary_id: int) -> int:
        if not incentive_ids:
            return 0
        placeholders, ids = in_clause(int(i) for i in incentive_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE incentives SET status=%s, paid_in_salary_id=%s
                WHERE status=%s AND id IN ({placeholders})
                """,
                (IncentiveStatus.PAID.value, int(salary_id), IncentiveStatus.APPROVED.value, *ids),
            )
            return cur.rowcount
