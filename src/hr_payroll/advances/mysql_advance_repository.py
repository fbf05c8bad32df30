from __future__ import annotations

from collections import defaultdict
from typing import Optional, Sequence

from ..core.enums import ApprovalStatus, RepaymentMode, RepaymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, in_clause
from .model import Advance, Repayment
from .repository import AdvanceRepository

_SELECT = """
    SELECT id, employee_id, request_date, amount, reason, approval_status, approved_by, approval_date,
           remarks, repayment_status, repayment_mode, installments, installment_amount,
           paid_amount, remaining_amount
    FROM advances
"""


def _to_advance(r: dict, repayments: tuple[Repayment, ...] = ()) -> Advance:
    return Advance(
        id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        request_date=r["request_date"],
        amount=as_decimal(r["amount"]),
        reason=r["reason"],
        approval_status=ApprovalStatus(r["approval_status"]),
        approved_by=r.get("approved_by"),
        approval_date=r.get("approval_date"),
        remarks=r.get("remarks"),
        repayment_status=RepaymentStatus(r["repayment_status"]),
        repayment_mode=RepaymentMode(r["repayment_mode"]),
        installments=int(r["installments"]),
        installment_amount=as_decimal(r["installment_amount"]),
        paid_amount=as_decimal(r["paid_amount"]),
        remaining_amount=as_decimal(r["remaining_amount"]),
        repayments=repayments,
    )


class MySQLAdvanceRepository(AdvanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _with_repayments(self, cur, rows: list[dict]) -> list[Advance]:
        if not rows:
            return []
        placeholders, ids = in_clause(int(r["id"]) for r in rows)
        cur.execute(
            f"""
            SELECT id, advance_id, month, year, amount, salary_id, paid_date
            FROM advance_repayments
            WHERE advance_id IN ({placeholders})
            ORDER BY paid_date, id
            """,
            ids,
        )
        by_advance: dict[int, list[Repayment]] = defaultdict(list)
        for p in fetchall(cur):
            by_advance[int(p["advance_id"])].append(
                Repayment(
                    id=int(p["id"]),
                    month=int(p["month"]),
                    year=int(p["year"]),
                    amount=as_decimal(p["amount"]),
                    salary_id=p.get("salary_id"),
                    paid_date=p["paid_date"],
                )
            )
        return [_to_advance(r, tuple(by_advance[int(r["id"])])) for r in rows]

    def get_by_id(self, advance_id: int) -> Optional[Advance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(advance_id),))
            r = fetchone(cur)
            if not r:
                return None
            return self._with_repayments(cur, [r])[0]

    def create(self, advance: Advance) -> int:
        a = advance.normalized()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO advances(employee_id, request_date, amount, reason, approval_status, approved_by,
                                     approval_date, remarks, repayment_status, repayment_mode, installments,
                                     installment_amount, paid_amount, remaining_amount)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    a.employee_id, a.request_date, a.amount, a.reason, a.approval_status.value, a.approved_by,
                    a.approval_date, a.remarks, a.repayment_status.value, a.repayment_mode.value, a.installments,
                    a.installment_amount, a.paid_amount, a.remaining_amount,
                ),
            )
            return int(cur.lastrowid)

    def update(self, advance: Advance) -> bool:
        a = advance.normalized()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE advances
                SET approval_status=%s, approved_by=%s, approval_date=%s, remarks=%s,
                    repayment_status=%s, repayment_mode=%s, installments=%s,
                    installment_amount=%s, paid_amount=%s, remaining_amount=%s
                WHERE id=%s
                """,
                (
                    a.approval_status.value, a.approved_by, a.approval_date, a.remarks,
                    a.repayment_status.value, a.repayment_mode.value, a.installments,
                    a.installment_amount, a.paid_amount, a.remaining_amount,
                    int(a.id),
                ),
            )
            return cur.rowcount > 0

    def add_repayment(self, advance_id: int, repayment: Repayment) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO advance_repayments(advance_id, month, year, amount, salary_id, paid_date)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(advance_id), repayment.month, repayment.year, repayment.amount,
                    repayment.salary_id, repayment.paid_date,
                ),
            )
            return int(cur.lastrowid)

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        approval_status: Optional[ApprovalStatus] = None,
        repayment_status: Optional[RepaymentStatus] = None,
    ) -> Sequence[Advance]:
        where: list[str] = []
        params: list = []
        if employee_id:
            where.append("employee_id=%s")
            params.append(int(employee_id))
        if approval_status:
            where.append("approval_status=%s")
            params.append(approval_status.value)
        if repayment_status:
            where.append("repayment_status=%s")
            params.append(repayment_status.value)

        sql = _SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY request_date DESC, id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return self._with_repayments(cur, fetchall(cur))

    def list_outstanding(self, employee_id: int, *, for_update: bool = False) -> Sequence[Advance]:
        sql = _SELECT + """
            WHERE employee_id=%s AND approval_status=%s AND repayment_mode=%s
              AND repayment_status IN (%s, %s)
            ORDER BY request_date, id
        """
        if for_update:
            sql += " FOR UPDATE"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                sql,
                (
                    int(employee_id),
                    ApprovalStatus.APPROVED.value,
                    RepaymentMode.SALARY_DEDUCTION.value,
                    RepaymentStatus.NOT_STARTED.value,
                    RepaymentStatus.IN_PROGRESS.value,
                ),
            )
            return self._with_repayments(cur, fetchall(cur))
