from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, Department
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_optional_decimal, db_cursor, duplicate_key_guard, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT a.id, a.employee_id, a.work_date, a.status, a.check_in_time, a.check_out_time,
           a.working_hours, a.is_night_duty, a.remarks, a.marked_by
    FROM attendance_records a
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        working_hours=as_optional_decimal(r.get("working_hours")),
        is_night_duty=bool(r.get("is_night_duty")),
        remarks=r.get("remarks"),
        marked_by=r.get("marked_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, record: AttendanceRecord) -> int:
        record = record.normalized()
        with duplicate_key_guard("Attendance already marked for this date", code="DUPLICATE_ATTENDANCE"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(employee_id, work_date, status, check_in_time, check_out_time,
                                                   working_hours, is_night_duty, remarks, marked_by)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.employee_id,
                        record.work_date,
                        record.status.value,
                        record.check_in_time,
                        record.check_out_time,
                        record.working_hours,
                        int(record.is_night_duty),
                        record.remarks,
                        record.marked_by,
                    ),
                )
                return int(cur.lastrowid)

    def update(self, record: AttendanceRecord) -> bool:
        record = record.normalized()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, check_in_time=%s, check_out_time=%s, working_hours=%s,
                    is_night_duty=%s, remarks=%s, marked_by=%s
                WHERE id=%s
                """,
                (
                    record.status.value,
                    record.check_in_time,
                    record.check_out_time,
                    record.working_hours,
                    int(record.is_night_duty),
                    record.remarks,
                    record.marked_by,
                    int(record.id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
        department: Optional[Department] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        sql = _SELECT
        where: list[str] = []
        params: list = []

        if department:
            sql += " JOIN employees e ON e.id = a.employee_id"
            where.append("e.department=%s")
            params.append(department.value)
        if employee_id:
            where.append("a.employee_id=%s")
            params.append(int(employee_id))
        if start_date:
            where.append("a.work_date >= %s")
            params.append(start_date)
        if end_date:
            where.append("a.work_date < %s")
            params.append(end_date)
        if status:
            where.append("a.status=%s")
            params.append(status.value)

        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY a.work_date DESC, a.employee_id"
        if limit:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]
