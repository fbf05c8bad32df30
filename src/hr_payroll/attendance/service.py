from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.validators import optional_enum, require_enum, require_int
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import AttendanceStatus, Department, Permission, Role
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..integrations.sheets import NullSheetSync, SheetSync, best_effort_sync
from ..users.authorization import require_permission, require_roles, require_self_or_staff, scope_employee_filter
from ..users.model import Actor
from .aggregator import AttendanceAggregator
from .model import AttendanceRecord, AttendanceSummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _check_times(check_in: Optional[datetime], check_out: Optional[datetime]) -> None:
    if check_in and check_out and check_out < check_in:
        raise ValidationError("Check-out time cannot be before check-in time", fields={"checkOut": "before checkIn"})


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        sheets: Optional[SheetSync] = None,
        *,
        aggregator: Optional[AttendanceAggregator] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._sheets = sheets or NullSheetSync()
        self._aggregator = aggregator or AttendanceAggregator(attendance, employees)

    def mark_attendance(
        self,
        *,
        actor: Actor,
        employee_id: int,
        work_date: date | str,
        status: str,
        check_in: Optional[datetime | str] = None,
        check_out: Optional[datetime | str] = None,
        is_night_duty: bool = False,
        remarks: Optional[str] = None,
    ) -> AttendanceRecord:
        require_permission(actor, Permission.CAN_MANAGE_ATTENDANCE)

        employee_id = require_int(employee_id, "employee", min_value=1)
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")

        day = work_date if isinstance(work_date, date) else parse_iso_date(work_date)
        check_in = check_in if isinstance(check_in, datetime) or check_in is None else parse_iso_datetime(check_in)
        check_out = check_out if isinstance(check_out, datetime) or check_out is None else parse_iso_datetime(check_out)
        _check_times(check_in, check_out)

        record = AttendanceRecord(
            employee_id=employee_id,
            work_date=day,
            status=require_enum(status, AttendanceStatus, "status"),
            check_in_time=check_in,
            check_out_time=check_out,
            is_night_duty=bool(is_night_duty),
            remarks=(remarks or "").strip() or None,
            marked_by=actor.user_id,
        ).normalized()

        # The unique key on (employee, date) rejects a second mark atomically.
        new_id = self._attendance.create(record)
        record = replace(record, id=new_id)

        best_effort_sync(
            lambda: self._sheets.sync_attendance(record, employee),
            what=f"attendance {employee.employee_code} {day.isoformat()}",
        )
        return record

    def mark_bulk(self, *, actor: Actor, work_date: date | str, records: list[dict[str, Any]]) -> dict:
        """Mark many employees for one date; one bad entry never stops the rest."""
        require_permission(actor, Permission.CAN_MANAGE_ATTENDANCE)
        day = work_date if isinstance(work_date, date) else parse_iso_date(work_date)

        results: dict[str, list] = {"success": [], "failed": []}
        for item in records or []:
            try:
                rec = self.mark_attendance(
                    actor=actor,
                    employee_id=item.get("employeeId"),
                    work_date=day,
                    status=item.get("status"),
                    check_in=item.get("checkIn"),
                    check_out=item.get("checkOut"),
                    is_night_duty=bool(item.get("isNightDuty", False)),
                    remarks=item.get("remarks"),
                )
                results["success"].append(rec.to_dict())
            except DomainError as e:
                results["failed"].append({"employeeId": item.get("employeeId"), "error": e.message})

        logger.info(
            "Bulk attendance for %s: %d marked, %d failed",
            day.isoformat(), len(results["success"]), len(results["failed"]),
        )
        return results

    def update_attendance(self, *, actor: Actor, attendance_id: int, changes: dict[str, Any]) -> AttendanceRecord:
        require_permission(actor, Permission.CAN_MANAGE_ATTENDANCE)
        current = self._attendance.get_by_id(int(attendance_id))
        if not current:
            raise NotFoundError("Attendance record not found")

        fields: dict[str, Any] = {"marked_by": actor.user_id}
        if "status" in changes:
            fields["status"] = require_enum(changes["status"], AttendanceStatus, "status")
        if "checkIn" in changes:
            fields["check_in_time"] = parse_iso_datetime(changes["checkIn"])
        if "checkOut" in changes:
            fields["check_out_time"] = parse_iso_datetime(changes["checkOut"])
        if "isNightDuty" in changes:
            fields["is_night_duty"] = bool(changes["isNightDuty"])
        if "remarks" in changes:
            fields["remarks"] = (changes["remarks"] or "").strip() or None

        updated = replace(current, **fields).normalized()
        _check_times(updated.check_in_time, updated.check_out_time)
        self._attendance.update(updated)
        return updated

    def delete_attendance(self, *, actor: Actor, attendance_id: int) -> None:
        require_roles(actor, Role.ADMIN)
        if not self._attendance.delete(int(attendance_id)):
            raise NotFoundError("Attendance record not found")

    def list_attendance(
        self,
        *,
        actor: Actor,
        employee_id: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        status: Optional[str] = None,
        department: Optional[str] = None,
    ) -> list[AttendanceRecord]:
        """Date range is inclusive on both ends for callers."""
        employee_id = scope_employee_filter(actor, int(employee_id) if employee_id else None)
        start = parse_iso_date(start_date) if start_date else None
        end = parse_iso_date(end_date) if end_date else None
        if start and end and end < start:
            raise ValidationError("endDate must not be before startDate")

        end_exclusive = date.fromordinal(end.toordinal() + 1) if end else None
        return list(
            self._attendance.list(
                employee_id=employee_id,
                start_date=start,
                end_date=end_exclusive,
                status=optional_enum(status, AttendanceStatus, "status"),
                department=optional_enum(department, Department, "department"),
                limit=DEFAULT_LIST_LIMIT if not (start or end) else None,
            )
        )

    def monthly_summary(self, *, actor: Actor, employee_id: int, month: int, year: int) -> AttendanceSummary:
        require_self_or_staff(actor, int(employee_id))
        return self._aggregator.summarize(int(employee_id), month, year)
