from __future__ import annotations

from collections import Counter
from typing import Optional

from ..common.datetime_utils import month_bounds, working_days_in_month
from ..common.money import ZERO
from ..common.validators import require_period
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError
from ..employees.repository import EmployeeRepository
from .model import AttendanceSummary
from .repository import AttendanceRepository


class AttendanceAggregator:
    """Summarizes one employee's daily marks for a calendar month. Read only."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: Optional[EmployeeRepository] = None,
        *,
        working_week_days: int = 6,
    ):
        self._attendance = attendance
        self._employees = employees
        self._week_days = int(working_week_days)

    def summarize(self, employee_id: int, month: int, year: int) -> AttendanceSummary:
        month, year = require_period(month, year)
        if self._employees is not None and self._employees.get_by_id(int(employee_id)) is None:
            raise NotFoundError("Employee not found")

        start, end = month_bounds(month, year)
        records = self._attendance.list(employee_id=int(employee_id), start_date=start, end_date=end)

        by_status = Counter(r.status for r in records)
        hours = sum((r.working_hours for r in records if r.working_hours is not None), ZERO)

        return AttendanceSummary(
            total_working_days=working_days_in_month(month, year, week_days=self._week_days),
            present_days=by_status[AttendanceStatus.PRESENT],
            absent_days=by_status[AttendanceStatus.ABSENT],
            half_days=by_status[AttendanceStatus.HALF_DAY],
            leaves=by_status[AttendanceStatus.LEAVE],
            holidays=by_status[AttendanceStatus.HOLIDAY],
            night_duty_days=sum(1 for r in records if r.is_night_duty),
            total_working_hours=hours,
        )
