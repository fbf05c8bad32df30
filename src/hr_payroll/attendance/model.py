from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.money import CENT, ZERO
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance mark per employee per calendar date."""

    employee_id: int
    work_date: date
    status: AttendanceStatus
    id: Optional[int] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    working_hours: Optional[Decimal] = None
    is_night_duty: bool = False
    remarks: Optional[str] = None
    marked_by: Optional[int] = None

    def normalized(self) -> "AttendanceRecord":
        """Derive working hours from the two timestamps; drop any supplied value."""
        hours = None
        if self.check_in_time and self.check_out_time:
            seconds = (self.check_out_time - self.check_in_time).total_seconds()
            hours = (Decimal(str(seconds)) / Decimal(3600)).quantize(CENT)
        return replace(self, working_hours=hours)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee": self.employee_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "checkIn": self.check_in_time.isoformat() if self.check_in_time else None,
            "checkOut": self.check_out_time.isoformat() if self.check_out_time else None,
            "workingHours": None if self.working_hours is None else float(self.working_hours),
            "isNightDuty": self.is_night_duty,
            "remarks": self.remarks,
            "markedBy": self.marked_by,
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """Monthly roll-up; snapshotted into every Salary record."""

    total_working_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    half_days: int = 0
    leaves: int = 0
    holidays: int = 0
    night_duty_days: int = 0
    total_working_hours: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "totalWorkingDays": self.total_working_days,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
            "halfDays": self.half_days,
            "leaves": self.leaves,
            "holidays": self.holidays,
            "nightDutyDays": self.night_duty_days,
            "totalWorkingHours": float(self.total_working_hours),
        }
