from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Protocol, Sequence

logger = logging.getLogger(__name__)

EMPLOYEE_COLUMNS = (
    "employeeId", "firstName", "middleName", "lastName", "email", "phone",
    "department", "designation", "dateOfJoining", "basicSalary", "status", "syncedAt",
)
SALARY_COLUMNS = (
    "employeeId", "name", "period", "basicSalary", "hra", "otherAllowances", "totalIncentives",
    "grossSalary", "providentFund", "esi", "totalAdvances", "totalDeductions",
    "totalDeductionsAmount", "netSalary", "paymentStatus", "syncedAt",
)
ATTENDANCE_COLUMNS = (
    "employeeId", "name", "date", "status", "checkIn", "checkOut", "workingHours", "nightDuty", "syncedAt",
)


class SheetSync(Protocol):
    """Receives flattened rows of newly created/updated records."""

    def sync_employee(self, employee) -> None:
        raise NotImplementedError

    def sync_salary(self, salary, employee) -> None:
        raise NotImplementedError

    def sync_attendance(self, record, employee) -> None:
        raise NotImplementedError


def employee_row(employee) -> list:
    return [
        employee.employee_code, employee.first_name, employee.middle_name or "", employee.last_name,
        employee.email, employee.phone, employee.department.value, employee.designation.value,
        employee.date_of_joining.isoformat(), str(employee.basic_salary), employee.status.value,
        datetime.utcnow().isoformat(),
    ]


def salary_row(salary, employee) -> list:
    return [
        employee.employee_code, employee.full_name, f"{salary.month}/{salary.year}",
        str(salary.basic_salary), str(salary.hra), str(salary.other_allowances), str(salary.total_incentives),
        str(salary.gross_salary), str(salary.provident_fund), str(salary.esi), str(salary.total_advances),
        str(salary.total_deductions), str(salary.total_deductions_amount), str(salary.net_salary),
        salary.payment_status.value, datetime.utcnow().isoformat(),
    ]


def attendance_row(record, employee) -> list:
    return [
        employee.employee_code if employee else "", employee.full_name if employee else "",
        record.work_date.isoformat(), record.status.value,
        record.check_in_time.isoformat() if record.check_in_time else "",
        record.check_out_time.isoformat() if record.check_out_time else "",
        "" if record.working_hours is None else str(record.working_hours),
        "Yes" if record.is_night_duty else "No",
        datetime.utcnow().isoformat(),
    ]


class CsvSheetSync:
    """Appends one row per event to `<directory>/<Sheet>.csv`."""

    def __init__(self, directory: str | Path):
        self._dir = Path(directory)

    def _append(self, sheet: str, header: Sequence[str], row: list) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._dir / f"{sheet}.csv"
        is_new = not path.exists()
        with path.open("a", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            if is_new:
                writer.writerow(header)
            writer.writerow(row)

    def sync_employee(self, employee) -> None:
        self._append("Employees", EMPLOYEE_COLUMNS, employee_row(employee))

    def sync_salary(self, salary, employee) -> None:
        self._append("Salaries", SALARY_COLUMNS, salary_row(salary, employee))

    def sync_attendance(self, record, employee) -> None:
        self._append("Attendance", ATTENDANCE_COLUMNS, attendance_row(record, employee))


class NullSheetSync:
    def sync_employee(self, employee) -> None:
        logger.debug("Sheet sync skipped - not configured")

    def sync_salary(self, salary, employee) -> None:
        logger.debug("Sheet sync skipped - not configured")

    def sync_attendance(self, record, employee) -> None:
        logger.debug("Sheet sync skipped - not configured")


def best_effort_sync(action: Callable[[], None], *, what: str) -> bool:
    """Run a sync call; failures are logged and never reach the caller."""
    try:
        action()
        return True
    except Exception:
        logger.exception("Spreadsheet sync failed for %s", what)
        return False
