from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from hr_payroll.attendance.aggregator import AttendanceAggregator
from hr_payroll.attendance.model import AttendanceRecord
from hr_payroll.attendance.service import AttendanceService
from hr_payroll.common.datetime_utils import working_days_in_month
from hr_payroll.core.enums import AttendanceStatus, Role
from hr_payroll.core.exceptions import AuthorizationError, BusinessRuleError, NotFoundError, ValidationError
from hr_payroll.users.model import Actor
from tests.fakes import ADMIN, HR_DEFAULT, HR_FULL, employee_actor, make_employee


def _service(backend) -> AttendanceService:
    return AttendanceService(backend.attendance, backend.employees, backend.sheets)


def test_working_hours_are_derived_from_timestamps():
    rec = AttendanceRecord(
        employee_id=1,
        work_date=date(2024, 3, 4),
        status=AttendanceStatus.PRESENT,
        check_in_time=datetime(2024, 3, 4, 9, 0),
        check_out_time=datetime(2024, 3, 4, 17, 30),
        working_hours=Decimal("99"),
    ).normalized()
    assert rec.working_hours == Decimal("8.50")


def test_mark_twice_for_same_date_is_rejected(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)

    service.mark_attendance(actor=HR_DEFAULT, employee_id=emp.id, work_date="2024-03-04", status="Present")
    with pytest.raises(BusinessRuleError) as exc:
        service.mark_attendance(actor=HR_DEFAULT, employee_id=emp.id, work_date="2024-03-04", status="Absent")

    assert exc.value.code == "DUPLICATE_ATTENDANCE"
    assert len(backend.attendance.rows) == 1


def test_distinct_dates_are_independent(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)
    for day in range(4, 9):
        service.mark_attendance(actor=ADMIN, employee_id=emp.id, work_date=date(2024, 3, day), status="Present")
    assert len(backend.attendance.rows) == 5
    assert len(backend.sheets.rows) == 5


def test_mark_requires_attendance_permission(backend):
    emp = backend.employees.add(make_employee())
    hr_without = Actor(user_id=9, role=Role.HR, permissions=frozenset())
    with pytest.raises(AuthorizationError):
        _service(backend).mark_attendance(actor=hr_without, employee_id=emp.id, work_date="2024-03-04", status="Present")
    with pytest.raises(AuthorizationError):
        _service(backend).mark_attendance(
            actor=employee_actor(emp.id), employee_id=emp.id, work_date="2024-03-04", status="Present"
        )


def test_check_out_before_check_in_is_invalid(backend):
    emp = backend.employees.add(make_employee())
    with pytest.raises(ValidationError):
        _service(backend).mark_attendance(
            actor=ADMIN,
            employee_id=emp.id,
            work_date="2024-03-04",
            status="Present",
            check_in="2024-03-04T18:00:00",
            check_out="2024-03-04T09:00:00",
        )


def test_unknown_status_is_invalid(backend):
    emp = backend.employees.add(make_employee())
    with pytest.raises(ValidationError):
        _service(backend).mark_attendance(actor=ADMIN, employee_id=emp.id, work_date="2024-03-04", status="Late")


def test_bulk_marks_continue_past_failures(backend):
    emp = backend.employees.add(make_employee())
    other = backend.employees.add(make_employee(employee_code="NM000002002", aadhaar_number="555566667777"))
    service = _service(backend)
    service.mark_attendance(actor=ADMIN, employee_id=emp.id, work_date="2024-03-04", status="Present")

    result = service.mark_bulk(
        actor=ADMIN,
        work_date="2024-03-04",
        records=[
            {"employeeId": emp.id, "status": "Present"},
            {"employeeId": 999, "status": "Present"},
            {"employeeId": other.id, "status": "Half Day"},
        ],
    )

    assert [r["employee"] for r in result["success"]] == [other.id]
    assert {f["employeeId"] for f in result["failed"]} == {emp.id, 999}


def test_employees_only_list_their_own(backend):
    emp = backend.employees.add(make_employee())
    other = backend.employees.add(make_employee(employee_code="NM000002002", aadhaar_number="555566667777"))
    service = _service(backend)
    service.mark_attendance(actor=ADMIN, employee_id=emp.id, work_date="2024-03-04", status="Present")
    service.mark_attendance(actor=ADMIN, employee_id=other.id, work_date="2024-03-04", status="Present")

    records = service.list_attendance(actor=employee_actor(emp.id), employee_id=other.id)
    assert [r.employee_id for r in records] == [emp.id]


def test_list_range_is_inclusive(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)
    for day in (3, 4, 5, 6):
        service.mark_attendance(actor=ADMIN, employee_id=emp.id, work_date=date(2024, 3, day), status="Present")

    records = service.list_attendance(actor=ADMIN, start_date="2024-03-04", end_date="2024-03-05")
    assert [r.work_date.day for r in records] == [4, 5]


def test_update_recomputes_hours_and_delete_is_admin_only(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)
    rec = service.mark_attendance(actor=ADMIN, employee_id=emp.id, work_date="2024-03-04", status="Present")

    updated = service.update_attendance(
        actor=HR_FULL,
        attendance_id=rec.id,
        changes={"checkIn": "2024-03-04T09:00:00", "checkOut": "2024-03-04T13:00:00", "status": "Half Day"},
    )
    assert updated.working_hours == Decimal("4.00")
    assert updated.status == AttendanceStatus.HALF_DAY

    with pytest.raises(AuthorizationError):
        service.delete_attendance(actor=HR_FULL, attendance_id=rec.id)
    service.delete_attendance(actor=ADMIN, attendance_id=rec.id)
    with pytest.raises(NotFoundError):
        service.delete_attendance(actor=ADMIN, attendance_id=rec.id)


@pytest.mark.parametrize(
    "month, year, expected",
    [
        (2, 2024, 25),  # 29 days, 4 Sundays
        (3, 2024, 26),  # 31 days, 5 Sundays
        (6, 2025, 25),  # 30 days, 5 Sundays
    ],
)
def test_working_days_exclude_sundays(month, year, expected):
    assert working_days_in_month(month, year) == expected


def test_aggregator_counts_each_status(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)
    marks = {
        1: "Present", 2: "Present", 4: "Absent", 5: "Half Day", 6: "Leave", 7: "Holiday",
    }
    for day, status in marks.items():
        service.mark_attendance(
            actor=ADMIN, employee_id=emp.id, work_date=date(2024, 3, day), status=status, is_night_duty=day == 2
        )
    # outside the month
    service.mark_attendance(actor=ADMIN, employee_id=emp.id, work_date=date(2024, 4, 1), status="Present")

    summary = AttendanceAggregator(backend.attendance, backend.employees).summarize(emp.id, 3, 2024)

    assert summary.total_working_days == 26
    assert (summary.present_days, summary.absent_days, summary.half_days) == (2, 1, 1)
    assert (summary.leaves, summary.holidays, summary.night_duty_days) == (1, 1, 1)


def test_aggregator_unknown_employee(backend):
    with pytest.raises(NotFoundError):
        AttendanceAggregator(backend.attendance, backend.employees).summarize(42, 3, 2024)


def test_monthly_summary_is_self_or_staff(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)

    assert service.monthly_summary(actor=employee_actor(emp.id), employee_id=emp.id, month=3, year=2024).present_days == 0
    with pytest.raises(AuthorizationError):
        service.monthly_summary(actor=employee_actor(emp.id + 1), employee_id=emp.id, month=3, year=2024)
