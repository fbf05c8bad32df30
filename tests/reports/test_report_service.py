from __future__ import annotations

import io
from datetime import date
from decimal import Decimal

import pandas as pd
import pytest

from hr_payroll.core.enums import Department, EmployeeStatus, SalaryType
from hr_payroll.core.exceptions import AuthorizationError, ValidationError
from hr_payroll.payroll.policy import PayrollPolicy
from hr_payroll.reports.export import SALARY_REGISTER_COLUMNS, rows_to_csv, salary_register_rows, salary_register_xlsx
from hr_payroll.reports.service import ReportService
from tests.fakes import ADMIN, HR_DEFAULT, FakeBackend, employee_actor, make_employee


@pytest.fixture
def payroll(backend, container):
    """Two employees with March 2024 salaries generated."""
    a = backend.employees.add(make_employee(basic_salary=Decimal("15000"), hra=Decimal("6000")))
    b = backend.employees.add(
        make_employee(
            employee_code="NM000002002",
            first_name="Meena",
            aadhaar_number="555566667777",
            department=Department.SALES,
            salary_type=SalaryType.DAILY,
            basic_salary=Decimal("600"),
        )
    )
    for day in (4, 5, 6):
        container.attendance_service.mark_attendance(
            actor=ADMIN, employee_id=b.id, work_date=date(2024, 3, day), status="Present"
        )
    container.attendance_service.mark_attendance(
        actor=ADMIN, employee_id=a.id, work_date=date(2024, 3, 4), status="Absent"
    )
    for e in (a, b):
        container.salary_generator.generate(actor=ADMIN, employee_id=e.id, month=3, year=2024)
    return a, b


def test_salary_report_totals(container, payroll):
    report = container.report_service.salary_report(actor=HR_DEFAULT, month=3, year=2024)

    assert report.totals["count"] == 2
    assert [r["employee"]["id"] for r in report.rows] == ["NM000001001", "NM000002002"]
    assert report.totals["totalNetSalary"] == pytest.approx(sum(r["netSalary"] for r in report.rows))

    sales = container.report_service.salary_report(actor=ADMIN, month=3, year=2024, department="Sales")
    assert [r["employee"]["name"] for r in sales.rows] == ["Meena Kumar"]


def test_salary_report_needs_period(container):
    with pytest.raises(ValidationError):
        container.report_service.salary_report(actor=ADMIN, month=None, year=2024)


def test_reports_are_staff_only(container):
    with pytest.raises(AuthorizationError):
        container.report_service.dashboard_metrics(actor=employee_actor(1))


def test_pf_esi_report_computes_employer_share(container, payroll):
    report = container.report_service.pf_esi_report(actor=ADMIN, month=3, year=2024)

    monthly = next(r for r in report.rows if r["employeeId"] == "NM000001001")
    daily = next(r for r in report.rows if r["employeeId"] == "NM000002002")
    assert monthly["pfEmployee"] == 1800.0
    assert monthly["pfEmployer"] == 1800.0
    assert monthly["esi"] == 157.5
    assert daily["pfEmployee"] == 0.0
    assert daily["pfEmployer"] == 0.0
    assert report.totals["totalPFEmployer"] == 1800.0


def test_pf_employer_rate_follows_policy():
    backend = FakeBackend(policy=PayrollPolicy.from_mapping({"pf_employer_rate": "0.1361"}))
    container = backend.container()
    emp = backend.employees.add(make_employee(basic_salary=Decimal("10000")))
    container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, month=3, year=2024)

    (row,) = container.report_service.pf_esi_report(actor=ADMIN, month=3, year=2024).rows
    assert row["pfEmployee"] == 1200.0
    assert row["pfEmployer"] == 1361.0


def test_attendance_report_is_inclusive(container, payroll):
    report = container.report_service.attendance_report(actor=ADMIN, start_date="2024-03-04", end_date="2024-03-06")
    by_code = {r["employee"]["id"]: r for r in report.rows}

    assert by_code["NM000002002"]["present"] == 3
    assert by_code["NM000001001"]["absent"] == 1

    narrow = container.report_service.attendance_report(
        actor=ADMIN, start_date="2024-03-05", end_date="2024-03-05", employee_code="NM000002002"
    )
    assert [r["present"] for r in narrow.rows] == [1]


def test_employee_report_groups_by_department(backend, container):
    backend.employees.add(make_employee(basic_salary=Decimal("10000")))
    backend.employees.add(make_employee(employee_code="NM2", aadhaar_number="2", basic_salary=Decimal("20000")))
    backend.employees.add(
        make_employee(employee_code="NM3", aadhaar_number="3", department=Department.SALES, basic_salary=Decimal("9000"))
    )

    report = container.report_service.employee_report(actor=ADMIN)

    assert report.totals["totalCount"] == 3
    assert report.totals["byDepartment"] == [
        {"_id": "Bodyshop", "count": 2, "avgSalary": 15000.0, "totalSalary": 30000.0},
        {"_id": "Sales", "count": 1, "avgSalary": 9000.0, "totalSalary": 9000.0},
    ]


def test_advance_report_totals(backend, container):
    emp = backend.employees.add(make_employee())
    advances = container.advance_service
    a = advances.create_advance(actor=ADMIN, data={"employee": emp.id, "amount": 1000, "reason": "x"})
    advances.create_advance(actor=ADMIN, data={"employee": emp.id, "amount": 500, "reason": "y"})
    advances.record_repayment(actor=ADMIN, advance_id=a.id, month=1, year=2024, amount=400)

    report = container.report_service.advance_report(actor=ADMIN, employee_code=emp.employee_code)

    assert report.totals == {"totalAmount": 1500.0, "totalPaid": 400.0, "totalRemaining": 1100.0}


def test_incentive_and_increment_reports(backend, container):
    emp = backend.employees.add(make_employee(basic_salary=Decimal("20000")))
    container.adjustment_service.add_incentive(
        actor=ADMIN, data={"employee": emp.id, "month": 3, "year": 2024, "amount": 300, "type": "Festival"}
    )
    container.adjustment_service.add_incentive(
        actor=ADMIN, data={"employee": emp.id, "month": 3, "year": 2024, "amount": 200, "type": "Overtime"}
    )
    container.increment_service.apply_increment(
        actor=ADMIN, employee_id=emp.id, effective_date="2024-04-01", new_salary=22000, reason="Annual"
    )

    festival = container.report_service.incentive_report(actor=ADMIN, type="Festival")
    assert festival.totals == {"totalAmount": 300.0}

    increments = container.report_service.increment_report(actor=ADMIN, year=2024)
    assert increments.totals == {"totalIncrementAmount": 2000.0}
    assert increments.rows[0]["incrementPercentage"] == 10.0


def test_dashboard_metrics(backend):
    backend.employees.add(make_employee())
    backend.employees.add(
        make_employee(employee_code="NM2", aadhaar_number="2", pan_number=None, status=EmployeeStatus.ACTIVE)
    )
    container = backend.container()
    service = ReportService(
        employees=backend.employees,
        attendance=backend.attendance,
        salaries=backend.salaries,
        incentives=backend.incentives,
        deductions=backend.deductions,
        advances=backend.advances,
        increments=backend.increments,
        today=lambda: date(2024, 3, 4),
    )
    container.attendance_service.mark_attendance(actor=ADMIN, employee_id=1, work_date="2024-03-04", status="Present")
    container.attendance_service.mark_attendance(actor=ADMIN, employee_id=2, work_date="2024-03-04", status="Absent")
    container.salary_generator.generate(actor=ADMIN, employee_id=1, month=3, year=2024)
    container.advance_service.request_advance(actor=ADMIN, data={"employee": 1, "amount": 100, "reason": "x"})

    metrics = service.dashboard_metrics(actor=ADMIN)

    assert metrics == {
        "totalEmployees": 2,
        "presentToday": 1,
        "absentToday": 1,
        "incompleteProfiles": 1,
        "pendingSalary": 1,
        "pendingAdvances": 1,
    }

    summary = service.monthly_summary(actor=ADMIN)
    assert summary["attendance"] == [{"_id": "Absent", "count": 1}, {"_id": "Present", "count": 1}]
    assert summary["salary"][0]["_id"] == "Pending"


def test_salary_register_exports(container, payroll):
    report = container.report_service.salary_report(actor=ADMIN, month=3, year=2024)

    flat = salary_register_rows(report.rows)
    assert flat[0]["employeeId"] == "NM000001001"
    assert flat[0]["department"] == "Bodyshop"

    csv_bytes = rows_to_csv(flat, list(SALARY_REGISTER_COLUMNS))
    assert csv_bytes.startswith(b"\xef\xbb\xbf")
    assert b"NM000002002" in csv_bytes

    frame = pd.read_excel(io.BytesIO(salary_register_xlsx(report.rows)), engine="openpyxl")
    assert list(frame.columns) == list(SALARY_REGISTER_COLUMNS.values())
    assert len(frame) == 2


def test_report_rows_carry_the_employee_reference(backend, container, payroll):
    a, _ = payroll
    container.adjustment_service.add_incentive(
        actor=ADMIN, data={"employee": a.id, "month": 3, "year": 2024, "amount": 300, "type": "Festival"}
    )
    container.adjustment_service.add_deduction(
        actor=ADMIN, data={"employee": a.id, "month": 3, "year": 2024, "amount": 50, "type": "Fine", "reason": "Late"}
    )
    container.advance_service.create_advance(actor=ADMIN, data={"employee": a.id, "amount": 900, "reason": "x"})
    container.increment_service.apply_increment(
        actor=ADMIN, employee_id=a.id, effective_date="2024-04-01", new_salary=16500, reason="Annual"
    )
    reports = container.report_service
    expected = {"id": "NM000001001", "name": "Ravi Kumar", "department": "Bodyshop", "designation": "Denter"}

    for report in (
        reports.salary_report(actor=ADMIN, month=3, year=2024, department="Bodyshop"),
        reports.incentive_report(actor=ADMIN, month=3, year=2024),
        reports.deduction_report(actor=ADMIN, month=3, year=2024),
        reports.advance_report(actor=ADMIN),
        reports.increment_report(actor=ADMIN, year=2024),
    ):
        assert [r["employee"] for r in report.rows] == [expected]
