from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from hr_payroll.attendance.aggregator import AttendanceAggregator
from hr_payroll.core.enums import (
    AttendanceStatus,
    DeductionStatus,
    IncentiveStatus,
    RepaymentMode,
    RepaymentStatus,
    SalaryType,
)
from hr_payroll.core.exceptions import AuthorizationError, BusinessRuleError, DuplicateError, NotFoundError
from hr_payroll.employees.model import EmployeeDocuments
from hr_payroll.payroll.generator import SalaryGenerator
from tests.fakes import ADMIN, HR_DEFAULT, HR_FULL, make_employee

MARCH = dict(month=3, year=2024)


def _mark(container, employee_id, day, status="Present", night=False):
    container.attendance_service.mark_attendance(
        actor=ADMIN, employee_id=employee_id, work_date=date(2024, 3, day), status=status, is_night_duty=night
    )


def _seed_adjustments(container, employee_id):
    adjustments = container.adjustment_service
    adjustments.add_incentive(
        actor=ADMIN, data={"employee": employee_id, **MARCH, "amount": 1000, "type": "Performance"}
    )
    adjustments.add_incentive(
        actor=ADMIN, data={"employee": employee_id, **MARCH, "amount": 700, "type": "Other", "status": "Pending"}
    )
    adjustments.add_deduction(
        actor=ADMIN, data={"employee": employee_id, **MARCH, "amount": 250, "type": "Fine", "reason": "Late"}
    )
    return container.advance_service.create_advance(
        actor=ADMIN, data={"employee": employee_id, "amount": 3000, "reason": "Medical", "installments": 2}
    )


def test_monthly_generation_consumes_components(backend, container):
    emp = backend.employees.add(make_employee(basic_salary=Decimal("15000"), hra=Decimal("6000")))
    _mark(container, emp.id, 4, night=True)
    _mark(container, emp.id, 5, night=True)
    advance = _seed_adjustments(container, emp.id)

    salary = container.salary_generator.generate(actor=HR_FULL, employee_id=emp.id, **MARCH)

    assert salary.basic_salary == Decimal("15000.00")
    assert salary.hra == Decimal("6000.00")
    assert salary.night_duty_allowance == Decimal("400.00")
    assert salary.total_incentives == Decimal("1000.00")
    assert salary.provident_fund == Decimal("1800.00")
    assert salary.esi == Decimal("157.50")
    assert salary.total_advances == Decimal("1500")
    assert salary.total_deductions == Decimal("250.00")
    assert salary.gross_salary == Decimal("22400.00")
    assert salary.total_deductions_amount == Decimal("3707.50")
    assert salary.net_salary == Decimal("18692.50")
    assert salary.attendance.present_days == 2
    assert salary.attendance.total_working_days == 26
    assert salary.generated_by == HR_FULL.user_id

    paid = [i for i in backend.incentives.rows.values() if i.status == IncentiveStatus.PAID]
    assert [i.paid_in_salary_id for i in paid] == [salary.id]
    pending = [i for i in backend.incentives.rows.values() if i.status == IncentiveStatus.PENDING]
    assert len(pending) == 1
    deduction = next(iter(backend.deductions.rows.values()))
    assert deduction.status == DeductionStatus.DEDUCTED
    assert deduction.deducted_in_salary_id == salary.id

    stored_advance = backend.advances.get_by_id(advance.id)
    assert stored_advance.paid_amount == Decimal("1500")
    assert stored_advance.repayment_status == RepaymentStatus.IN_PROGRESS
    assert [(r.month, r.year, r.amount, r.salary_id) for r in stored_advance.repayments] == [
        (3, 2024, Decimal("1500.00"), salary.id)
    ]
    assert backend.sheets.rows[-1][0] == "Salaries"


def test_daily_generation(backend, container):
    emp = backend.employees.add(make_employee(salary_type=SalaryType.DAILY, basic_salary=Decimal("500")))
    for day in range(1, 21):
        if date(2024, 3, day).weekday() != 6:
            _mark(container, emp.id, day)
    _mark(container, emp.id, 21, AttendanceStatus.HALF_DAY.value)
    _mark(container, emp.id, 22, AttendanceStatus.HALF_DAY.value)

    salary = container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)

    presents = sum(1 for d in range(1, 21) if date(2024, 3, d).weekday() != 6)
    assert salary.attendance.present_days == presents
    assert salary.basic_salary == Decimal(500) * (presents + 1)
    assert salary.hra == 0
    assert salary.provident_fund == 0


def test_second_generation_for_same_period_is_rejected(backend, container):
    emp = backend.employees.add(make_employee())
    container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)

    with pytest.raises(DuplicateError) as exc:
        container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)

    assert exc.value.code == "DUPLICATE_SALARY"
    assert len(backend.salaries.rows) == 1


def test_incomplete_profile_blocks_generation(backend, container):
    emp = backend.employees.add(make_employee(pan_number=None, bank_account_number=None))
    advance = _seed_adjustments(container, emp.id)

    with pytest.raises(BusinessRuleError) as exc:
        container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)

    assert exc.value.code == "INCOMPLETE_PROFILE"
    assert exc.value.to_dict()["missingFields"] == ["PAN Number", "Bank Account Number"]
    assert backend.salaries.rows == {}
    assert backend.advances.get_by_id(advance.id).paid_amount == 0


def test_unknown_employee_is_not_found(container):
    with pytest.raises(NotFoundError):
        container.salary_generator.generate(actor=ADMIN, employee_id=404, **MARCH)


def test_generation_needs_salary_permission(backend, container):
    emp = backend.employees.add(make_employee())
    with pytest.raises(AuthorizationError):
        container.salary_generator.generate(actor=HR_DEFAULT, employee_id=emp.id, **MARCH)


def test_concurrent_insert_rolls_back_advance_repayments(backend, container):
    """Another run won the unique key between the pre-check and the insert."""
    emp = backend.employees.add(make_employee())
    advance = _seed_adjustments(container, emp.id)
    backend.salaries.fail_on_create = DuplicateError("Salary already generated for this month", code="DUPLICATE_SALARY")

    with pytest.raises(DuplicateError):
        container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)

    stored = backend.advances.get_by_id(advance.id)
    assert stored.paid_amount == 0
    assert stored.repayments == ()
    assert all(i.status != IncentiveStatus.PAID for i in backend.incentives.rows.values())
    assert backend.db.rollbacks == 1


def test_failure_after_insert_rolls_back_the_salary(backend, container, monkeypatch):
    emp = backend.employees.add(make_employee())
    _seed_adjustments(container, emp.id)

    def broken(ids, *, salary_id):
        raise RuntimeError("lost connection")

    monkeypatch.setattr(backend.deductions, "mark_deducted", broken)
    with pytest.raises(RuntimeError):
        container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)

    assert backend.salaries.rows == {}
    assert all(a.paid_amount == 0 for a in backend.advances.rows.values())


def test_cash_advances_are_not_deducted(backend, container):
    emp = backend.employees.add(make_employee())
    container.advance_service.create_advance(
        actor=ADMIN,
        data={"employee": emp.id, "amount": 1000, "reason": "x", "repaymentMode": RepaymentMode.CASH.value},
    )
    salary = container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)
    assert salary.total_advances == 0


def test_advance_is_fully_repaid_over_successive_runs(backend, container):
    emp = backend.employees.add(make_employee())
    advance = container.advance_service.create_advance(
        actor=ADMIN, data={"employee": emp.id, "amount": 1000, "reason": "x", "installments": 3}
    )

    totals = [
        container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, month=m, year=2024).total_advances
        for m in (1, 2, 3, 4)
    ]

    assert totals == [Decimal("334"), Decimal("334"), Decimal("334"), 0]
    stored = backend.advances.get_by_id(advance.id)
    assert stored.remaining_amount == Decimal("-2")
    assert stored.repayment_status == RepaymentStatus.COMPLETED


def test_salary_sync_failure_is_swallowed(backend, container):
    emp = backend.employees.add(make_employee())
    backend.sheets.fail = True
    salary = container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)
    assert backend.salaries.get_by_id(salary.id) is not None


def test_generated_record_keeps_clock_time_on_repayments(backend):
    emp = backend.employees.add(make_employee())
    container = backend.container()
    container.advance_service.create_advance(actor=ADMIN, data={"employee": emp.id, "amount": 100, "reason": "x"})
    stamp = datetime(2024, 3, 31, 18, 0)
    generator = SalaryGenerator(
        employees=backend.employees,
        salaries=backend.salaries,
        incentives=backend.incentives,
        deductions=backend.deductions,
        advances=backend.advances,
        aggregator=AttendanceAggregator(backend.attendance),
        tx=backend.db,
        clock=lambda: stamp,
    )

    generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)

    (adv,) = backend.advances.rows.values()
    assert adv.repayments[0].paid_date == stamp


def test_missing_ifsc_does_not_block_generation(backend, container):
    emp = backend.employees.add(make_employee(ifsc_code=None))
    assert emp.profile_status.completion_percentage == 88

    salary = container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)

    assert backend.salaries.get_by_id(salary.id) is not None


@pytest.mark.parametrize(
    "overrides, label",
    [
        ({"aadhaar_number": None}, "Aadhaar Number"),
        ({"pan_number": None}, "PAN Number"),
        ({"bank_account_number": None}, "Bank Account Number"),
        ({"documents": EmployeeDocuments(pan_card="/uploads/p.pdf")}, "Aadhaar Card Document"),
        ({"documents": EmployeeDocuments(aadhaar_card="/uploads/a.pdf")}, "PAN Card Document"),
    ],
)
def test_rejection_names_the_missing_field(backend, container, overrides, label):
    emp = backend.employees.add(make_employee(**overrides))

    with pytest.raises(BusinessRuleError) as exc:
        container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, **MARCH)

    assert exc.value.to_dict()["missingFields"] == [label]
    assert backend.salaries.rows == {}
