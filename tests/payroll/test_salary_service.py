from __future__ import annotations

from decimal import Decimal

import pytest

from hr_payroll.core.enums import PaymentMode, PaymentStatus
from hr_payroll.core.exceptions import AuthorizationError, BusinessRuleError, NotFoundError
from hr_payroll.payroll.model import ALLOWED_TRANSITIONS
from tests.fakes import ADMIN, HR_DEFAULT, HR_FULL, employee_actor, make_employee


@pytest.fixture
def generated(backend, container):
    emp = backend.employees.add(make_employee())
    salary = container.salary_generator.generate(actor=ADMIN, employee_id=emp.id, month=3, year=2024)
    return emp, salary


def test_paid_is_terminal():
    assert ALLOWED_TRANSITIONS[PaymentStatus.PAID] == frozenset()


def test_mark_paid_fills_payment_fields(backend, container, generated):
    _, salary = generated

    updated = container.salary_service.update_payment_status(
        actor=HR_FULL,
        salary_id=salary.id,
        status="Paid",
        payment_mode="Bank Transfer",
        transaction_id="UTR123",
        payment_date="2024-04-01T10:00:00",
    )

    stored = backend.salaries.get_by_id(salary.id)
    assert stored.payment_status == PaymentStatus.PAID
    assert stored.payment_mode == PaymentMode.BANK_TRANSFER
    assert stored.transaction_id == "UTR123"
    assert stored.approved_by == HR_FULL.user_id
    assert stored.net_salary == salary.net_salary
    assert updated.payment_date.day == 1


def test_paid_salary_cannot_move(container, generated):
    _, salary = generated
    service = container.salary_service
    service.update_payment_status(actor=ADMIN, salary_id=salary.id, status="Paid")

    with pytest.raises(BusinessRuleError) as exc:
        service.update_payment_status(actor=ADMIN, salary_id=salary.id, status="Hold")
    assert exc.value.code == "INVALID_STATUS_TRANSITION"


def test_hold_goes_back_to_pending(container, generated):
    _, salary = generated
    service = container.salary_service
    service.update_payment_status(actor=ADMIN, salary_id=salary.id, status="Hold", remarks="Bank details check")
    back = service.update_payment_status(actor=ADMIN, salary_id=salary.id, status="Pending")
    assert back.payment_status == PaymentStatus.PENDING
    assert back.remarks == "Bank details check"


def test_status_update_needs_salary_permission(container, generated):
    _, salary = generated
    with pytest.raises(AuthorizationError):
        container.salary_service.update_payment_status(actor=HR_DEFAULT, salary_id=salary.id, status="Paid")


def test_employee_reads_only_own_salary(container, generated):
    emp, salary = generated
    service = container.salary_service

    assert service.get_salary(actor=employee_actor(emp.id), salary_id=salary.id).net_salary == salary.net_salary
    with pytest.raises(NotFoundError):
        service.get_salary(actor=employee_actor(emp.id + 1), salary_id=salary.id)
    assert service.list_salaries(actor=employee_actor(emp.id + 1)) == []
    assert [s.id for s in service.list_salaries(actor=ADMIN, month=3, year=2024)] == [salary.id]


def test_salary_dict_uses_camel_case(generated):
    _, salary = generated
    data = salary.to_dict()
    assert data["netSalary"] == float(salary.net_salary)
    assert data["attendanceSummary"]["totalWorkingDays"] == 26
    assert data["paymentStatus"] == "Pending"
    assert Decimal(str(data["grossSalary"])) == salary.gross_salary
