from __future__ import annotations

from decimal import Decimal

import pytest

from hr_payroll.advances.service import AdvanceService
from hr_payroll.core.enums import ApprovalStatus, RepaymentStatus
from hr_payroll.core.exceptions import AuthorizationError, BusinessRuleError, NotFoundError
from tests.fakes import ADMIN, HR_DEFAULT, employee_actor, make_employee


def _service(backend) -> AdvanceService:
    return AdvanceService(backend.advances, backend.employees, backend.db)


def test_staff_advance_is_approved_with_derived_installment(backend):
    emp = backend.employees.add(make_employee())
    adv = _service(backend).create_advance(
        actor=ADMIN, data={"employee": emp.id, "amount": 9000, "reason": "Wedding", "installments": 4}
    )

    assert adv.approval_status == ApprovalStatus.APPROVED
    assert adv.installment_amount == Decimal("2250")
    assert backend.advances.get_by_id(adv.id).remaining_amount == Decimal("9000")


def test_hr_without_salary_permission_cannot_grant(backend):
    emp = backend.employees.add(make_employee())
    with pytest.raises(AuthorizationError):
        _service(backend).create_advance(actor=HR_DEFAULT, data={"employee": emp.id, "amount": 1, "reason": "x"})


def test_employee_request_is_pending_and_for_self(backend):
    emp = backend.employees.add(make_employee())
    other = backend.employees.add(make_employee(employee_code="NM000002002", aadhaar_number="555566667777"))

    adv = _service(backend).request_advance(
        actor=employee_actor(emp.id), data={"employee": other.id, "amount": 3000, "reason": "Rent"}
    )

    assert adv.employee_id == emp.id
    assert adv.approval_status == ApprovalStatus.PENDING


def test_approve_then_repay_manually(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)
    adv = service.request_advance(actor=employee_actor(emp.id), data={"amount": 3000, "reason": "Rent", "installments": 3})

    with pytest.raises(BusinessRuleError) as exc:
        service.record_repayment(actor=ADMIN, advance_id=adv.id, month=2, year=2024, amount=1000)
    assert exc.value.code == "ADVANCE_NOT_APPROVED"

    service.approve_advance(actor=ADMIN, advance_id=adv.id)
    updated = service.record_repayment(actor=ADMIN, advance_id=adv.id, month=2, year=2024, amount=1000)

    assert updated.repayment_status == RepaymentStatus.IN_PROGRESS
    stored = backend.advances.get_by_id(adv.id)
    assert stored.paid_amount == Decimal("1000")
    assert stored.remaining_amount == Decimal("2000")
    assert [r.amount for r in stored.repayments] == [Decimal("1000.00")]


def test_completed_advance_rejects_more_repayments(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)
    adv = service.create_advance(actor=ADMIN, data={"employee": emp.id, "amount": 500, "reason": "Fuel"})
    service.record_repayment(actor=ADMIN, advance_id=adv.id, month=2, year=2024, amount=500)

    with pytest.raises(BusinessRuleError) as exc:
        service.record_repayment(actor=ADMIN, advance_id=adv.id, month=3, year=2024, amount=1)
    assert exc.value.code == "ADVANCE_COMPLETED"


def test_decided_advance_cannot_be_decided_again(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)
    adv = service.request_advance(actor=ADMIN, data={"employee": emp.id, "amount": 100, "reason": "x"})
    service.reject_advance(actor=ADMIN, advance_id=adv.id, remarks="Not eligible")

    assert backend.advances.get_by_id(adv.id).remarks == "Not eligible"
    with pytest.raises(BusinessRuleError):
        service.approve_advance(actor=ADMIN, advance_id=adv.id)


def test_other_employees_advance_is_not_found(backend):
    emp = backend.employees.add(make_employee())
    service = _service(backend)
    adv = service.create_advance(actor=ADMIN, data={"employee": emp.id, "amount": 100, "reason": "x"})

    assert service.get_advance(actor=employee_actor(emp.id), advance_id=adv.id).id == adv.id
    with pytest.raises(NotFoundError):
        service.get_advance(actor=employee_actor(emp.id + 5), advance_id=adv.id)
