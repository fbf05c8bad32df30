from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from hr_payroll.core.enums import Permission, Role
from hr_payroll.core.exceptions import AuthenticationError, AuthorizationError, BusinessRuleError, NotFoundError
from hr_payroll.users.model import Actor
from hr_payroll.users.service import AuthService, UserService
from tests.fakes import ADMIN, HR_DEFAULT, make_employee


def _seed_user(backend, *, password="secret123", role=Role.EMPLOYEE) -> int:
    emp = backend.employees.add(make_employee())
    return backend.users.create_user(
        email=emp.email,
        employee_code=emp.employee_code,
        employee_id=emp.id,
        password_hash=generate_password_hash(password),
        role=role,
        permissions=frozenset(),
    )


def test_authenticate_returns_actor_and_touches_login(backend):
    user_id = _seed_user(backend)
    actor = AuthService(backend.users, backend.notifier).authenticate("ravi@example.com", "secret123")

    assert actor.user_id == user_id
    assert actor.role == Role.EMPLOYEE
    assert backend.users.get_by_id(user_id).last_login is not None


def test_authenticate_rejects_wrong_password(backend):
    _seed_user(backend)
    with pytest.raises(AuthenticationError):
        AuthService(backend.users, backend.notifier).authenticate("ravi@example.com", "nope")


def test_placeholder_hash_never_matches(backend):
    backend.users.create_user(
        email="x@example.com",
        employee_code="NM9",
        employee_id=None,
        password_hash="CHANGE_ME",
        role=Role.ADMIN,
        permissions=frozenset(),
    )
    with pytest.raises(AuthenticationError):
        AuthService(backend.users, backend.notifier).authenticate("x@example.com", "CHANGE_ME")


def test_send_and_verify_otp(backend):
    user_id = _seed_user(backend)
    service = AuthService(backend.users, backend.notifier)

    service.send_otp("ravi@example.com")
    code = backend.users.get_by_id(user_id).otp_code

    assert len(code) == 6 and code.isdigit()
    assert code in backend.notifier.sent[0].body

    actor = service.verify_otp("ravi@example.com", code)
    assert actor.user_id == user_id
    assert backend.users.get_by_id(user_id).otp_code is None


def test_verify_otp_mismatch(backend):
    _seed_user(backend)
    service = AuthService(backend.users, backend.notifier)
    service.send_otp("ravi@example.com")

    with pytest.raises(BusinessRuleError) as exc:
        service.verify_otp("ravi@example.com", "not-it")
    assert exc.value.code == "INVALID_OTP"


def test_verify_otp_expired(backend):
    user_id = _seed_user(backend)
    backend.users.set_otp(user_id, code="123456", expire=datetime.now() - timedelta(minutes=1))

    with pytest.raises(BusinessRuleError) as exc:
        AuthService(backend.users, backend.notifier).verify_otp("ravi@example.com", "123456")
    assert exc.value.code == "OTP_EXPIRED"


def test_send_otp_surfaces_mail_failure(backend):
    _seed_user(backend)
    backend.notifier.fail = True
    with pytest.raises(ConnectionError):
        AuthService(backend.users, backend.notifier).send_otp("ravi@example.com")


def test_reset_password_with_otp(backend):
    user_id = _seed_user(backend)
    service = AuthService(backend.users, backend.notifier)
    backend.users.set_otp(user_id, code="654321", expire=datetime.now() + timedelta(minutes=5))

    service.reset_password("ravi@example.com", "654321", "brand-new-pass")

    assert service.authenticate("ravi@example.com", "brand-new-pass").user_id == user_id


def test_register_user_sends_welcome_mail(backend):
    backend.employees.add(make_employee())
    user = UserService(backend.users, backend.employees, backend.notifier).register_user(
        actor=HR_DEFAULT, employee_code="NM000001001"
    )

    assert user.role == Role.EMPLOYEE
    assert user.email == "ravi@example.com"
    assert backend.notifier.sent[0].recipient == "ravi@example.com"


def test_register_user_survives_mail_failure(backend):
    backend.employees.add(make_employee())
    backend.notifier.fail = True

    user = UserService(backend.users, backend.employees, backend.notifier).register_user(
        actor=ADMIN, employee_code="NM000001001"
    )
    assert backend.users.get_by_id(user.user_id) is not None


def test_only_admin_creates_hr_accounts(backend):
    backend.employees.add(make_employee())
    service = UserService(backend.users, backend.employees, backend.notifier)

    with pytest.raises(AuthorizationError):
        service.register_user(actor=HR_DEFAULT, employee_code="NM000001001", role="hr")

    user = service.register_user(actor=ADMIN, employee_code="NM000001001", role="hr")
    assert user.permissions == frozenset({Permission.CAN_VIEW_DOCUMENTS, Permission.CAN_MANAGE_ATTENDANCE})


def test_register_unknown_employee(backend):
    with pytest.raises(NotFoundError):
        UserService(backend.users, backend.employees, backend.notifier).register_user(
            actor=ADMIN, employee_code="NM404"
        )


def test_change_password_checks_current(backend):
    user_id = _seed_user(backend)
    actor = Actor(user_id=user_id, role=Role.EMPLOYEE, employee_id=1)
    service = UserService(backend.users, backend.employees, backend.notifier)

    with pytest.raises(AuthenticationError):
        service.change_password(actor=actor, current_password="wrong", new_password="another1")

    service.change_password(actor=actor, current_password="secret123", new_password="another1")
    assert AuthService(backend.users, backend.notifier).authenticate("ravi@example.com", "another1")
