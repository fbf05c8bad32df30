from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Iterable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_enum, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH, OTP_LENGTH, OTP_TTL_MINUTES, TEMP_PASSWORD_BYTES
from ..core.enums import Permission, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, BusinessRuleError, NotFoundError
from ..employees.repository import EmployeeRepository
from ..integrations.notifier import Notifier, otp_message, welcome_message
from .authorization import require_roles
from .model import DEFAULT_HR_PERMISSIONS, Actor, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _check_password(user: User, password: str) -> bool:
    try:
        return check_password_hash(user.password_hash, password or "")
    except ValueError:
        # placeholder hashes like 'CHANGE_ME'
        return False


class AuthService:
    """Use case: authenticate user (password login and e-mail OTP)."""

    def __init__(self, users: UserRepository, notifier: Notifier):
        self._users = users
        self._notifier = notifier

    def _active_user(self, email: str) -> Optional[User]:
        user = self._users.get_by_email(require_non_empty(email, "email"))
        if not user or not user.is_active:
            return None
        return user

    def authenticate(self, email: str, password: str) -> Actor:
        user = self._active_user(email)
        if not user or not _check_password(user, password):
            raise AuthenticationError("Invalid email or password")

        self._users.touch_login(user.user_id, at=now_local())
        logger.info("User %s logged in", user.user_id)
        return Actor.for_user(user)

    def send_otp(self, email: str) -> None:
        """Sole purpose is the e-mail, so a delivery failure reaches the caller."""
        user = self._active_user(email)
        if not user:
            raise NotFoundError("User not found")

        code = "".join(secrets.choice("0123456789") for _ in range(OTP_LENGTH))
        expire = now_local() + timedelta(minutes=OTP_TTL_MINUTES)
        self._users.set_otp(user.user_id, code=code, expire=expire)
        self._notifier.send(otp_message(user.email, name=user.employee_code, code=code, ttl_minutes=OTP_TTL_MINUTES))

    def verify_otp(self, email: str, code: str) -> Actor:
        user = self._active_user(email)
        if not user:
            raise NotFoundError("User not found")
        if not user.otp_code or not secrets.compare_digest(user.otp_code, str(code or "").strip()):
            raise BusinessRuleError("Invalid OTP", code="INVALID_OTP")
        if not user.otp_expire or user.otp_expire < now_local():
            raise BusinessRuleError("OTP expired", code="OTP_EXPIRED")

        self._users.set_otp(user.user_id, code=None, expire=None)
        self._users.touch_login(user.user_id, at=now_local())
        return Actor.for_user(user)

    def reset_password(self, email: str, code: str, new_password: str) -> None:
        """Forgot-password flow: a valid OTP authorizes a new password."""
        require_min_length(new_password, "password", MIN_PASSWORD_LENGTH)
        actor = self.verify_otp(email, code)
        self._users.set_password(actor.user_id, password_hash=generate_password_hash(new_password))


class UserService:
    """Use case: manage login accounts (admin / hr)."""

    def __init__(self, users: UserRepository, employees: EmployeeRepository, notifier: Notifier):
        self._users = users
        self._employees = employees
        self._notifier = notifier

    def register_user(
        self,
        *,
        actor: Actor,
        employee_code: str,
        role: str = Role.EMPLOYEE.value,
        permissions: Optional[Iterable[str]] = None,
    ) -> User:
        require_roles(actor, Role.ADMIN, Role.HR)
        role_enum = require_enum(role, Role, "role")
        if role_enum != Role.EMPLOYEE and actor.role != Role.ADMIN:
            raise AuthorizationError("Only admins can create admin or hr accounts")

        employee = self._employees.get_by_code(require_non_empty(employee_code, "employeeId"))
        if not employee:
            raise NotFoundError("Employee not found")

        if permissions is None:
            granted = DEFAULT_HR_PERMISSIONS if role_enum == Role.HR else frozenset()
        else:
            granted = frozenset(require_enum(p, Permission, "permission") for p in permissions)

        temp_password = secrets.token_urlsafe(TEMP_PASSWORD_BYTES)
        user_id = self._users.create_user(
            email=employee.email,
            employee_code=employee.employee_code,
            employee_id=employee.id,
            password_hash=generate_password_hash(temp_password),
            role=role_enum,
            permissions=granted,
        )
        logger.info("Registered %s account for %s", role_enum.value, employee.employee_code)

        try:
            self._notifier.send(
                welcome_message(
                    employee.email,
                    name=employee.full_name,
                    employee_code=employee.employee_code,
                    temp_password=temp_password,
                )
            )
        except Exception:
            logger.exception("Welcome e-mail to %s failed", employee.email)

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def change_password(self, *, actor: Actor, current_password: str, new_password: str) -> None:
        user = self._users.get_by_id(actor.user_id)
        if not user:
            raise NotFoundError("User not found")
        if not _check_password(user, current_password):
            raise AuthenticationError("Current password is incorrect")
        require_min_length(new_password, "password", MIN_PASSWORD_LENGTH)
        self._users.set_password(user.user_id, password_hash=generate_password_hash(new_password))
