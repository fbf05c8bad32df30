from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import Permission, Role

DEFAULT_HR_PERMISSIONS = frozenset({Permission.CAN_VIEW_DOCUMENTS, Permission.CAN_MANAGE_ATTENDANCE})


@dataclass(frozen=True)
class User:
    """Login account. Pure data object, no DB access."""

    user_id: int
    email: str
    employee_code: str
    password_hash: str
    role: Role
    employee_id: Optional[int] = None
    is_active: bool = True
    permissions: frozenset = field(default_factory=lambda: DEFAULT_HR_PERMISSIONS)
    last_login: Optional[datetime] = None
    otp_code: Optional[str] = None
    otp_expire: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "employeeId": self.employee_code,
            "role": self.role.value,
            "isActive": self.is_active,
            "hrPermissions": {p.value: p in self.permissions for p in Permission},
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
        }


@dataclass(frozen=True)
class Actor:
    """Identity acting on a request, as stored in the Flask session.

    Only used to decide authorization, never to change computed values.
    """

    user_id: int
    role: Role
    employee_id: Optional[int] = None
    permissions: frozenset = frozenset()

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.ADMIN, Role.HR)

    def has_permission(self, permission: Permission) -> bool:
        if self.role == Role.ADMIN:
            return True
        return self.role == Role.HR and permission in self.permissions

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "role": self.role.value,
            "employee_id": self.employee_id,
            "permissions": sorted(p.value for p in self.permissions),
        }

    @classmethod
    def from_session(cls, data: dict) -> "Actor":
        return cls(
            user_id=int(data["user_id"]),
            role=Role(data["role"]),
            employee_id=int(data["employee_id"]) if data.get("employee_id") else None,
            permissions=frozenset(Permission(p) for p in data.get("permissions") or ()),
        )

    @classmethod
    def for_user(cls, user: User) -> "Actor":
        return cls(user_id=user.user_id, role=user.role, employee_id=user.employee_id, permissions=user.permissions)
