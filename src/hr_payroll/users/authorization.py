from __future__ import annotations

from typing import Optional

from ..core.enums import Permission, Role
from ..core.exceptions import AuthorizationError
from .model import Actor


def require_roles(actor: Actor, *roles: Role) -> None:
    if actor.role not in roles:
        raise AuthorizationError(f"User role '{actor.role.value}' is not authorized to access this route")


def require_permission(actor: Actor, permission: Permission) -> None:
    """Admins pass; HR needs the flag; everybody else is refused."""
    if actor.role == Role.ADMIN:
        return
    if actor.role == Role.HR:
        if not actor.has_permission(permission):
            raise AuthorizationError("You do not have permission to perform this action")
        return
    raise AuthorizationError("Access denied")


def require_self_or_staff(actor: Actor, employee_id: Optional[int]) -> None:
    if actor.is_staff:
        return
    if actor.role == Role.EMPLOYEE and employee_id is not None and actor.employee_id == employee_id:
        return
    raise AuthorizationError("You can only access your own data")


def scope_employee_filter(actor: Actor, requested: Optional[int]) -> Optional[int]:
    """Employees always see their own records, whatever filter they send."""
    if actor.role == Role.EMPLOYEE:
        if actor.employee_id is None:
            raise AuthorizationError("No employee profile linked to this account")
        return actor.employee_id
    return requested
