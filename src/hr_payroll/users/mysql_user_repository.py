from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import Permission, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_guard, fetchone
from .model import User
from .repository import UserRepository

_PERMISSION_COLUMNS = {
    Permission.CAN_EDIT: "can_edit",
    Permission.CAN_VIEW_DOCUMENTS: "can_view_documents",
    Permission.CAN_MANAGE_SALARY: "can_manage_salary",
    Permission.CAN_MANAGE_ATTENDANCE: "can_manage_attendance",
}

_SELECT = """
    SELECT id, email, employee_code, employee_id, password_hash, role, is_active,
           can_edit, can_view_documents, can_manage_salary, can_manage_attendance,
           last_login, otp_code, otp_expire
    FROM users
"""


def _to_user(r: dict) -> User:
    return User(
        user_id=int(r["id"]),
        email=r["email"],
        employee_code=r["employee_code"],
        employee_id=int(r["employee_id"]) if r.get("employee_id") else None,
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        is_active=bool(r["is_active"]),
        permissions=frozenset(p for p, col in _PERMISSION_COLUMNS.items() if r.get(col)),
        last_login=r.get("last_login"),
        otp_code=r.get("otp_code"),
        otp_expire=r.get("otp_expire"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(user_id),))
            r = fetchone(cur)
            return _to_user(r) if r else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE email=%s", (email.strip().lower(),))
            r = fetchone(cur)
            return _to_user(r) if r else None

    def create_user(self, *, email, employee_code, employee_id, password_hash, role, permissions) -> int:
        with duplicate_key_guard("User already exists with this email or employee ID", code="DUPLICATE_USER"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users (email, employee_code, employee_id, password_hash, role,
                                       can_edit, can_view_documents, can_manage_salary, can_manage_attendance)
                    VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        email.strip().lower(),
                        employee_code,
                        employee_id,
                        password_hash,
                        role.value,
                        *(int(p in permissions) for p in _PERMISSION_COLUMNS),
                    ),
                )
                return int(cur.lastrowid)

    def set_password(self, user_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0

    def set_otp(self, user_id: int, *, code: Optional[str], expire: Optional[datetime]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET otp_code=%s, otp_expire=%s WHERE id=%s", (code, expire, int(user_id)))
            return cur.rowcount > 0

    def touch_login(self, user_id: int, *, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET last_login=%s WHERE id=%s", (at, int(user_id)))
            return cur.rowcount > 0
