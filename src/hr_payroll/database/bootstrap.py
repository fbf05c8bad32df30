"""Schema bootstrap for a fresh MySQL database.

Used by `scripts/init_db.py` and by `create_app()` when AUTO_INIT_DB is set.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.enums import Role

logger = logging.getLogger(__name__)

_DB_NAME_OVERRIDE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


@contextmanager
def _mysql(db_config: dict, *, select_db: bool = True) -> Iterator:
    params = {
        "host": db_config.get("host", "localhost"),
        "port": int(db_config.get("port", 3306)),
        "user": db_config.get("user", "root"),
        "password": db_config.get("password", ""),
    }
    if select_db:
        params["database"] = db_config.get("database", "hr_payroll_db")
    conn = mysql.connector.connect(**params)
    try:
        yield conn
    finally:
        conn.close()


def schema_statements(sql: str) -> list[str]:
    """Split schema.sql into statements bound to whatever DB the config names.

    The file carries no procedures or quoted semicolons, so a plain split is enough.
    """
    sql = _DB_NAME_OVERRIDE.sub("", _LINE_COMMENT.sub("", sql))
    return [stmt.strip() for stmt in sql.split(";") if stmt.strip()]


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    name = db_config.get("database", "hr_payroll_db")
    with _mysql(db_config, select_db=False) as conn:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()

    statements = schema_statements(Path(schema_path).read_text(encoding="utf-8"))
    with _mysql(db_config) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    logger.info("Applied %d statements from %s to %s", len(statements), schema_path, name)


def ensure_admin_user(db_config: dict, *, email: str, password: str) -> bool:
    """Insert the first admin login; returns False when one already exists."""
    email = email.strip().lower()
    with _mysql(db_config) as conn:
        cur = conn.cursor()
        cur.execute("SELECT id FROM users WHERE email=%s", (email,))
        if cur.fetchone():
            return False

        cur.execute(
            "INSERT INTO users (email, employee_code, password_hash, role, "
            "can_edit, can_view_documents, can_manage_salary, can_manage_attendance) "
            "VALUES (%s, %s, %s, %s, 1, 1, 1, 1)",
            (email, "ADMIN", generate_password_hash(password), Role.ADMIN.value),
        )
        conn.commit()
    logger.info("Created bootstrap admin user %s", email)
    return True


def list_tables(db_config: dict) -> list[str]:
    with _mysql(db_config) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
