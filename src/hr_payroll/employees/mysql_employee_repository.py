from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Department, Designation, EmployeeStatus, EmploymentType, SalaryType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    as_optional_decimal,
    db_cursor,
    dump_list,
    duplicate_key_guard,
    fetchall,
    fetchone,
    load_list,
)
from .model import Employee, EmployeeDocuments, ProfileStatus
from .repository import EmployeeRepository

_COLUMNS = (
    "employee_code", "first_name", "middle_name", "last_name", "email", "phone", "date_of_birth", "gender",
    "aadhaar_number", "pan_number", "bank_account_number", "ifsc_code", "bank_name", "branch_name", "city",
    "department", "designation", "date_of_joining", "employment_type", "salary_type", "basic_salary", "hra",
    "other_allowances", "pf_number", "esi_number", "uan_number", "photograph_url", "aadhaar_card_url",
    "pan_card_url", "application_hindi_url", "application_english_url", "profile_complete",
    "completion_percentage", "missing_fields", "status", "created_by", "updated_by",
)

_SELECT = f"SELECT id, {', '.join(_COLUMNS)} FROM employees"


def _to_employee(r: dict) -> Employee:
    return Employee(
        id=int(r["id"]),
        employee_code=r["employee_code"],
        first_name=r["first_name"],
        middle_name=r.get("middle_name"),
        last_name=r["last_name"],
        email=r["email"],
        phone=r["phone"],
        date_of_birth=r.get("date_of_birth"),
        gender=r.get("gender"),
        aadhaar_number=r.get("aadhaar_number"),
        pan_number=r.get("pan_number"),
        bank_account_number=r.get("bank_account_number"),
        ifsc_code=r.get("ifsc_code"),
        bank_name=r.get("bank_name"),
        branch_name=r.get("branch_name"),
        city=r.get("city"),
        department=Department(r["department"]),
        designation=Designation(r["designation"]),
        date_of_joining=r["date_of_joining"],
        employment_type=EmploymentType(r["employment_type"]),
        salary_type=SalaryType(r["salary_type"]),
        basic_salary=as_decimal(r["basic_salary"]),
        hra=as_optional_decimal(r.get("hra")),
        other_allowances=as_optional_decimal(r.get("other_allowances")),
        pf_number=r.get("pf_number"),
        esi_number=r.get("esi_number"),
        uan_number=r.get("uan_number"),
        documents=EmployeeDocuments(
            aadhaar_card=r.get("aadhaar_card_url"),
            pan_card=r.get("pan_card_url"),
            photograph=r.get("photograph_url"),
            application_hindi=r.get("application_hindi_url"),
            application_english=r.get("application_english_url"),
        ),
        profile_status=ProfileStatus(
            is_complete=bool(r["profile_complete"]),
            completion_percentage=int(r["completion_percentage"]),
            missing_fields=tuple(load_list(r.get("missing_fields"))),
        ),
        status=EmployeeStatus(r["status"]),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
    )


def _params(e: Employee) -> tuple:
    return (
        e.employee_code, e.first_name, e.middle_name, e.last_name, e.email, e.phone, e.date_of_birth, e.gender,
        e.aadhaar_number, e.pan_number, e.bank_account_number, e.ifsc_code, e.bank_name, e.branch_name, e.city,
        e.department.value, e.designation.value, e.date_of_joining, e.employment_type.value, e.salary_type.value,
        e.basic_salary, e.hra, e.other_allowances, e.pf_number, e.esi_number, e.uan_number,
        e.documents.photograph, e.documents.aadhaar_card, e.documents.pan_card, e.documents.application_hindi,
        e.documents.application_english, int(e.profile_status.is_complete), e.profile_status.completion_percentage,
        dump_list(e.profile_status.missing_fields), e.status.value, e.created_by, e.updated_by,
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE employee_code=%s", (employee_code,))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def create(self, employee: Employee) -> int:
        employee = employee.normalized()
        placeholders = ", ".join(["%s"] * len(_COLUMNS))
        with duplicate_key_guard("Employee ID, Aadhaar or PAN number already exists", code="DUPLICATE_EMPLOYEE"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO employees ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                    _params(employee),
                )
                return int(cur.lastrowid)

    def update(self, employee: Employee) -> bool:
        employee = employee.normalized()
        assignments = ", ".join(f"{c}=%s" for c in _COLUMNS)
        with duplicate_key_guard("Aadhaar or PAN number already exists", code="DUPLICATE_EMPLOYEE"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE employees SET {assignments} WHERE id=%s",
                    (*_params(employee), int(employee.id)),
                )
                return cur.rowcount > 0

    def list(self, *, department=None, status=None, salary_type=None, search=None, limit=None) -> Sequence[Employee]:
        clauses: list[str] = []
        params: list[object] = []

        if department is not None:
            clauses.append("department=%s")
            params.append(department.value)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if salary_type is not None:
            clauses.append("salary_type=%s")
            params.append(salary_type.value)
        if search:
            like = f"%{search.strip()}%"
            clauses.append("(first_name LIKE %s OR last_name LIKE %s OR employee_code LIKE %s OR email LIKE %s)")
            params.extend([like, like, like, like])

        sql = _SELECT
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY department, employee_code"
        if limit:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_employee(r) for r in fetchall(cur)]

    def list_incomplete(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE profile_complete=0 ORDER BY employee_code")
            return [_to_employee(r) for r in fetchall(cur)]
