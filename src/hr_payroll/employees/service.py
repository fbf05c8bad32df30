from __future__ import annotations

import logging
import random
import time
from collections import Counter
from dataclasses import replace
from typing import Any, Callable, Optional

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_enum, require_amount, require_enum, require_non_empty
from ..core.constants import (
    EMPLOYEE_CODE_MAX_ATTEMPTS,
    EMPLOYEE_CODE_PREFIX,
    MIN_SEARCH_LENGTH,
    UPLOAD_FOLDER_EMPLOYEES,
)
from ..core.enums import (
    Department,
    Designation,
    DocumentKind,
    EmployeeStatus,
    EmploymentType,
    Permission,
    Role,
    SalaryType,
)
from ..core.exceptions import DuplicateError, NotFoundError, ValidationError
from ..integrations.sheets import SheetSync, best_effort_sync
from ..integrations.storage import ObjectStorage
from ..users.authorization import require_permission, require_roles, require_self_or_staff
from ..users.model import Actor
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

REQUIRED_ON_CREATE = (
    "firstName", "lastName", "email", "phone", "department",
    "designation", "dateOfJoining", "salaryType", "basicSalary",
)

_TEXT_FIELDS = {
    "firstName": "first_name",
    "middleName": "middle_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
    "gender": "gender",
    "aadhaarNumber": "aadhaar_number",
    "panNumber": "pan_number",
    "accountNumber": "bank_account_number",
    "bankAccountNumber": "bank_account_number",
    "ifscCode": "ifsc_code",
    "bankName": "bank_name",
    "branchName": "branch_name",
    "city": "city",
    "pfNumber": "pf_number",
    "esiNumber": "esi_number",
    "uanNumber": "uan_number",
}


def generate_employee_code(rng: Optional[random.Random] = None) -> str:
    """NM + last 6 digits of the epoch millis + 3 random digits."""
    rng = rng or random.Random()
    stamp = str(int(time.time() * 1000))[-6:]
    return f"{EMPLOYEE_CODE_PREFIX}{stamp}{rng.randrange(1000):03d}"


def parse_employee_payload(data: dict[str, Any], *, partial: bool) -> dict[str, Any]:
    """Map an API payload onto Employee fields.

    Derived fields (profileStatus, employeeId) are ignored on purpose.
    """
    if not partial:
        missing = [k for k in REQUIRED_ON_CREATE if data.get(k) in (None, "")]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                fields={k: "required" for k in missing},
            )

    out: dict[str, Any] = {}
    for key, attr in _TEXT_FIELDS.items():
        if key in data:
            value = data[key]
            out[attr] = str(value).strip() or None if value is not None else None

    for attr in ("first_name", "last_name", "email", "phone"):
        if attr in out:
            out[attr] = require_non_empty(out[attr], attr)

    if "department" in data:
        out["department"] = require_enum(data["department"], Department, "department")
    if "designation" in data:
        out["designation"] = require_enum(data["designation"], Designation, "designation")
    if "employmentType" in data:
        out["employment_type"] = require_enum(data["employmentType"], EmploymentType, "employmentType")
    if "salaryType" in data:
        out["salary_type"] = require_enum(data["salaryType"], SalaryType, "salaryType")
    if "status" in data:
        out["status"] = require_enum(data["status"], EmployeeStatus, "status")

    if "basicSalary" in data:
        out["basic_salary"] = require_amount(data["basicSalary"], "basicSalary")
    for key, attr in (("hra", "hra"), ("otherAllowances", "other_allowances")):
        if key in data:
            out[attr] = None if data[key] in (None, "") else require_amount(data[key], key)

    if "dateOfJoining" in data:
        out["date_of_joining"] = parse_iso_date(data["dateOfJoining"])
    if "dateOfBirth" in data:
        out["date_of_birth"] = parse_iso_date(data["dateOfBirth"]) if data["dateOfBirth"] else None

    if "aadhaar_number" in out and out["aadhaar_number"] and not out["aadhaar_number"].isdigit():
        raise ValidationError("Aadhaar number must be numeric", fields={"aadhaarNumber": "invalid"})
    if "pan_number" in out and out["pan_number"]:
        out["pan_number"] = out["pan_number"].upper()
    return out


class EmployeeService:
    """Use cases around employee records."""

    def __init__(
        self,
        employees: EmployeeRepository,
        storage: ObjectStorage,
        sheets: SheetSync,
        *,
        code_generator: Callable[[], str] = generate_employee_code,
    ):
        self._employees = employees
        self._storage = storage
        self._sheets = sheets
        self._code_generator = code_generator

    def _require(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def create_employee(self, *, actor: Actor, data: dict[str, Any]) -> Employee:
        require_roles(actor, Role.ADMIN, Role.HR)
        fields = parse_employee_payload(data, partial=False)
        fields.pop("status", None)

        employee = None
        for attempt in range(1, EMPLOYEE_CODE_MAX_ATTEMPTS + 1):
            candidate = Employee(employee_code=self._code_generator(), created_by=actor.user_id, **fields)
            try:
                new_id = self._employees.create(candidate)
            except DuplicateError:
                # The code collided or Aadhaar/PAN is taken; only the former is worth a retry.
                if self._employees.get_by_code(candidate.employee_code) is None:
                    raise
                logger.warning("Employee code %s collided (attempt %d)", candidate.employee_code, attempt)
                continue
            employee = replace(candidate, id=new_id).normalized()
            break

        if employee is None:
            raise DuplicateError("Could not allocate a unique employee ID", code="EMPLOYEE_CODE_EXHAUSTED")

        logger.info("Created employee %s", employee.employee_code)
        best_effort_sync(lambda: self._sheets.sync_employee(employee), what=f"employee {employee.employee_code}")
        return employee

    def update_employee(self, *, actor: Actor, employee_id: int, changes: dict[str, Any]) -> Employee:
        require_permission(actor, Permission.CAN_EDIT)
        current = self._require(employee_id)
        fields = parse_employee_payload(changes, partial=True)

        updated = replace(current, updated_by=actor.user_id, **fields).normalized()
        if not self._employees.update(updated):
            raise NotFoundError("Employee not found")

        best_effort_sync(lambda: self._sheets.sync_employee(updated), what=f"employee {updated.employee_code}")
        return updated

    def terminate_employee(self, *, actor: Actor, employee_id: int) -> Employee:
        """Status transition only; historical payroll records stay untouched."""
        require_roles(actor, Role.ADMIN)
        current = self._require(employee_id)
        updated = replace(current, status=EmployeeStatus.TERMINATED, updated_by=actor.user_id)
        self._employees.update(updated)
        logger.info("Employee %s marked as terminated", current.employee_code)
        return updated.normalized()

    def get_employee(self, *, actor: Actor, employee_id: int) -> Employee:
        require_self_or_staff(actor, int(employee_id))
        return self._require(employee_id)

    def get_by_code(self, employee_code: str) -> Employee:
        employee = self._employees.get_by_code((employee_code or "").strip())
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def can_view_documents(self, actor: Actor, employee: Employee) -> bool:
        if actor.role == Role.EMPLOYEE:
            return actor.employee_id == employee.id
        return actor.has_permission(Permission.CAN_VIEW_DOCUMENTS)

    def list_employees(
        self,
        *,
        actor: Actor,
        department: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Employee]:
        require_roles(actor, Role.ADMIN, Role.HR)
        return list(
            self._employees.list(
                department=optional_enum(department, Department, "department"),
                status=optional_enum(status, EmployeeStatus, "status"),
                search=(search or "").strip() or None,
            )
        )

    def search_employees(self, *, actor: Actor, q: str) -> list[Employee]:
        q = (q or "").strip()
        if len(q) < MIN_SEARCH_LENGTH:
            raise ValidationError(f"Search query must be at least {MIN_SEARCH_LENGTH} characters")
        require_roles(actor, Role.ADMIN, Role.HR)
        return list(self._employees.list(status=EmployeeStatus.ACTIVE, search=q, limit=10))

    def list_incomplete_profiles(self, *, actor: Actor) -> list[Employee]:
        require_roles(actor, Role.ADMIN, Role.HR)
        return list(self._employees.list_incomplete())

    def employee_stats(self, *, actor: Actor) -> dict:
        require_roles(actor, Role.ADMIN, Role.HR)
        active = self._employees.list(status=EmployeeStatus.ACTIVE)
        by_department = Counter(e.department.value for e in active)
        by_designation = Counter(e.designation.value for e in active)
        return {
            "totalEmployees": len(active),
            "byDepartment": [{"_id": k, "count": v} for k, v in sorted(by_department.items())],
            "byDesignation": [{"_id": k, "count": v} for k, v in sorted(by_designation.items())],
            "incompleteProfiles": sum(1 for e in active if not e.profile_status.is_complete),
        }

    def upload_document(
        self,
        *,
        actor: Actor,
        employee_id: int,
        kind: str,
        filename: str,
        content: bytes,
    ) -> Employee:
        require_roles(actor, Role.ADMIN, Role.HR)
        doc_kind = require_enum(kind, DocumentKind, "document")
        if not content:
            raise ValidationError("No files uploaded")
        current = self._require(employee_id)

        # The record is written only once the remote upload has succeeded.
        stored = self._storage.upload(
            content,
            folder=f"{UPLOAD_FOLDER_EMPLOYEES}/{current.employee_code}",
            filename=filename,
        )
        updated = replace(
            current,
            documents=current.documents.with_url(doc_kind, stored.url),
            updated_by=actor.user_id,
        ).normalized()
        self._employees.update(updated)
        logger.info("Uploaded %s for employee %s", doc_kind.value, current.employee_code)
        return updated
