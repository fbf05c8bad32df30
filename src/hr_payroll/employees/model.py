from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import Department, Designation, DocumentKind, EmployeeStatus, EmploymentType, SalaryType


@dataclass(frozen=True)
class EmployeeDocuments:
    """URLs returned by the object storage; blobs are never stored here."""

    aadhaar_card: Optional[str] = None
    pan_card: Optional[str] = None
    photograph: Optional[str] = None
    application_hindi: Optional[str] = None
    application_english: Optional[str] = None

    def with_url(self, kind: DocumentKind, url: str) -> "EmployeeDocuments":
        attr = {
            DocumentKind.AADHAAR_CARD: "aadhaar_card",
            DocumentKind.PAN_CARD: "pan_card",
            DocumentKind.PHOTOGRAPH: "photograph",
            DocumentKind.APPLICATION_HINDI: "application_hindi",
            DocumentKind.APPLICATION_ENGLISH: "application_english",
        }[kind]
        return replace(self, **{attr: url})

    def to_dict(self) -> dict:
        return {
            "aadhaarCard": self.aadhaar_card,
            "panCard": self.pan_card,
            "photograph": self.photograph,
            "applicationHindi": self.application_hindi,
            "applicationEnglish": self.application_english,
        }


@dataclass(frozen=True)
class ProfileStatus:
    is_complete: bool = False
    completion_percentage: int = 0
    missing_fields: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "isComplete": self.is_complete,
            "completionPercentage": self.completion_percentage,
            "missingFields": list(self.missing_fields),
        }


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee (root aggregate of the payroll data)."""

    employee_code: str
    first_name: str
    last_name: str
    email: str
    phone: str
    department: Department
    designation: Designation
    date_of_joining: date
    salary_type: SalaryType
    basic_salary: Decimal
    id: Optional[int] = None
    middle_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    aadhaar_number: Optional[str] = None
    pan_number: Optional[str] = None
    bank_account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    bank_name: Optional[str] = None
    branch_name: Optional[str] = None
    city: Optional[str] = None
    employment_type: EmploymentType = EmploymentType.PERMANENT
    hra: Optional[Decimal] = None
    other_allowances: Optional[Decimal] = None
    pf_number: Optional[str] = None
    esi_number: Optional[str] = None
    uan_number: Optional[str] = None
    documents: EmployeeDocuments = field(default_factory=EmployeeDocuments)
    profile_status: ProfileStatus = field(default_factory=ProfileStatus)
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    @property
    def full_name(self) -> str:
        middle = f" {self.middle_name} " if self.middle_name else " "
        return f"{self.first_name}{middle}{self.last_name}"

    def normalized(self) -> "Employee":
        """Recompute derived fields; never trust a caller-supplied profile status."""
        return replace(self, profile_status=compute_profile_status(self))

    def to_dict(self, *, include_documents: bool = True) -> dict:
        data = {
            "id": self.id,
            "employeeId": self.employee_code,
            "fullName": self.full_name,
            "firstName": self.first_name,
            "middleName": self.middle_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "dateOfBirth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "gender": self.gender,
            "aadhaarNumber": self.aadhaar_number,
            "panNumber": self.pan_number,
            "bankName": self.bank_name,
            "branchName": self.branch_name,
            "accountNumber": self.bank_account_number,
            "ifscCode": self.ifsc_code,
            "location": self.city,
            "department": self.department.value,
            "designation": self.designation.value,
            "joiningDate": self.date_of_joining.isoformat(),
            "employmentType": self.employment_type.value,
            "salaryType": self.salary_type.value,
            "basicSalary": float(self.basic_salary),
            "hra": None if self.hra is None else float(self.hra),
            "otherAllowances": None if self.other_allowances is None else float(self.other_allowances),
            "pfNumber": self.pf_number,
            "esiNumber": self.esi_number,
            "uanNumber": self.uan_number,
            "profileStatus": self.profile_status.to_dict(),
            "status": self.status.value,
        }
        if include_documents:
            data["documents"] = self.documents.to_dict()
        return data


def compute_profile_status(employee: Employee) -> ProfileStatus:
    """Profile completeness gate used before payroll can run.

    Complete means none of the five required fields is missing. The
    percentage is taken over eight readiness fields and is for display only.
    """
    scored = [
        employee.aadhaar_number,
        employee.pan_number,
        employee.bank_account_number,
        employee.ifsc_code,
        employee.department,
        employee.designation,
        employee.documents.aadhaar_card,
        employee.documents.pan_card,
    ]
    filled = sum(1 for value in scored if value)
    percentage = round(filled / len(scored) * 100)

    missing = []
    if not employee.aadhaar_number:
        missing.append("Aadhaar Number")
    if not employee.pan_number:
        missing.append("PAN Number")
    if not employee.bank_account_number:
        missing.append("Bank Account Number")
    if not employee.documents.aadhaar_card:
        missing.append("Aadhaar Card Document")
    if not employee.documents.pan_card:
        missing.append("PAN Card Document")

    return ProfileStatus(
        is_complete=not missing,
        completion_percentage=percentage,
        missing_fields=tuple(missing),
    )
