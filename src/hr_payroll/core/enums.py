from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Acting role supplied by the authentication layer."""

    ADMIN = "admin"
    HR = "hr"
    EMPLOYEE = "employee"


class Permission(str, Enum):
    """Fine-grained permissions for HR users (admins hold all of them)."""

    CAN_EDIT = "canEdit"
    CAN_VIEW_DOCUMENTS = "canViewDocuments"
    CAN_MANAGE_SALARY = "canManageSalary"
    CAN_MANAGE_ATTENDANCE = "canManageAttendance"


class Department(str, Enum):
    MECHANICAL = "Mechanical"
    BODYSHOP = "Bodyshop"
    INSURANCE = "Insurance"
    SALES = "Sales"


class Designation(str, Enum):
    DENTER = "Denter"
    PAINTER = "Painter"
    SEMI_DENTER = "Semi-Denter"
    FITTER = "Fitter"
    SEMI_PAINTER = "Semi-Painter"
    RUBBING_CLEANING = "Rubbing & Cleaning"
    MANAGER = "Manager"
    SUPERVISOR = "Supervisor"
    SALES_EXECUTIVE = "Sales Executive"
    INSURANCE_EXECUTIVE = "Insurance Executive"


class EmploymentType(str, Enum):
    PERMANENT = "Permanent"
    CONTRACT = "Contract"
    TEMPORARY = "Temporary"


class SalaryType(str, Enum):
    MONTHLY = "Monthly"
    DAILY = "Daily"


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    TERMINATED = "Terminated"
    RESIGNED = "Resigned"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"
    LEAVE = "Leave"
    HOLIDAY = "Holiday"


class ApprovalStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class RepaymentStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class RepaymentMode(str, Enum):
    SALARY_DEDUCTION = "Salary Deduction"
    CASH = "Cash"
    OTHER = "Other"


class IncentiveType(str, Enum):
    PERFORMANCE = "Performance"
    ATTENDANCE = "Attendance"
    FESTIVAL = "Festival"
    OVERTIME = "Overtime"
    REFERRAL = "Referral"
    OTHER = "Other"


class IncentiveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PAID = "Paid"


class DeductionType(str, Enum):
    LATE_COMING = "Late Coming"
    ABSENT = "Absent"
    DAMAGE = "Damage"
    LOSS = "Loss"
    LOAN = "Loan"
    FINE = "Fine"
    OTHER = "Other"


class DeductionStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    DEDUCTED = "Deducted"


class IncrementReason(str, Enum):
    PERFORMANCE = "Performance"
    PROMOTION = "Promotion"
    ANNUAL = "Annual"
    SPECIAL = "Special"
    MARKET_ADJUSTMENT = "Market Adjustment"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    PAID = "Paid"
    HOLD = "Hold"


class PaymentMode(str, Enum):
    BANK_TRANSFER = "Bank Transfer"
    CASH = "Cash"
    CHEQUE = "Cheque"


class DocumentKind(str, Enum):
    """Employee document slots backed by the object storage."""

    AADHAAR_CARD = "aadhaarCard"
    PAN_CARD = "panCard"
    PHOTOGRAPH = "photograph"
    APPLICATION_HINDI = "applicationHindi"
    APPLICATION_ENGLISH = "applicationEnglish"
