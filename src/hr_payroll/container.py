from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .adjustments.mysql_deduction_repository import MySQLDeductionRepository
from .adjustments.mysql_incentive_repository import MySQLIncentiveRepository
from .adjustments.repository import DeductionRepository, IncentiveRepository
from .adjustments.service import AdjustmentService
from .advances.mysql_advance_repository import MySQLAdvanceRepository
from .advances.repository import AdvanceRepository
from .advances.service import AdvanceService
from .attendance.aggregator import AttendanceAggregator
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection, TransactionManager
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .increments.mysql_increment_repository import MySQLIncrementRepository
from .increments.repository import IncrementRepository
from .increments.service import IncrementService
from .integrations.notifier import LoggingNotifier, Notifier
from .integrations.sheets import NullSheetSync, SheetSync
from .integrations.storage import ObjectStorage
from .payroll.generator import SalaryGenerator
from .payroll.mysql_salary_repository import MySQLSalaryRepository
from .payroll.policy import PayrollPolicy
from .payroll.repository import SalaryRepository
from .payroll.service import SalaryService
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    tx: TransactionManager
    policy: PayrollPolicy

    employees_repo: EmployeeRepository
    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    salaries_repo: SalaryRepository
    incentives_repo: IncentiveRepository
    deductions_repo: DeductionRepository
    advances_repo: AdvanceRepository
    increments_repo: IncrementRepository

    auth_service: AuthService
    user_service: UserService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    adjustment_service: AdjustmentService
    advance_service: AdvanceService
    increment_service: IncrementService
    salary_generator: SalaryGenerator
    salary_service: SalaryService
    report_service: ReportService


def assemble(
    *,
    tx: TransactionManager,
    employees_repo: EmployeeRepository,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    salaries_repo: SalaryRepository,
    incentives_repo: IncentiveRepository,
    deductions_repo: DeductionRepository,
    advances_repo: AdvanceRepository,
    increments_repo: IncrementRepository,
    storage: ObjectStorage,
    notifier: Optional[Notifier] = None,
    sheets: Optional[SheetSync] = None,
    policy: Optional[PayrollPolicy] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in the app, fakes in tests)."""
    policy = policy or PayrollPolicy()
    notifier = notifier or LoggingNotifier()
    sheets = sheets or NullSheetSync()

    aggregator = AttendanceAggregator(attendance_repo, employees_repo, working_week_days=policy.working_week_days)

    return Container(
        tx=tx,
        policy=policy,
        employees_repo=employees_repo,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        salaries_repo=salaries_repo,
        incentives_repo=incentives_repo,
        deductions_repo=deductions_repo,
        advances_repo=advances_repo,
        increments_repo=increments_repo,
        auth_service=AuthService(users_repo, notifier),
        user_service=UserService(users_repo, employees_repo, notifier),
        employee_service=EmployeeService(employees_repo, storage, sheets),
        attendance_service=AttendanceService(attendance_repo, employees_repo, sheets, aggregator=aggregator),
        adjustment_service=AdjustmentService(incentives_repo, deductions_repo, employees_repo),
        advance_service=AdvanceService(advances_repo, employees_repo, tx),
        increment_service=IncrementService(increments_repo, employees_repo, tx),
        salary_generator=SalaryGenerator(
            employees=employees_repo,
            salaries=salaries_repo,
            incentives=incentives_repo,
            deductions=deductions_repo,
            advances=advances_repo,
            aggregator=aggregator,
            tx=tx,
            policy=policy,
            sheets=sheets,
        ),
        salary_service=SalaryService(salaries_repo),
        report_service=ReportService(
            employees=employees_repo,
            attendance=attendance_repo,
            salaries=salaries_repo,
            incentives=incentives_repo,
            deductions=deductions_repo,
            advances=advances_repo,
            increments=increments_repo,
            policy=policy,
        ),
    )


def build_container(
    *,
    db_config: dict[str, Any],
    storage: ObjectStorage,
    notifier: Optional[Notifier] = None,
    sheets: Optional[SheetSync] = None,
    policy: Optional[PayrollPolicy] = None,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        tx=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        salaries_repo=MySQLSalaryRepository(conn),
        incentives_repo=MySQLIncentiveRepository(conn),
        deductions_repo=MySQLDeductionRepository(conn),
        advances_repo=MySQLAdvanceRepository(conn),
        increments_repo=MySQLIncrementRepository(conn),
        storage=storage,
        notifier=notifier,
        sheets=sheets,
        policy=policy,
    )
