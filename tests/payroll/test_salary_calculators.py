from __future__ import annotations

import random
from decimal import Decimal

import pytest

from hr_payroll.attendance.model import AttendanceSummary
from hr_payroll.core.enums import SalaryType
from hr_payroll.payroll.calculator.daily_calculator import DailySalaryCalculator
from hr_payroll.payroll.calculator.factory import SalaryCalculatorFactory
from hr_payroll.payroll.calculator.monthly_calculator import MonthlySalaryCalculator
from hr_payroll.payroll.model import Salary
from hr_payroll.payroll.policy import PayrollPolicy
from tests.fakes import make_employee

POLICY = PayrollPolicy()


def test_factory_picks_calculator_by_salary_type():
    factory = SalaryCalculatorFactory(POLICY)
    assert isinstance(factory.for_salary_type(SalaryType.DAILY), DailySalaryCalculator)
    assert isinstance(factory.for_salary_type(SalaryType.MONTHLY), MonthlySalaryCalculator)


def test_daily_wage_example():
    employee = make_employee(salary_type=SalaryType.DAILY, basic_salary=Decimal("500"))
    summary = AttendanceSummary(total_working_days=26, present_days=20, half_days=2)

    c = DailySalaryCalculator(POLICY).compute(employee, summary)

    assert c.basic_salary == Decimal("10500")
    assert c.hra == 0
    assert c.provident_fund == 0


def test_monthly_esi_applies_at_the_ceiling():
    employee = make_employee(basic_salary=Decimal("15000"), hra=Decimal("6000"))
    c = MonthlySalaryCalculator(POLICY).compute(employee, AttendanceSummary())

    assert c.esi == Decimal("157.50")
    assert c.provident_fund == Decimal("1800.00")


def test_monthly_esi_is_zero_above_the_ceiling():
    employee = make_employee(basic_salary=Decimal("18000"), hra=Decimal("6000"))
    assert MonthlySalaryCalculator(POLICY).compute(employee, AttendanceSummary()).esi == 0


def test_monthly_hra_defaults_to_forty_percent():
    employee = make_employee(basic_salary=Decimal("10000"), hra=None)
    assert MonthlySalaryCalculator(POLICY).compute(employee, AttendanceSummary()).hra == Decimal("4000.00")


def test_night_duty_uses_policy_rate():
    summary = AttendanceSummary(night_duty_days=3)
    employee = make_employee()

    assert MonthlySalaryCalculator(POLICY).compute(employee, summary).night_duty_allowance == Decimal("600.00")
    custom = PayrollPolicy.from_mapping({"night_duty_rate": 250, "esi_rate": None})
    assert MonthlySalaryCalculator(custom).compute(employee, summary).night_duty_allowance == Decimal("750.00")
    assert custom.esi_rate == POLICY.esi_rate


def test_policy_rejects_impossible_week():
    with pytest.raises(ValueError):
        PayrollPolicy.from_mapping({"working_week_days": 8})


def _random_money(rng: random.Random) -> Decimal:
    return Decimal(rng.randint(0, 5_000_000)) / 100


@pytest.mark.parametrize("seed", range(30))
def test_net_salary_identity(seed):
    rng = random.Random(seed)
    salary = Salary(
        employee_id=1,
        month=1 + rng.randrange(12),
        year=2024,
        basic_salary=_random_money(rng),
        hra=_random_money(rng),
        other_allowances=_random_money(rng),
        overtime_amount=_random_money(rng),
        night_duty_allowance=_random_money(rng),
        total_incentives=_random_money(rng),
        provident_fund=_random_money(rng),
        esi=_random_money(rng),
        professional_tax=_random_money(rng),
        tds=_random_money(rng),
        total_advances=_random_money(rng),
        total_deductions=_random_money(rng),
        gross_salary=Decimal("-1"),
        net_salary=Decimal("-1"),
    ).normalized()

    assert salary.gross_salary == (
        salary.basic_salary
        + salary.hra
        + salary.other_allowances
        + salary.overtime_amount
        + salary.night_duty_allowance
        + salary.total_incentives
    )
    assert salary.total_deductions_amount == (
        salary.provident_fund + salary.esi + salary.professional_tax + salary.tds + salary.total_advances + salary.total_deductions
    )
    assert salary.net_salary == salary.gross_salary - salary.total_deductions_amount
