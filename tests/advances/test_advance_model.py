from __future__ import annotations

import random
from datetime import date, datetime
from decimal import Decimal

import pytest

from hr_payroll.advances.model import Advance
from hr_payroll.core.enums import ApprovalStatus, RepaymentStatus


def _advance(amount="10000", installments=3, **kw) -> Advance:
    return Advance(
        employee_id=1,
        amount=Decimal(amount),
        reason="Medical",
        request_date=date(2024, 1, 10),
        installments=installments,
        approval_status=ApprovalStatus.APPROVED,
        **kw,
    ).normalized()


def _expected_status(amount: Decimal, paid: Decimal) -> RepaymentStatus:
    if amount - paid <= 0:
        return RepaymentStatus.COMPLETED
    if paid > 0:
        return RepaymentStatus.IN_PROGRESS
    return RepaymentStatus.NOT_STARTED


def test_installment_is_rounded_up():
    adv = _advance("10000", 3)
    assert adv.installment_amount == Decimal("3334")
    assert adv.remaining_amount == Decimal("10000")
    assert adv.repayment_status == RepaymentStatus.NOT_STARTED


def test_normalized_ignores_supplied_derived_values():
    adv = _advance("6000", 2, remaining_amount=Decimal("1"), repayment_status=RepaymentStatus.COMPLETED)
    assert adv.remaining_amount == Decimal("6000")
    assert adv.repayment_status == RepaymentStatus.NOT_STARTED
    assert adv.normalized() == adv


def test_last_installment_overshoots_the_balance():
    adv = _advance("10000", 3)
    for month in (1, 2, 3):
        assert adv.next_installment() == Decimal("3334")
        adv = adv.record_repayment(
            month=month, year=2024, amount=adv.next_installment(), paid_date=datetime(2024, month, 28)
        )

    assert adv.remaining_amount == Decimal("-2")
    assert adv.repayment_status == RepaymentStatus.COMPLETED
    assert not adv.is_outstanding
    assert adv.next_installment() == 0
    assert len(adv.repayments) == 3


def test_overpayment_completes_with_non_positive_balance():
    adv = _advance("1000", 1).record_repayment(
        month=1, year=2024, amount=Decimal("1500"), paid_date=datetime(2024, 1, 31)
    )
    assert adv.remaining_amount == Decimal("-500")
    assert adv.repayment_status == RepaymentStatus.COMPLETED


def test_repayment_must_be_positive():
    with pytest.raises(ValueError):
        _advance().record_repayment(month=1, year=2024, amount=Decimal("0"), paid_date=datetime(2024, 1, 31))


@pytest.mark.parametrize("seed", range(25))
def test_balance_invariant_holds_for_random_repayments(seed):
    rng = random.Random(seed)
    amount = Decimal(rng.randint(1, 50000))
    adv = _advance(str(amount), rng.randint(1, 12))
    paid = Decimal("0")

    for step in range(rng.randint(0, 15)):
        repayment = Decimal(rng.randint(1, 8000))
        adv = adv.record_repayment(month=1 + step % 12, year=2024, amount=repayment, paid_date=datetime(2024, 1, 1))
        paid += repayment

        assert adv.paid_amount == paid
        assert adv.remaining_amount == adv.amount - adv.paid_amount
        assert adv.repayment_status == _expected_status(adv.amount, adv.paid_amount)
