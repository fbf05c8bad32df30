from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import DeductionStatus, IncentiveStatus
from .model import Deduction, Incentive


class IncentiveRepository(Protocol):
    def get_by_id(self, incentive_id: int) -> Optional[Incentive]:
        raise NotImplementedError

    def create(self, incentive: Incentive) -> int:
        raise NotImplementedError

    def set_status(self, incentive_id: int, *, status: IncentiveStatus, approved_by: Optional[int]) -> bool:
        raise NotImplementedError

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[IncentiveStatus] = None,
        for_update: bool = False,
    ) -> Sequence[Incentive]:
        raise NotImplementedError

    def mark_paid(self, incentive_ids: Sequence[int], *, salary_id: int) -> int:
        """Approved -> Paid with a back-reference; returns rows changed."""
        raise NotImplementedError


class DeductionRepository(Protocol):
    def get_by_id(self, deduction_id: int) -> Optional[Deduction]:
        raise NotImplementedError

    def create(self, deduction: Deduction) -> int:
        raise NotImplementedError

    def set_status(self, deduction_id: int, *, status: DeductionStatus, approved_by: Optional[int]) -> bool:
        raise NotImplementedError

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[DeductionStatus] = None,
        for_update: bool = False,
    ) -> Sequence[Deduction]:
        raise NotImplementedError

    def mark_deducted(self, deduction_ids: Sequence[int], *, salary_id: int) -> int:
        """Approved -> Deducted with a back-reference; returns rows changed."""
        raise NotImplementedError
