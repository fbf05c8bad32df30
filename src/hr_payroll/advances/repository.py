from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus, RepaymentStatus
from .model import Advance, Repayment


class AdvanceRepository(Protocol):
    def get_by_id(self, advance_id: int) -> Optional[Advance]:
        raise NotImplementedError

    def create(self, advance: Advance) -> int:
        raise NotImplementedError

    def update(self, advance: Advance) -> bool:
        """Persist approval and balance fields (repayments are appended separately)."""
        raise NotImplementedError

    def add_repayment(self, advance_id: int, repayment: Repayment) -> int:
        raise NotImplementedError

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        approval_status: Optional[ApprovalStatus] = None,
        repayment_status: Optional[RepaymentStatus] = None,
    ) -> Sequence[Advance]:
        raise NotImplementedError

    def list_outstanding(self, employee_id: int, *, for_update: bool = False) -> Sequence[Advance]:
        """Approved, salary-deduction advances that still have a balance."""
        raise NotImplementedError
