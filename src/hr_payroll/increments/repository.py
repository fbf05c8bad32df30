from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Increment


class IncrementRepository(Protocol):
    def create(self, increment: Increment) -> int:
        raise NotImplementedError

    def list(self, *, employee_id: Optional[int] = None, year: Optional[int] = None) -> Sequence[Increment]:
        """`year` filters on the effective date."""
        raise NotImplementedError
