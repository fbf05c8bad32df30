from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for login accounts.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        email: str,
        employee_code: str,
        employee_id: Optional[int],
        password_hash: str,
        role: Role,
        permissions: frozenset,
    ) -> int:
        """Raises DuplicateError when the email or employee code is taken."""
        raise NotImplementedError

    def set_password(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def set_otp(self, user_id: int, *, code: Optional[str], expire: Optional[datetime]) -> bool:
        raise NotImplementedError

    def touch_login(self, user_id: int, *, at: datetime) -> bool:
        raise NotImplementedError
