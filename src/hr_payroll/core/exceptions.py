from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, *, fields: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.fields = dict(fields or {})

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.fields:
            body["errors"] = self.fields
        return body


class BusinessRuleError(DomainError):
    """Raised when a well-formed request is rejected by a business rule.

    `code` is machine-checkable; `details` carries remediation data such as
    the list of missing profile fields.
    """

    def __init__(self, message: str, *, code: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["code"] = self.code
        body.update(self.details)
        return body


class DuplicateError(BusinessRuleError):
    """Raised when a storage uniqueness constraint rejects an insert."""

    def __init__(self, message: str, *, code: str = "DUPLICATE"):
        super().__init__(message, code=code)


class NotFoundError(DomainError):
    """Raised when a looked-up entity does not exist."""

    status_code = 404


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
