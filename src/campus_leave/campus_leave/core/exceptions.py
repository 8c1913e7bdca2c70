from __future__ import annotations

from typing import Any, Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every error carries a machine-readable ``kind`` and the HTTP status the
    API layer answers with.
    """

    kind = "domain_error"
    status_code = 400

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message or self.default_message()
        self.details: dict[str, Any] = dict(details or {})

    @classmethod
    def default_message(cls) -> str:
        return cls.__name__

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation_error"
    status_code = 400

    def __init__(self, message: str = "Validation failed", *, fields: Optional[Mapping[str, str]] = None):
        super().__init__(message, details={"fields": dict(fields)} if fields else None)
        self.fields: dict[str, str] = dict(fields or {})


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are missing or invalid."""

    kind = "unauthorized"
    status_code = 401


class AuthorizationError(DomainError):
    """Raised when an authenticated user acts outside their scope."""

    kind = "forbidden"
    status_code = 403


class NotFoundError(DomainError):
    kind = "not_found"
    status_code = 404


class ConflictError(DomainError):
    """State-machine or uniqueness violation."""

    kind = "conflict"
    status_code = 409


class InternalError(DomainError):
    """Storage or collaborator failure. The message never carries driver detail."""

    kind = "internal_error"
    status_code = 500

    @classmethod
    def default_message(cls) -> str:
        return "Internal server error"
