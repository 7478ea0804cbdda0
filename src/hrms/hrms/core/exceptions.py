from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, errors: Optional[Sequence[dict]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are missing or invalid."""

    status_code = 401


class MissingTokenError(AuthenticationError):
    def __init__(self, message: str = "Access token required"):
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    def __init__(self, message: str = "Token expired"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Raised when a write collides with existing state."""


class DuplicateKeyError(ConflictError):
    """Raised when the database rejects a row on a unique key."""

    def __init__(self, message: str = "Duplicate entry error"):
        super().__init__(message)
