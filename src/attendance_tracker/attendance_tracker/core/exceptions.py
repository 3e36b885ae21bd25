from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(DomainError):
    """Raised when a request is well-formed but not allowed in the current state."""


class NotFoundError(DomainError):
    """Raised when a referenced user or resource does not exist."""


class ValidationError(DomainError):
    """Raised when input data is malformed.

    ``errors`` maps field names to messages, when the failure is field-level.
    """

    def __init__(self, message: str, errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConflictError(DomainError):
    """Raised when the store rejects a write that violates a uniqueness constraint."""
