"""
Domain error taxonomy.

Every failure raised by the resolver, the engine or the services is a
``CustomsError`` subclass carrying an ``ErrorCode``, so callers can map
errors to responses without string matching.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for customs and profitability operations."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    MISSING_CONFIG = "missing_config"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND_OR_UNAUTHORIZED = "not_found_or_unauthorized"


class CustomsError(Exception):
    """Base error for customs simulation and profitability operations."""

    code: ErrorCode = ErrorCode.INVALID_INPUT

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize with a human-readable message and optional details."""
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.code.value}: {self.message} ({self.details})"
        return f"{self.code.value}: {self.message}"


class InvalidInputError(CustomsError):
    """Missing monetary basis or required rate inputs."""

    code = ErrorCode.INVALID_INPUT


class NotFoundError(CustomsError):
    """Referenced tariff line, study case or record does not exist."""

    code = ErrorCode.NOT_FOUND


class MissingConfigError(CustomsError):
    """Year-scoped administrative constants have not been configured."""

    code = ErrorCode.MISSING_CONFIG


class UnauthorizedError(CustomsError):
    """Resource exists but belongs to another user."""

    code = ErrorCode.UNAUTHORIZED


class NotFoundOrUnauthorizedError(NotFoundError):
    """Study case is absent or not owned by the requesting user."""

    code = ErrorCode.NOT_FOUND_OR_UNAUTHORIZED
