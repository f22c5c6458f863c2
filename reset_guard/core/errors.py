"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    hint: str
    fields: dict[str, list[str]]
    retry_after: int
    provider: str
    http_status: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)

    @property
    def field_errors(self) -> dict[str, list[str]]:
        """Messages keyed by the form field they belong to."""
        if not self.details:
            return {}
        return self.details.get("fields", {})


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""

    @classmethod
    def with_messages(cls, fields: dict[str, list[str]]) -> "ValidationAppError":
        """Build a field-associated validation error.

        The first message becomes the top-level message, matching what a form
        would show in a summary banner.
        """
        first = next((msgs[0] for msgs in fields.values() if msgs), "The given data was invalid.")
        return cls(
            code="validation_failed",
            message=first,
            details={"fields": fields},
        )


class TooManyAttemptsError(AppError):
    """Raised when a requester exceeds the allowed request rate."""

    @property
    def retry_after(self) -> int:
        if not self.details:
            return 0
        return int(self.details.get("retry_after", 0))


class ServiceUnavailableAppError(AppError):
    """Raised when a downstream provider cannot be reached; safe to retry."""


class ChallengeUnavailableError(ServiceUnavailableAppError):
    """Raised when the CAPTCHA provider cannot give a verdict."""


class ResetLinkDeliveryError(ServiceUnavailableAppError):
    """Raised when a reset link could not be issued or delivered."""
