"""Application exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional so each error only carries what applies to it.
    """

    code: str
    message: str
    hint: str
    http_status: int
    limit: int
    remaining: int
    window_seconds: int
    reset_at: str
    retry_after: int
    attempts: int
    service: str
    transcription_id: str
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


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class NotFoundAppError(AppError):
    """Raised when a requested resource or route does not exist."""


class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget for the current window."""


class StorageAppError(AppError):
    """Raised when the document store fails."""


class ExternalServiceAppError(AppError):
    """Raised when an external dependency (audio host, speech provider) fails."""
