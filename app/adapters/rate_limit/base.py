"""Rate limiter interfaces.

The API should depend on this abstraction (not the concrete implementation)
so we can swap the counting strategy (e.g., sliding log, token bucket) or the
storage backend later with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of an admission decision.

    Attributes:
        allowed: Whether the request is admitted.
        limit: Max requests per window.
        count: Requests counted in the current window (after this decision).
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window expires.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    count: int
    remaining: int
    reset_at: float
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    limit: int
    window_seconds: int

    @abstractmethod
    def admit(self, key: str, now: float | None = None) -> RateLimitResult:
        """Decide whether a request for ``key`` may proceed.

        Args:
            key: Opaque client identifier (e.g., IP address).
            now: Current UNIX time; defaults to the limiter's clock.

        Returns:
            RateLimitResult describing whether it was admitted.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self, now: float | None = None) -> int:
        """Remove expired state.

        Args:
            now: Current UNIX time; defaults to the limiter's clock.

        Returns:
            Number of entries removed.
        """
        raise NotImplementedError
