"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Windows start at a key's first request, not at wall-clock boundaries.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _WindowState:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per key inside a fixed window.

    The first request from a key opens a window of ``window_seconds``; up to
    ``limit`` requests are admitted until the window expires. A request at
    exactly ``reset_at`` opens a new window.

    Important:
        This is a fixed-window counter, not a sliding log. A client can send
        ``limit`` requests at the end of one window and ``limit`` more right
        after it expires, so up to ``2 * limit`` requests may pass within a
        short span around the boundary.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of admitted requests per window.
            window_seconds: Size of the window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._state_by_key: dict[str, _WindowState] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    def _build_allowed_result(self, state: _WindowState) -> RateLimitResult:
        """Build a RateLimitResult for an admitted request."""
        return RateLimitResult(
            allowed=True,
            limit=self.limit,
            count=state.count,
            remaining=max(0, self.limit - state.count),
            reset_at=state.reset_at,
            retry_after_seconds=None,
        )

    def _build_blocked_result(self, state: _WindowState, now: float) -> RateLimitResult:
        """Build a RateLimitResult for a rejected request."""
        retry_after = max(0, int(math.ceil(state.reset_at - now)))
        return RateLimitResult(
            allowed=False,
            limit=self.limit,
            count=state.count,
            remaining=0,
            reset_at=state.reset_at,
            retry_after_seconds=retry_after,
        )

    def admit(self, key: str, now: float | None = None) -> RateLimitResult:
        """Admit or reject a request for the provided key.

        Expired entries are treated as absent and overwritten. A rejected
        request leaves the entry untouched.

        Args:
            key: Unique identifier for rate limiting (e.g., client IP).
            now: Current UNIX time; defaults to the configured clock.

        Returns:
            RateLimitResult with the admission decision and metadata.
        """
        if now is None:
            now = self._clock()

        with self._lock:
            state = self._state_by_key.get(key)

            if state is None or state.reset_at <= now:
                state = _WindowState(count=1, reset_at=now + self.window_seconds)
                self._state_by_key[key] = state
                return self._build_allowed_result(state)

            if state.count < self.limit:
                state.count += 1
                return self._build_allowed_result(state)

            return self._build_blocked_result(state, now)

    def sweep(self, now: float | None = None) -> int:
        """Delete every entry whose window has expired.

        Args:
            now: Current UNIX time; defaults to the configured clock.

        Returns:
            Number of entries removed.
        """
        if now is None:
            now = self._clock()

        with self._lock:
            expired = [
                key for key, state in self._state_by_key.items() if state.reset_at <= now
            ]
            for key in expired:
                del self._state_by_key[key]

        return len(expired)

