"""Retry helper with exponential backoff for unreliable async calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(RuntimeError):
    """Raised when every attempt of a retried operation failed.

    The last underlying error is available as ``__cause__`` and ``last_error``.
    """

    def __init__(self, name: str, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"{name} failed after {attempts} attempts: {last_error}")
        self.name = name
        self.attempts = attempts
        self.last_error = last_error


def backoff_delay(attempt: int, initial_delay_seconds: float) -> float:
    """Delay before the retry following failed attempt ``attempt`` (1-based)."""
    return initial_delay_seconds * (2 ** (attempt - 1))


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    initial_delay_seconds: float = 1.0,
    name: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the attempts run out.

    After failed attempt ``n`` the helper waits
    ``initial_delay_seconds * 2 ** (n - 1)`` before trying again (1s, 2s, 4s
    with the defaults). Cancellation is never retried.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt.
        max_attempts: Total attempts, including the first.
        initial_delay_seconds: Delay after the first failure.
        name: Label used in logs and in the final error message.
        sleep: Awaitable sleep function (injectable for tests).

    Returns:
        The result of the first successful attempt.

    Raises:
        ValueError: If max_attempts is lower than 1.
        RetryExhaustedError: If every attempt failed.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            if attempt >= max_attempts:
                logger.error(
                    "retry.exhausted",
                    extra={"operation": name, "max_attempts": max_attempts},
                )
                raise RetryExhaustedError(name, max_attempts, exc) from exc

            delay = backoff_delay(attempt, initial_delay_seconds)
            logger.warning(
                "retry.attempt_failed",
                extra={
                    "operation": name,
                    "attempt": attempt,
                    "max_attempts": max_attempts,
                    "delay_s": delay,
                    "error_type": type(exc).__name__,
                },
            )
        await sleep(delay)
        attempt += 1
