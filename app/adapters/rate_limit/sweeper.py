"""Background task purging expired rate limiter entries."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from app.adapters.rate_limit.base import AbstractRateLimiter

logger = logging.getLogger(__name__)


class RateLimitSweeper:
    """Periodically call ``sweep()`` on a set of limiters.

    Bounds memory growth from one-shot or abandoned client keys. The task is
    started from the application lifespan and cancelled on shutdown.
    """

    def __init__(
        self,
        limiters: Iterable[AbstractRateLimiter],
        *,
        interval_seconds: float = 60.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self._limiters = list(limiters)
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep_once(self) -> int:
        """Sweep every limiter once and return the total entries removed."""
        removed = 0
        for limiter in self._limiters:
            try:
                removed += limiter.sweep()
            except Exception:
                logger.exception(
                    "rate_limit.sweep_failed",
                    extra={"limiter": type(limiter).__name__},
                )
        if removed:
            logger.debug("rate_limit.swept", extra={"removed": removed})
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_seconds)
            self.sweep_once()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="rate-limit-sweeper")
        logger.info(
            "rate_limit.sweeper_started",
            extra={
                "interval_s": self._interval_seconds,
                "limiters": len(self._limiters),
            },
        )

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            # Propagate when the caller itself is being cancelled
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        finally:
            self._task = None
        logger.info("rate_limit.sweeper_stopped")
