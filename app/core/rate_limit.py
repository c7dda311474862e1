"""Rate limiting dependencies for FastAPI routes.

This module wires the rate limiting adapters into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- No hidden singletons: limiter instances are built in the app lifespan,
  stored on ``app.state.rate_limiters`` and looked up by name per request.
- Key derivation lives here, not in the limiter: the limiter only ever sees
  an opaque client key.

Rate limiting strategy:
- ``api``: every route under ``/api``.
- ``transcription``: stricter budget for transcription creation routes.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from typing import Callable, Coroutine

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.config import AppSettings, settings
from app.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)

API_LIMITER = "api"
TRANSCRIPTION_LIMITER = "transcription"


def build_rate_limiters(app_settings: AppSettings) -> dict[str, AbstractRateLimiter]:
    """Construct one independent limiter per traffic class.

    Args:
        app_settings: Application settings with the rate limit thresholds.

    Returns:
        Mapping of limiter name to limiter instance.
    """

    window = app_settings.rate_limit_window_seconds
    return {
        API_LIMITER: InMemoryFixedWindowRateLimiter(
            limit=app_settings.rate_limit_api_max_requests,
            window_seconds=window,
        ),
        TRANSCRIPTION_LIMITER: InMemoryFixedWindowRateLimiter(
            limit=app_settings.rate_limit_transcription_max_requests,
            window_seconds=window,
        ),
    }


def get_client_key(request: Request) -> str:
    """Derive the limiter key for the current request.

    Uses the first ``X-Forwarded-For`` hop when ``APP_TRUST_PROXY`` is set,
    otherwise the socket peer address.

    Args:
        request: FastAPI request.

    Returns:
        str: Client address, or ``"unknown"`` when none is available.
    """

    if settings.app.trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing client addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def format_reset_at(reset_at: float) -> str:
    """Render a UNIX timestamp as an ISO-8601 UTC string with milliseconds."""
    moment = datetime.fromtimestamp(reset_at, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_rejection(limiter: AbstractRateLimiter, result: RateLimitResult) -> RateLimitAppError:
    """Translate a rejected admission into the error surfaced to clients.

    Args:
        limiter: Limiter that rejected the request.
        result: Rejected result carrying the window reset time.

    Returns:
        RateLimitAppError with the ceiling, window length and reset time.
    """

    reset_at = format_reset_at(result.reset_at)
    return RateLimitAppError(
        code="rate_limit_exceeded",
        message=(
            f"Rate limit exceeded. Maximum {limiter.limit} requests per "
            f"{limiter.window_seconds} seconds. Reset at {reset_at}"
        ),
        details={
            "limit": result.limit,
            "remaining": result.remaining,
            "window_seconds": limiter.window_seconds,
            "reset_at": reset_at,
            "retry_after": result.retry_after_seconds or 0,
        },
    )


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Build the X-RateLimit-* and Retry-After headers for a rejection."""
    return {
        "Retry-After": str(result.retry_after_seconds or 0),
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(int(result.reset_at)),
    }


def enforce_rate_limit(name: str) -> Callable[[Request], Coroutine[None, None, None]]:
    """Create a FastAPI dependency enforcing the named limiter.

    When enabled, admits the request against the requester's budget. If the
    requester exceeds the configured rate, raises RateLimitAppError (HTTP 429).

    Usage:
        @router.post("/expensive", dependencies=[Depends(enforce_rate_limit("transcription"))])

    Args:
        name: Key of the limiter in ``app.state.rate_limiters``.

    Returns:
        Async dependency callable.
    """

    async def dependency(request: Request) -> None:
        if not settings.app.rate_limit_enabled:
            return

        limiter: AbstractRateLimiter = request.app.state.rate_limiters[name]
        key = get_client_key(request)
        key_hash = _hash_limiter_key(key)

        result = limiter.admit(key)
        if result.allowed:
            logger.debug(
                "rate_limit.allowed",
                extra={
                    "limiter": name,
                    "key_hash": key_hash,
                    "limit": result.limit,
                    "remaining": result.remaining,
                },
            )
            return

        logger.warning(
            "rate_limit.exceeded",
            extra={
                "limiter": name,
                "key_hash": key_hash,
                "limit": result.limit,
                "window_s": limiter.window_seconds,
                "retry_after_s": result.retry_after_seconds,
            },
        )

        error = build_rejection(limiter, result)
        if settings.app.rate_limit_include_headers:
            request.state.rate_limit_headers = rate_limit_headers(result)
        raise error

    dependency.__name__ = f"enforce_{name}_rate_limit"
    return dependency
