"""Rate limiting guard for message handlers.

This module wires the rate limiting adapter into the command handling layer.

Design goals:
- Minimal coupling: handlers depend on ``check_rate_limit`` only.
- Swap-friendly: storage backend can be replaced behind an abstract
  interface.
- No hidden globals: the limiter is built once by the caller (see
  ``botcore.core.factory``) and passed in explicitly.

A rejection is an expected outcome, so it is logged at INFO and returned as
a result. ``enforce_rate_limit`` is offered for handlers that prefer to
unwind with an exception.
"""

from __future__ import annotations

import logging
import math

from botcore.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from botcore.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from botcore.core.config import RateLimitSettings, settings
from botcore.core.errors import RateLimitExceededError
from botcore.core.logging import bind_actor

logger = logging.getLogger(__name__)


def build_rate_limiter(rate_settings: RateLimitSettings | None = None) -> AbstractRateLimiter:
    """Build a rate limiter from configuration.

    Args:
        rate_settings: Rate limit settings; defaults to the environment ones.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    cfg = rate_settings or settings.rate_limit
    return InMemorySlidingWindowRateLimiter(
        limit=cfg.requests,
        window_seconds=cfg.window_seconds,
    )


def check_rate_limit(
    limiter: AbstractRateLimiter,
    actor_key: str,
    *,
    enabled: bool = True,
) -> RateLimitResult:
    """Consume one request for ``actor_key`` and log the decision.

    Args:
        limiter: Limiter owned by the calling component.
        actor_key: Stable actor identifier (e.g. user id).
        enabled: When False the limiter is bypassed and the request allowed.

    Returns:
        RateLimitResult: The limiter's decision.
    """

    if not enabled:
        return RateLimitResult(
            allowed=True,
            limit=0,
            remaining=0,
            reset_at=0.0,
            retry_after_seconds=None,
        )

    result = limiter.consume(actor_key)

    with bind_actor(actor_key):
        if result.allowed:
            logger.debug(
                "rate_limit.allowed",
                extra={"limit": result.limit, "remaining": result.remaining},
            )
        else:
            logger.info(
                "rate_limit.exceeded",
                extra={
                    "limit": result.limit,
                    "retry_after_s": result.retry_after_seconds or 0,
                },
            )
    return result


def enforce_rate_limit(
    limiter: AbstractRateLimiter,
    actor_key: str,
    *,
    enabled: bool = True,
) -> RateLimitResult:
    """Like ``check_rate_limit`` but raise when the actor is over quota.

    Raises:
        RateLimitExceededError: When the request is rejected.
    """

    result = check_rate_limit(limiter, actor_key, enabled=enabled)
    if result.allowed:
        return result

    raise RateLimitExceededError(
        code="rate_limit_exceeded",
        message=format_retry_message(result),
        details={
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
            "retry_after": float(result.retry_after_seconds or 0),
        },
    )


def format_retry_message(result: RateLimitResult) -> str:
    """Render the wait hint shown to a throttled user."""

    wait = result.retry_after_seconds or 0
    if wait <= 0:
        return "Rate limit exceeded. Try again now."
    if wait < 60:
        unit = "second" if wait == 1 else "seconds"
        return f"Rate limit exceeded. Try again in {wait} {unit}."
    minutes = math.ceil(wait / 60)
    unit = "minute" if minutes == 1 else "minutes"
    return f"Rate limit exceeded. Try again in {minutes} {unit}."
