"""Rate limiting adapters.

This package provides a small abstraction layer so the bot can start with an
in-memory sliding-window limiter and later migrate to a shared store without
changing the message handlers.
"""

from botcore.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from botcore.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemorySlidingWindowRateLimiter",
    "RateLimitResult",
]
