"""Rate limiter interfaces.

Message handlers should depend on this abstraction (not the concrete
implementation) so the storage backend can be swapped later with minimal
changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check/consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the oldest recorded request leaves
            the window. This is the next slot to free up, not necessarily the
            moment the actor becomes unblocked.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for per-actor rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Check and, when allowed, record one request for ``key``.

        Rejected attempts must not be recorded.
        """
        raise NotImplementedError

    @abstractmethod
    def remaining(self, key: str) -> int:
        """Return how many more requests ``key`` may make right now."""
        raise NotImplementedError

    @abstractmethod
    def reset_at(self, key: str) -> float:
        """Return when the oldest recorded request of ``key`` expires."""
        raise NotImplementedError

    def admit(self, key: str) -> bool:
        """Return True and record the request if ``key`` is within quota."""
        return self.consume(key).allowed
