"""Application-level exception types.

This module defines domain errors used across the rate limiter guard and the
playback sessions, enabling consistent error handling and logging in the
request handlers that sit on top of this package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and callers.

    Fields are optional so each error only carries what is relevant to it.
    """

    code: str
    message: str
    hint: str
    index: int
    source_index: int
    target_index: int
    queue_length: int
    limit: int
    remaining: int
    reset_at: float
    retry_after: float
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


class RateLimitExceededError(AppError):
    """Raised by the rate limit guard when an actor is over quota."""


class PlaybackAppError(AppError):
    """Base class for playback session conditions."""


class QueueEmptyError(PlaybackAppError):
    """Raised when there is nothing left to play.

    This is an expected terminal state of a session, not a fault. Callers are
    expected to catch it and tell the user the queue is empty.
    """

    def __init__(self, details: ErrorDetails | None = None) -> None:
        super().__init__(code="queue_empty", message="queue is empty", details=details)


class QueueIndexError(PlaybackAppError):
    """Raised when a queue position does not exist."""

    def __init__(self, details: ErrorDetails | None = None) -> None:
        super().__init__(
            code="index_out_of_range",
            message="index out of range",
            details=details,
        )
