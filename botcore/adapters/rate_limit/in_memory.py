"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running several bot processes multiplies the effective
  limit.
- Thread-safe: each actor key has its own lock, so callers working for
  different actors never wait on each other. A short-lived table lock only
  guards creation of new per-key entries.
- Entries are never evicted. A long running process keeps one (possibly
  empty) deque per actor it has seen.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from botcore.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _ActorHistory:
    lock: threading.Lock = field(default_factory=threading.Lock)
    timestamps: deque[float] = field(default_factory=deque)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter admitting at most ``limit`` requests in any trailing window.

    Each actor key keeps the timestamps of its admitted requests, oldest
    first. Timestamps that fell out of the window are dropped lazily whenever
    the key is checked. Rejected attempts are not recorded, so an actor that
    keeps retrying while blocked does not extend its own lockout.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of admitted requests per window.
            window_seconds: Length of the sliding window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._table_lock = threading.Lock()
        self._history_by_key: dict[str, _ActorHistory] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _get_history(self, key: str) -> _ActorHistory:
        history = self._history_by_key.get(key)
        if history is None:
            with self._table_lock:
                history = self._history_by_key.setdefault(key, _ActorHistory())
        return history

    def _prune_locked(self, history: _ActorHistory, now: float) -> None:
        timestamps = history.timestamps
        while timestamps and now - timestamps[0] >= self._window_seconds:
            timestamps.popleft()

    def _build_allowed_result(self, *, remaining: int, reset_at: float) -> RateLimitResult:
        """Build a RateLimitResult for an allowed request."""
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=remaining,
            reset_at=reset_at,
            retry_after_seconds=None,
        )

    def _build_blocked_result(self, *, now: float, reset_at: float) -> RateLimitResult:
        """Build a RateLimitResult for a blocked request."""
        retry_after = max(0, int(math.ceil(reset_at - now)))
        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=reset_at,
            retry_after_seconds=retry_after,
        )

    def consume(self, key: str) -> RateLimitResult:
        """Admit one request for ``key`` if the trailing window has room.

        Args:
            key: Actor identifier. Any string is accepted, including "".

        Returns:
            RateLimitResult with allowance decision and metadata.
        """
        history = self._get_history(key)

        with history.lock:
            now = self._clock()
            self._prune_locked(history, now)
            timestamps = history.timestamps

            if len(timestamps) < self._limit:
                timestamps.append(now)
                return self._build_allowed_result(
                    remaining=self._limit - len(timestamps),
                    reset_at=timestamps[0] + self._window_seconds,
                )

            return self._build_blocked_result(
                now=now,
                reset_at=timestamps[0] + self._window_seconds,
            )

    def remaining(self, key: str) -> int:
        """Prune expired requests of ``key`` and return the free slots."""
        history = self._get_history(key)

        with history.lock:
            self._prune_locked(history, self._clock())
            return max(0, self._limit - len(history.timestamps))

    def reset_at(self, key: str) -> float:
        """Return when the oldest recorded request of ``key`` leaves the window.

        Returns the current time when nothing is recorded. History is not
        pruned here, so the value may lie in the past when the oldest entry
        is already stale; callers only use it to display a wait time.
        """
        history = self._history_by_key.get(key)
        if history is None:
            return self._clock()

        with history.lock:
            if not history.timestamps:
                return self._clock()
            return history.timestamps[0] + self._window_seconds
