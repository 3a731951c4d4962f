"""Unit tests for the in-memory sliding-window rate limiter adapter."""

import random
import threading
from unittest.mock import Mock

import pytest

from botcore.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter


def test_allows_up_to_limit_in_same_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=3, window_seconds=60, clock=clock)

    assert limiter.admit("k") is True
    assert limiter.admit("k") is True
    result = limiter.consume("k")
    assert result.allowed is True
    assert result.remaining == 0


def test_blocks_when_over_limit() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock)

    assert limiter.admit("k") is True
    assert limiter.admit("k") is True

    blocked = limiter.consume("k")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.reset_at == 1060.0
    assert blocked.retry_after_seconds == 60


def test_rejection_does_not_consume_quota() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=10, clock=clock)

    assert limiter.admit("k") is True
    clock.return_value = 1005.0
    assert limiter.admit("k") is True
    before = limiter.remaining("k")

    for _ in range(5):
        assert limiter.admit("k") is False

    assert limiter.remaining("k") == before == 0

    # Only the first admission expires, so exactly one slot frees up.
    clock.return_value = 1010.0
    assert limiter.admit("k") is True
    assert limiter.admit("k") is False


def test_window_slides() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=3, window_seconds=10, clock=clock)

    for offset in (0.0, 1.0, 2.0):
        clock.return_value = 1000.0 + offset
        assert limiter.admit("k") is True
    assert limiter.admit("k") is False

    clock.return_value = 1010.5
    assert limiter.remaining("k") == 1
    assert limiter.admit("k") is True
    assert limiter.admit("k") is False


def test_entry_exactly_window_old_is_expired() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=10, clock=clock)

    assert limiter.admit("k") is True
    clock.return_value = 1009.999
    assert limiter.admit("k") is False
    clock.return_value = 1010.0
    assert limiter.admit("k") is True


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.admit("k1") is True
    assert limiter.admit("k1") is False

    assert limiter.admit("k2") is True
    assert limiter.admit("") is True
    assert limiter.admit("") is False


def test_remaining_for_unknown_key_is_full_quota() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=4, window_seconds=60)

    assert limiter.remaining("nobody") == 4


def test_reset_at_without_history_is_now() -> None:
    clock = Mock(return_value=1234.5)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock)

    assert limiter.reset_at("nobody") == 1234.5


def test_reset_at_reports_oldest_expiry_even_when_not_limited() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=5, window_seconds=60, clock=clock)

    limiter.admit("k")
    clock.return_value = 1020.0
    limiter.admit("k")

    assert limiter.remaining("k") == 3
    assert limiter.reset_at("k") == 1060.0


def test_reset_at_does_not_prune() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=10, clock=clock)

    limiter.admit("k")
    clock.return_value = 1100.0

    assert limiter.reset_at("k") == 1010.0
    assert limiter.reset_at("k") == 1010.0
    # A pruning read drops the stale entry afterwards.
    assert limiter.remaining("k") == 2
    assert limiter.reset_at("k") == 1100.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
        {"limit": 1, "window_seconds": -1.5},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemorySlidingWindowRateLimiter(**kwargs)


class SteppingClock:
    """Thread-safe clock advancing by a fixed step on every read.

    The last value handed to each thread is kept so a worker can tell which
    timestamp the limiter recorded for its own call.
    """

    def __init__(self, start: float = 1_000.0, step: float = 0.01) -> None:
        self._now = start
        self._step = step
        self._lock = threading.Lock()
        self._local = threading.local()

    def __call__(self) -> float:
        with self._lock:
            self._now += self._step
            now = self._now
        self._local.last = now
        return now

    @property
    def last(self) -> float:
        return self._local.last


def test_concurrent_admits_never_exceed_quota_in_any_window() -> None:
    limit = 5
    window = 1.0
    clock = SteppingClock()
    limiter = InMemorySlidingWindowRateLimiter(limit=limit, window_seconds=window, clock=clock)
    actors = [f"user-{i}" for i in range(8)]
    admitted: dict[str, list[float]] = {actor: [] for actor in actors}
    record_lock = threading.Lock()

    def _worker(seed: int) -> None:
        rng = random.Random(seed)
        for _ in range(200):
            actor = rng.choice(actors)
            if limiter.admit(actor):
                with record_lock:
                    admitted[actor].append(clock.last)

    threads = [threading.Thread(target=_worker, args=(seed,)) for seed in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert any(admitted.values())
    for actor, stamps in admitted.items():
        stamps.sort()
        for first, later in zip(stamps, stamps[limit:]):
            assert later - first >= window - 1e-9, actor
