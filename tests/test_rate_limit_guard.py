"""Tests for the rate limit guard used by message handlers."""

import json
import logging
from io import StringIO
from unittest.mock import Mock

import pytest

from botcore.adapters.rate_limit.base import RateLimitResult
from botcore.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from botcore.core.config import RateLimitSettings
from botcore.core.errors import RateLimitExceededError
from botcore.core.logging import ActorIdFilter, JsonFormatter, get_actor_id, hash_actor_key
from botcore.core.rate_limit import (
    build_rate_limiter,
    check_rate_limit,
    enforce_rate_limit,
    format_retry_message,
)


def _limiter(limit: int = 1) -> InMemorySlidingWindowRateLimiter:
    return InMemorySlidingWindowRateLimiter(
        limit=limit,
        window_seconds=60,
        clock=Mock(return_value=1000.0),
    )


def test_build_rate_limiter_uses_settings() -> None:
    limiter = build_rate_limiter(RateLimitSettings(requests=3, window_seconds=15))

    assert isinstance(limiter, InMemorySlidingWindowRateLimiter)
    assert limiter.limit == 3
    assert limiter.window_seconds == 15


def test_build_rate_limiter_returns_fresh_instances() -> None:
    cfg = RateLimitSettings(requests=1, window_seconds=60)

    first = build_rate_limiter(cfg)
    second = build_rate_limiter(cfg)

    assert first is not second
    assert first.admit("k") is True
    assert second.admit("k") is True


def test_rejection_is_logged_below_error(caplog: pytest.LogCaptureFixture) -> None:
    limiter = _limiter()
    check_rate_limit(limiter, "user-1")

    with caplog.at_level(logging.DEBUG, logger="botcore.core.rate_limit"):
        result = check_rate_limit(limiter, "user-1")

    assert result.allowed is False
    records = [r for r in caplog.records if r.getMessage() == "rate_limit.exceeded"]
    assert len(records) == 1
    assert records[0].levelno == logging.INFO
    assert "user-1" not in str(records[0].__dict__)


def test_decision_is_tagged_with_hashed_actor_id() -> None:
    logger = logging.getLogger("botcore.core.rate_limit")
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(ActorIdFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    previous_level = logger.level
    logger.setLevel(logging.INFO)
    limiter = _limiter()

    try:
        check_rate_limit(limiter, "123456789012345678")
        check_rate_limit(limiter, "123456789012345678")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)

    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    exceeded = [line for line in lines if line["message"] == "rate_limit.exceeded"]
    assert len(exceeded) == 1
    assert exceeded[0]["actor_id"] == hash_actor_key("123456789012345678")
    assert "key_hash" not in exceeded[0]
    assert "123456789012345678" not in stream.getvalue()
    assert get_actor_id() is None


def test_disabled_guard_bypasses_limiter() -> None:
    limiter = Mock()

    result = check_rate_limit(limiter, "user-1", enabled=False)

    assert result.allowed is True
    limiter.consume.assert_not_called()


def test_enforce_raises_with_retry_details() -> None:
    limiter = _limiter()
    enforce_rate_limit(limiter, "user-1")

    with pytest.raises(RateLimitExceededError) as excinfo:
        enforce_rate_limit(limiter, "user-1")

    err = excinfo.value
    assert err.code == "rate_limit_exceeded"
    assert err.details is not None
    assert err.details["retry_after"] == 60.0
    assert "1 minute" in err.message


@pytest.mark.parametrize(
    ("retry_after", "expected"),
    [
        (0, "Try again now."),
        (1, "Try again in 1 second."),
        (42, "Try again in 42 seconds."),
        (60, "Try again in 1 minute."),
        (61, "Try again in 2 minutes."),
    ],
)
def test_format_retry_message(retry_after: int, expected: str) -> None:
    result = RateLimitResult(
        allowed=False,
        limit=5,
        remaining=0,
        reset_at=0.0,
        retry_after_seconds=retry_after,
    )

    assert format_retry_message(result).endswith(expected)
