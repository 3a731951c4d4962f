"""Composition root for the bot's stateful components.

Centralizes construction (logging, rate limiter, session registry) so the
message handling layer receives explicitly built instances instead of
reaching for module-level singletons.
"""

from __future__ import annotations

from dataclasses import dataclass

from botcore.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from botcore.core.config import Settings, settings as default_settings
from botcore.core.logging import configure_logging
from botcore.core.rate_limit import build_rate_limiter, check_rate_limit
from botcore.services.session_registry import PlaybackSessionRegistry


@dataclass
class BotCore:
    """Stateful components shared by all message handlers of one process."""

    settings: Settings
    rate_limiter: AbstractRateLimiter
    sessions: PlaybackSessionRegistry

    def check_rate_limit(self, actor_key: str) -> RateLimitResult:
        """Consume one request for ``actor_key`` honouring the enabled flag."""
        return check_rate_limit(
            self.rate_limiter,
            actor_key,
            enabled=self.settings.rate_limit.enabled,
        )


def create_core(settings: Settings | None = None, *, setup_logging: bool = True) -> BotCore:
    """Create the rate limiter and session registry from configuration.

    Args:
        settings: Settings to build from; defaults to the environment ones.
        setup_logging: Configure the root logger first (disable in tests or
            when the host application owns logging).

    Returns:
        BotCore holding freshly constructed components.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if setup_logging:
        configure_logging(cfg.log)

    return BotCore(
        settings=cfg,
        rate_limiter=build_rate_limiter(cfg.rate_limit),
        sessions=PlaybackSessionRegistry(cfg.playback),
    )
