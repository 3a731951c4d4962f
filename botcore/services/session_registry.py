"""Registry handing out one playback session per playback context."""

from __future__ import annotations

import logging
import threading

from botcore.core.config import PlaybackSettings, settings
from botcore.services.playback_session import PlaybackSession

logger = logging.getLogger(__name__)


class PlaybackSessionRegistry:
    """Thread-safe map from context id (e.g. guild id) to its session.

    Sessions are created lazily on first use with the configured default
    volume and live until ``discard`` is called.
    """

    def __init__(self, playback_settings: PlaybackSettings | None = None) -> None:
        self._settings = playback_settings or settings.playback
        self._lock = threading.Lock()
        self._sessions: dict[str, PlaybackSession] = {}

    def get(self, context_id: str) -> PlaybackSession:
        """Return the session for ``context_id``, creating it if needed."""

        with self._lock:
            session = self._sessions.get(context_id)
            if session is None:
                session = PlaybackSession(
                    volume=self._settings.default_volume,
                    context_id=context_id,
                )
                self._sessions[context_id] = session
                logger.debug("playback.session_created", extra={"context_id": context_id})
            return session

    def discard(self, context_id: str) -> PlaybackSession | None:
        """Forget the session for ``context_id`` and return it, if any."""

        with self._lock:
            return self._sessions.pop(context_id, None)

    def __contains__(self, context_id: object) -> bool:
        with self._lock:
            return context_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
