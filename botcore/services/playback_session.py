"""Playback session state machine.

A session owns the queue and transport state of one playback context (one
guild / voice channel). Message handlers run on separate threads and may
drive the same session at once, so every public method runs inside a single
per-session critical section and read accessors hand out copies.

States::

    IDLE    (no current track, not playing)
    PAUSED  (current track set, not playing)
    PLAYING (current track set, playing)

Empty-queue outcomes of ``start_or_resume`` and ``skip`` are reported with
``QueueEmptyError``; handlers catch it and tell the user.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import deque

from botcore.core.errors import QueueEmptyError, QueueIndexError
from botcore.schemas.playback import PlaybackSnapshot, PlaybackState, Track

logger = logging.getLogger(__name__)


def _clamp_volume(volume: float) -> float:
    if math.isnan(volume) or volume < 0.0:
        return 0.0
    if volume > 1.0:
        return 1.0
    return float(volume)


class PlaybackSession:
    """Thread-safe FIFO queue plus transport state for one playback context.

    Log records are emitted after the lock is released so handler I/O never
    runs inside the critical section.

    Attributes:
        context_id: Identifier of the playback context (e.g. guild id), used
            only for logging.
    """

    def __init__(self, *, volume: float = 1.0, context_id: str | None = None) -> None:
        self.context_id = context_id
        self._lock = threading.RLock()
        self._queue: deque[Track] = deque()
        self._current: Track | None = None
        self._playing = False
        self._volume = _clamp_volume(volume)
        self._connected = False
        self._channel_id: str | None = None

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"PlaybackSession(context_id={self.context_id!r}, state={self.state.value}, "
            f"queued={self.queue_length()}, volume={self.volume})"
        )

    def _log(self, level: int, event: str, **fields: object) -> None:
        logger.log(level, event, extra={"context_id": self.context_id, **fields})

    # Queue -----------------------------------------------------------------

    def enqueue(self, track: Track) -> None:
        """Append ``track`` to the tail of the queue."""

        with self._lock:
            self._queue.append(track)
            queue_length = len(self._queue)
        self._log(logging.DEBUG, "playback.enqueued", track_id=track.id, queue_length=queue_length)

    def remove_at(self, index: int) -> Track:
        """Remove and return the queued track at ``index``.

        Raises:
            QueueIndexError: If ``index`` is not a valid queue position.
        """

        with self._lock:
            length = len(self._queue)
            if not 0 <= index < length:
                raise QueueIndexError(details={"index": index, "queue_length": length})
            track = self._queue[index]
            del self._queue[index]
            return track

    def move_in_queue(self, source: int, target: int) -> None:
        """Move the track at ``source`` so that it ends up at ``target``.

        The relative order of the other tracks is preserved, e.g. moving 0 to
        2 in ``[A, B, C]`` gives ``[B, C, A]``.

        Raises:
            QueueIndexError: If either index is not a valid queue position.
        """

        with self._lock:
            length = len(self._queue)
            if not (0 <= source < length and 0 <= target < length):
                raise QueueIndexError(
                    details={
                        "source_index": source,
                        "target_index": target,
                        "queue_length": length,
                    },
                )
            if source == target:
                return
            track = self._queue[source]
            del self._queue[source]
            self._queue.insert(target, track)

    def clear_queue(self) -> None:
        """Drop every queued track, leaving the current one alone."""

        with self._lock:
            self._queue.clear()

    def queue_length(self) -> int:
        with self._lock:
            return len(self._queue)

    # Transport -------------------------------------------------------------

    def start_or_resume(self) -> Track:
        """Start playback, resuming a paused track before taking a new one.

        Returns:
            The track that is now current.

        Raises:
            QueueEmptyError: If nothing is loaded and the queue is empty.
        """

        with self._lock:
            resumed = started = False
            if self._current is None and self._queue:
                self._current = self._queue.popleft()
                started = True
            if self._current is not None:
                resumed = not started and not self._playing
                self._playing = True
            current = self._current
            queue_length = len(self._queue)

        if current is None:
            self._log(logging.INFO, "playback.queue_empty")
            raise QueueEmptyError()
        if started:
            self._log(logging.INFO, "playback.started", track_id=current.id, queue_length=queue_length)
        elif resumed:
            self._log(logging.INFO, "playback.resumed", track_id=current.id)
        return current

    def resume(self) -> None:
        """Set playing again if a track is loaded; otherwise do nothing."""

        with self._lock:
            if self._current is not None:
                self._playing = True

    def pause(self) -> None:
        with self._lock:
            self._playing = False

    def skip(self) -> Track:
        """Replace the current track with the queue head.

        The playing flag is left as it was. When the queue is empty the
        session goes idle before the condition is reported.

        Returns:
            The new current track.

        Raises:
            QueueEmptyError: If there was no track to skip to.
        """

        with self._lock:
            if self._queue:
                self._current = self._queue.popleft()
            else:
                self._current = None
                self._playing = False
            current = self._current
            queue_length = len(self._queue)

        if current is None:
            self._log(logging.INFO, "playback.queue_empty")
            raise QueueEmptyError()
        self._log(logging.INFO, "playback.skipped", track_id=current.id, queue_length=queue_length)
        return current

    def stop(self) -> None:
        """Stop playback and drop the current track and the whole queue."""

        with self._lock:
            self._current = None
            self._playing = False
            self._queue.clear()
        self._log(logging.INFO, "playback.stopped")

    def set_volume(self, volume: float) -> float:
        """Store ``volume`` clamped to [0.0, 1.0] and return the stored value."""

        with self._lock:
            self._volume = _clamp_volume(volume)
            return self._volume

    # Voice connection --------------------------------------------------------

    def connect(self, channel_id: str) -> None:
        """Mark the session as attached to the voice channel ``channel_id``."""

        with self._lock:
            self._channel_id = channel_id
            self._connected = True
        self._log(logging.INFO, "playback.connected", channel_id=channel_id)

    def disconnect(self) -> None:
        with self._lock:
            self._channel_id = None
            self._connected = False
        self._log(logging.INFO, "playback.disconnected")

    # Snapshots ---------------------------------------------------------------

    @property
    def queue(self) -> list[Track]:
        """Copy of the queued tracks, head first."""
        with self._lock:
            return list(self._queue)

    @property
    def current(self) -> Track | None:
        with self._lock:
            return self._current

    @property
    def playing(self) -> bool:
        with self._lock:
            return self._playing

    @property
    def volume(self) -> float:
        with self._lock:
            return self._volume

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._connected

    @property
    def channel_id(self) -> str | None:
        with self._lock:
            return self._channel_id

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            if self._current is None:
                return PlaybackState.IDLE
            return PlaybackState.PLAYING if self._playing else PlaybackState.PAUSED

    def snapshot(self) -> PlaybackSnapshot:
        """Return every field at once, read under a single lock acquisition."""

        with self._lock:
            return PlaybackSnapshot(
                queue=tuple(self._queue),
                current=self._current,
                playing=self._playing,
                volume=self._volume,
                connected=self._connected,
                channel_id=self._channel_id,
            )
