"""Pydantic schemas for playback sessions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Track(BaseModel):
    """A playable item resolved by the downloader before it is queued.

    Tracks are immutable; the session moves the same instance from the queue
    into the current slot.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field("", description="Identifier assigned by the source site.")
    title: str = Field(..., description="Human readable title.")
    url: str = Field(..., description="Resolved source locator of the audio stream.")
    duration: float = Field(0.0, ge=0, description="Length in seconds (0 when unknown).")
    thumbnail: str = Field("", description="Thumbnail locator.")
    uploader: str = Field("", description="Channel or artist that published the track.")


class PlaybackState(str, Enum):
    """Transport state of a session."""

    IDLE = "idle"
    PAUSED = "paused"
    PLAYING = "playing"


class PlaybackSnapshot(BaseModel):
    """Consistent, independent view of a session taken under its lock."""

    model_config = ConfigDict(frozen=True)

    queue: tuple[Track, ...] = ()
    current: Track | None = None
    playing: bool = False
    volume: float = 1.0
    connected: bool = False
    channel_id: str | None = None

    @property
    def state(self) -> PlaybackState:
        if self.current is None:
            return PlaybackState.IDLE
        return PlaybackState.PLAYING if self.playing else PlaybackState.PAUSED
