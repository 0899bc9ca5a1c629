"""Playback state models."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from trip_replay.geo.models import CoordinateSample


class PlaybackState(enum.Enum):
    """Scheduler state.  ``LOADED`` and ``PAUSED`` are both suspended."""

    IDLE = "idle"
    LOADED = "loaded"
    PLAYING = "playing"
    PAUSED = "paused"

    @property
    def is_suspended(self) -> bool:
        return self in (PlaybackState.LOADED, PlaybackState.PAUSED)


@dataclass(frozen=True)
class PlaybackFrame:
    """What the presentation layer needs to draw one replay step."""

    state: PlaybackState
    index: int
    sample: CoordinateSample | None
    speed_kmh: float
    """Speed between the previous sample and the current one."""

    progress_percent: float
    elapsed_virtual_ms: int
    duration_virtual_ms: int
    speed_multiplier: float
    point_count: int
