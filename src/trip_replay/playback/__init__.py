"""Deterministic trajectory replay.

Public API
----------
PlaybackScheduler - load/play/pause/seek/set_speed/reset state machine
PlaybackTicker    - background thread driving the scheduler's ticks
PlaybackFrame     - per-step view for the presentation layer
PlaybackState     - IDLE / LOADED / PLAYING / PAUSED
"""

from trip_replay.playback.models import PlaybackFrame, PlaybackState
from trip_replay.playback.scheduler import PlaybackScheduler
from trip_replay.playback.ticker import PlaybackTicker

__all__ = [
    "PlaybackFrame",
    "PlaybackScheduler",
    "PlaybackState",
    "PlaybackTicker",
]
