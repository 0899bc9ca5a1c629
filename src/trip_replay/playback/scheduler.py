"""PlaybackScheduler — deterministic, speed-adjustable replay of a trajectory.

The scheduler is a state machine over a logical step counter.  It never
measures wall-clock time: each call to :meth:`PlaybackScheduler.tick` advances
at most one index, so replaying the same trajectory always visits the same
indices however irregularly the driving timer fires.

::

    IDLE ──load──▶ LOADED ──play──▶ PLAYING ──pause / end──▶ PAUSED
                                      ▲                         │
                                      └──────────play───────────┘

Every control that replaces the tick cadence (``load``, ``play``, ``pause``,
``seek``, ``set_speed``, ``reset``, ``unload``) bumps a *generation* counter.
A driver passes the generation it observed to ``tick`` so that a tick
scheduled under a replaced cadence is rejected instead of double-advancing.
"""

from __future__ import annotations

import bisect
import math
import threading
from collections.abc import Callable

from trip_replay.errors import PlaybackNotLoadedError
from trip_replay.geo.distance import speed_kmh
from trip_replay.geo.models import Trajectory
from trip_replay.playback.models import PlaybackFrame, PlaybackState

Listener = Callable[[PlaybackFrame], None]

_BASE_TICK_MS = 1000.0


class PlaybackScheduler:
    """Replay controller for one view.

    Parameters
    ----------
    speed_multiplier:
        Initial playback rate.  One index is advanced every
        ``1000 / speed_multiplier`` ms of driver time.
    """

    def __init__(self, speed_multiplier: float = 1.0) -> None:
        _check_multiplier(speed_multiplier)
        self._lock = threading.RLock()
        self._trajectory: Trajectory | None = None
        self._state = PlaybackState.IDLE
        self._index = 0
        self._speed_multiplier = float(speed_multiplier)
        self._current_speed_kmh = 0.0
        self._generation = 0
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def index(self) -> int:
        return self._index

    @property
    def speed_multiplier(self) -> float:
        return self._speed_multiplier

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def trajectory(self) -> Trajectory | None:
        return self._trajectory

    @property
    def tick_interval_ms(self) -> float:
        return _BASE_TICK_MS / self._speed_multiplier

    def cadence(self) -> tuple[int, bool, float]:
        """Return ``(generation, is_playing, tick_interval_s)`` read atomically."""
        with self._lock:
            return (
                self._generation,
                self._state is PlaybackState.PLAYING,
                self.tick_interval_ms / 1000.0,
            )

    def frame(self) -> PlaybackFrame:
        """Return the current :class:`PlaybackFrame`."""
        with self._lock:
            n = len(self._trajectory) if self._trajectory is not None else 0
            interval = self.tick_interval_ms
            return PlaybackFrame(
                state=self._state,
                index=self._index,
                sample=self._trajectory[self._index] if n else None,
                speed_kmh=self._current_speed_kmh,
                progress_percent=(self._index / (n - 1) * 100.0) if n > 1 else 0.0,
                elapsed_virtual_ms=round(self._index * interval),
                duration_virtual_ms=round((n - 1) * interval) if n > 1 else 0,
                speed_multiplier=self._speed_multiplier,
                point_count=n,
            )

    def replay_path(self) -> Trajectory:
        """Return the part of the trajectory replayed so far (up to the current index)."""
        with self._lock:
            if self._trajectory is None:
                return Trajectory()
            return self._trajectory.prefix(self._index)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        """Register *listener* to receive a :class:`PlaybackFrame` after every change."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def load(self, trajectory: Trajectory) -> None:
        """Assign *trajectory* and rewind to its first point.  Allowed from any state."""
        with self._lock:
            self._trajectory = trajectory
            self._state = PlaybackState.LOADED
            self._move_to(0)
            self._changed()

    def unload(self) -> None:
        """Drop the trajectory and return to ``IDLE``."""
        with self._lock:
            self._trajectory = None
            self._state = PlaybackState.IDLE
            self._index = 0
            self._current_speed_kmh = 0.0
            self._changed()

    def play(self) -> None:
        """Start or resume ticking.

        Resuming from the final index rewinds to the start.  An empty
        trajectory has nothing to play and stays suspended.

        Raises
        ------
        PlaybackNotLoadedError
            If no trajectory is loaded.
        """
        with self._lock:
            trajectory = self._require_loaded("play")
            if self._state is PlaybackState.PLAYING:
                return
            if trajectory.is_empty:
                self._state = PlaybackState.PAUSED
                self._changed()
                return
            if self._index >= len(trajectory) - 1:
                self._move_to(0)
            self._state = PlaybackState.PLAYING
            self._changed()

    def pause(self) -> None:
        """Stop ticking without moving the index.  No-op when already suspended.

        Raises
        ------
        PlaybackNotLoadedError
            If no trajectory is loaded.
        """
        with self._lock:
            self._require_loaded("pause")
            if self._state is not PlaybackState.PLAYING:
                return
            self._state = PlaybackState.PAUSED
            self._changed()

    def tick(self, generation: int | None = None) -> bool:
        """Advance one index if playing.

        Reaching the final index pauses playback; the trajectory stays loaded
        and seekable.

        Parameters
        ----------
        generation:
            Cadence generation the caller scheduled this tick under.  A tick
            from a replaced cadence is ignored.

        Returns
        -------
        bool
            True if the index advanced.
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                return False
            if self._state is not PlaybackState.PLAYING or self._trajectory is None:
                return False

            last = len(self._trajectory) - 1
            if self._index >= last:
                self._state = PlaybackState.PAUSED
                self._changed()
                return False

            self._move_to(self._index + 1)
            if self._index >= last:
                self._state = PlaybackState.PAUSED
                self._changed()
            else:
                self._notify()
            return True

    def seek(self, index: int) -> None:
        """Jump to *index*, clamped to the trajectory bounds.

        Keeps the current state; while playing the cadence restarts from the
        new position.

        Raises
        ------
        PlaybackNotLoadedError
            If no trajectory is loaded.
        """
        with self._lock:
            trajectory = self._require_loaded("seek")
            last = max(0, len(trajectory) - 1)
            self._move_to(min(max(int(index), 0), last))
            self._changed()

    def seek_to_time(self, virtual_ms: float) -> None:
        """Jump to the index shown *virtual_ms* into the replay at the current speed."""
        with self._lock:
            self._require_loaded("seek")
            # reported elapsed times are rounded to whole ms
            self.seek(math.floor((max(0.0, virtual_ms) + 0.5) / self.tick_interval_ms))

    def skip(self, delta_ms: float) -> None:
        """Move backwards or forwards by *delta_ms* of replay time."""
        with self._lock:
            self._require_loaded("seek")
            self.seek_to_time(self._index * self.tick_interval_ms + delta_ms)

    def seek_to_timestamp(self, timestamp_ms: int) -> None:
        """Jump to the last sample recorded at or before *timestamp_ms*."""
        with self._lock:
            trajectory = self._require_loaded("seek")
            stamps = [s.timestamp_ms for s in trajectory]
            self.seek(bisect.bisect_right(stamps, timestamp_ms) - 1)

    def set_speed(self, multiplier: float) -> None:
        """Change the playback rate without moving the index.

        Allowed in any state.  While playing, the cadence restarts at the new
        rate.

        Raises
        ------
        ValueError
            If *multiplier* is not a positive finite number.
        """
        _check_multiplier(multiplier)
        with self._lock:
            self._speed_multiplier = float(multiplier)
            self._changed()

    def invalidate_pending_ticks(self) -> None:
        """Reject any tick scheduled under the current cadence.  State is unchanged."""
        with self._lock:
            self._generation += 1

    def reset(self) -> None:
        """Rewind to the first point and pause.  The trajectory stays loaded.

        Raises
        ------
        PlaybackNotLoadedError
            If no trajectory is loaded.
        """
        with self._lock:
            self._require_loaded("reset")
            self._state = PlaybackState.PAUSED
            self._move_to(0)
            self._changed()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_loaded(self, action: str) -> Trajectory:
        if self._state is PlaybackState.IDLE or self._trajectory is None:
            raise PlaybackNotLoadedError(f"Cannot {action}: no trajectory loaded")
        return self._trajectory

    def _move_to(self, index: int) -> None:
        self._index = index
        if self._trajectory is not None and 0 < index < len(self._trajectory):
            self._current_speed_kmh = speed_kmh(
                self._trajectory[index - 1], self._trajectory[index]
            )
        else:
            self._current_speed_kmh = 0.0

    def _changed(self) -> None:
        """Invalidate any pending tick and notify listeners."""
        self._generation += 1
        self._notify()

    def _notify(self) -> None:
        frame = self.frame()
        for listener in list(self._listeners):
            listener(frame)


def _check_multiplier(multiplier: float) -> None:
    if isinstance(multiplier, bool) or not isinstance(multiplier, (int, float)):
        raise ValueError(f"Speed multiplier must be a number, got {multiplier!r}")
    if not math.isfinite(multiplier) or multiplier <= 0:
        raise ValueError(f"Speed multiplier must be positive, got {multiplier!r}")
