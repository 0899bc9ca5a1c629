"""PlaybackTicker — drives a PlaybackScheduler from a background thread."""

from __future__ import annotations

import threading

from trip_replay.playback.models import PlaybackFrame
from trip_replay.playback.scheduler import PlaybackScheduler


class PlaybackTicker:
    """Calls :meth:`PlaybackScheduler.tick` every ``1000 / speed_multiplier`` ms.

    Any scheduler change wakes the thread, which then re-reads the cadence,
    so a speed change or seek restarts the wait at the new rate.  Each tick
    carries the generation observed when its wait began; the scheduler drops
    it if the cadence was replaced in the meantime.

    Parameters
    ----------
    scheduler:
        The scheduler to drive.
    """

    def __init__(self, scheduler: PlaybackScheduler) -> None:
        self._scheduler = scheduler
        self._wake = threading.Event()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        """Start the ticking thread."""
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._scheduler.add_listener(self._on_change)
        self._thread = threading.Thread(target=self._run, daemon=True, name="PlaybackTicker")
        self._thread.start()

    def stop(self) -> None:
        """Stop the thread and join it.

        Pending ticks are invalidated before the join, so none applies after
        this returns even if the thread outlives the join timeout.
        """
        self._stop_event.set()
        self._wake.set()
        self._scheduler.invalidate_pending_ticks()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        self._scheduler.remove_listener(self._on_change)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _on_change(self, frame: PlaybackFrame) -> None:
        self._wake.set()

    def _run(self) -> None:
        while not self._stop_event.is_set():
            generation, playing, interval_s = self._scheduler.cadence()
            if not playing:
                self._wake.wait()
                self._wake.clear()
                continue
            if self._wake.wait(interval_s):
                self._wake.clear()
                continue
            if self._stop_event.is_set():
                break
            self._scheduler.tick(generation=generation)
