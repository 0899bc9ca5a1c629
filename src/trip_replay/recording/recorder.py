"""SampleRecorder — turns a live position feed into a throttled trajectory."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from trip_replay.errors import AlreadyRecordingError, NotRecordingError
from trip_replay.geo.distance import distance_meters, speed_kmh
from trip_replay.geo.models import CoordinateSample, Trajectory
from trip_replay.recording.models import RecorderConfig, RecordingSession, RecordingSnapshot

_logger = logging.getLogger(__name__)


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class SampleRecorder:
    """Records one session at a time.

    Every raw sample updates the running distance/speed figures; only samples
    that moved further than ``min_distance_m`` from the last *stored* sample
    are appended to the path, so the path grows with distance travelled and
    not with time.

    ``on_position`` may be called from a sensor thread.  A single lock guards
    the session, so once :meth:`stop` returns no further sample is applied.
    Calling ``on_position`` while idle is a no-op that returns False.

    Parameters
    ----------
    config:
        Throttle and accuracy settings.
    clock:
        Returns the current epoch time in milliseconds.  Injected for tests.
    """

    def __init__(
        self,
        config: RecorderConfig | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._cfg = config or RecorderConfig()
        self._clock = clock or _wall_clock_ms
        self._lock = threading.Lock()
        self._session: RecordingSession | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_recording(self) -> bool:
        return self._session is not None

    def start(self) -> None:
        """Open a new session.

        Raises
        ------
        AlreadyRecordingError
            If a session is already active.
        """
        with self._lock:
            if self._session is not None:
                raise AlreadyRecordingError("A recording session is already active")
            self._session = RecordingSession(start_time_ms=self._clock())
        _logger.info("Recording started")

    def on_position(self, sample: CoordinateSample) -> bool:
        """Feed one raw position update.

        Returns True if *sample* was appended to the path.
        """
        with self._lock:
            session = self._session
            if session is None:
                _logger.debug("Ignoring position received while not recording")
                return False

            limit = self._cfg.max_accuracy_m
            if limit is not None and sample.accuracy_m is not None and sample.accuracy_m > limit:
                _logger.debug("Discarding fix with accuracy %.1f m", sample.accuracy_m)
                return False

            prev = session.last_position
            if prev is not None:
                session.accumulated_distance_m += distance_meters(prev, sample)
                session.current_speed_kmh = speed_kmh(prev, sample)
            session.last_position = sample
            session.elapsed_ms = max(0, self._clock() - session.start_time_ms)

            if not session.path:
                session.path.append(sample)
                return True
            moved = distance_meters(session.path[-1], sample)
            if moved > self._cfg.min_distance_m:
                session.path.append(sample)
                return True
            _logger.debug("Throttled sample %.1f m from last stored point", moved)
            return False

    def snapshot(self) -> RecordingSnapshot:
        """Return the running figures of the active session.

        Raises
        ------
        NotRecordingError
            If no session is active.
        """
        with self._lock:
            session = self._require_session()
            return RecordingSnapshot(
                elapsed_ms=session.elapsed_ms,
                accumulated_distance_m=session.accumulated_distance_m,
                current_speed_kmh=session.current_speed_kmh,
                path_length=len(session.path),
                last_position=session.last_position,
            )

    def stop(self) -> Trajectory:
        """Close the session and return its recorded path.

        Raises
        ------
        NotRecordingError
            If no session is active.
        """
        with self._lock:
            session = self._require_session()
            self._session = None
        trajectory = Trajectory(tuple(session.path))
        _logger.info(
            "Recording stopped: %d stored points, %.1f m travelled",
            len(trajectory),
            session.accumulated_distance_m,
        )
        return trajectory

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_session(self) -> RecordingSession:
        if self._session is None:
            raise NotRecordingError("No recording session is active")
        return self._session
