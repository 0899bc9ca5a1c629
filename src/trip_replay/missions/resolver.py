"""TrajectoryResolver — picks the authoritative trajectory to replay for a mission.

Precedence:

1. The mission's embedded trace, verbatim, when it has at least one point.
2. Historical samples for the mission's agent within a time window, prefixed
   with the incident location stamped at the window start.
3. An empty trajectory.  "No data" is a valid result, not an error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from trip_replay.geo.models import CoordinateSample, Trajectory
from trip_replay.missions.models import (
    MissionReference,
    ResolvedTrajectory,
    TimeWindow,
    TrajectorySource,
)
from trip_replay.missions.timestamps import now_ms

_logger = logging.getLogger(__name__)

DEFAULT_WINDOW_MS = 3 * 60 * 60 * 1000


class TrajectoryResolver:
    """Resolve the trajectory to display for a mission.

    Parameters
    ----------
    sample_store:
        Historical-sample store with
        ``samples_between(agent_id, start_ms, end_ms) -> list[CoordinateSample]``.
        Whatever it raises is logged and reported on the result's ``error``.
    default_window_ms:
        Span of the fallback window when the mission has no usable markers.
    clock:
        Returns the current epoch time in milliseconds.  Injected for tests.
    """

    def __init__(
        self,
        sample_store,
        default_window_ms: int = DEFAULT_WINDOW_MS,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._store = sample_store
        self._default_window_ms = default_window_ms
        self._clock = clock or now_ms

    def resolve(
        self,
        mission: MissionReference,
        window: TimeWindow | None = None,
    ) -> ResolvedTrajectory:
        """Return the trajectory to replay for *mission*.

        *window* overrides the window derived from the mission markers.  It is
        ignored when the mission carries an embedded trace.
        """
        if mission.has_trace:
            return ResolvedTrajectory(
                trajectory=mission.trajectory,
                source=TrajectorySource.EMBEDDED,
            )

        window = window or self.window_for(mission)
        if mission.agent_id is None:
            _logger.info("Mission %s has no assigned agent; nothing to query", mission.mission_id)
            return ResolvedTrajectory(Trajectory(), TrajectorySource.EMPTY, window)

        try:
            samples = self._store.samples_between(
                mission.agent_id, window.start_ms, window.end_ms
            )
        except Exception as exc:
            _logger.warning(
                "Historical query failed for mission %s: %s", mission.mission_id, exc
            )
            return ResolvedTrajectory(
                Trajectory(), TrajectorySource.EMPTY, window, error=str(exc) or type(exc).__name__
            )

        if not samples:
            return ResolvedTrajectory(Trajectory(), TrajectorySource.EMPTY, window)

        points = list(samples)
        if mission.location is not None:
            origin = CoordinateSample(
                latitude=mission.location.latitude,
                longitude=mission.location.longitude,
                timestamp_ms=window.start_ms,
            )
            points.insert(0, origin)
        return ResolvedTrajectory(Trajectory(tuple(points)), TrajectorySource.HISTORY, window)

    def window_for(self, mission: MissionReference) -> TimeWindow:
        """Derive the query window from the mission's assignment/resolution markers.

        A missing end means "now"; a missing start means the default span
        before the end.  Markers out of order fall back to the default window.
        """
        now = self._clock()
        start = mission.assigned_at_ms
        end = mission.resolved_at_ms

        if start is None and end is None:
            return TimeWindow(now - self._default_window_ms, now)
        if end is None:
            end = max(now, start)
        if start is None:
            start = end - self._default_window_ms
        if end < start:
            _logger.warning(
                "Mission %s resolved before it was assigned; using default window",
                mission.mission_id,
            )
            return TimeWindow(now - self._default_window_ms, now)
        return TimeWindow(start, end)
