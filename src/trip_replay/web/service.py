"""ReplayService — wraps storage, resolver and statistics for the Web API."""

from __future__ import annotations

from collections.abc import Callable

from trip_replay.analysis.models import TripStatistics
from trip_replay.analysis.statistics import compute_statistics
from trip_replay.errors import MissionNotFoundError
from trip_replay.geo.models import CoordinateSample, Trajectory
from trip_replay.missions.models import MissionReference, ResolvedTrajectory, TimeWindow
from trip_replay.missions.resolver import TrajectoryResolver
from trip_replay.missions.storage import MissionStorage


class ReplayService:
    """Per-request facade over :class:`MissionStorage`.

    Parameters
    ----------
    db_path:
        Path to the SQLite database.
    clock:
        Optional epoch-ms clock passed to the resolver, for tests.
    """

    def __init__(self, db_path: str, clock: Callable[[], int] | None = None) -> None:
        self._db_path = db_path
        self._clock = clock

    def list_missions(self, with_trace_only: bool = False) -> list[MissionReference]:
        storage = MissionStorage(self._db_path)
        try:
            return storage.list_missions(with_trace_only=with_trace_only)
        finally:
            storage.close()

    def replay(
        self,
        mission_id: str,
        start_ms: int | None = None,
        end_ms: int | None = None,
    ) -> tuple[ResolvedTrajectory, TripStatistics]:
        """Resolve the trajectory for *mission_id* and compute its statistics.

        Raises
        ------
        MissionNotFoundError
            If the mission does not exist.
        ValueError
            If only one window bound is given, or the bounds are reversed.
        """
        if (start_ms is None) != (end_ms is None):
            raise ValueError("start and end must be given together")
        window = TimeWindow(start_ms, end_ms) if start_ms is not None else None

        storage = MissionStorage(self._db_path)
        try:
            mission = storage.get_mission(mission_id)
            if mission is None:
                raise MissionNotFoundError(f"Mission {mission_id!r} not found")
            resolved = TrajectoryResolver(storage, clock=self._clock).resolve(mission, window)
        finally:
            storage.close()
        return resolved, compute_statistics(resolved.trajectory)

    def record_trip(
        self, mission_id: str, samples: list[CoordinateSample]
    ) -> TripStatistics:
        """Persist a recorded trajectory and its statistics on the mission.

        Raises
        ------
        MissionNotFoundError
            If the mission does not exist.
        ValueError
            If the sample timestamps go backwards.
        """
        for prev, cur in zip(samples, samples[1:]):
            if cur.timestamp_ms < prev.timestamp_ms:
                raise ValueError("Trip coordinates must be ordered by timestamp")
        trajectory = Trajectory(tuple(samples))
        statistics = compute_statistics(trajectory)

        storage = MissionStorage(self._db_path)
        try:
            storage.save_trip(mission_id, trajectory, statistics)
        finally:
            storage.close()
        return statistics

    def save_samples(self, agent_id: str, samples: list[CoordinateSample]) -> int:
        storage = MissionStorage(self._db_path)
        try:
            return storage.save_samples(agent_id, samples)
        finally:
            storage.close()
