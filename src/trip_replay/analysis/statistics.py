"""Post-hoc trip statistics over a full trajectory."""

from __future__ import annotations

from trip_replay.analysis.models import TripStatistics
from trip_replay.geo.distance import distance_meters, speed_kmh
from trip_replay.geo.models import Trajectory


def compute_statistics(trajectory: Trajectory) -> TripStatistics:
    """Compute :class:`TripStatistics` for *trajectory* in a single pass.

    Speeds are averaged per segment.  Segments whose samples share a
    timestamp add their distance but carry no speed information, so they are
    left out of the speed figures rather than counted as standing still.
    Trajectories with fewer than two points yield all-zero speeds.
    """
    total = 0.0
    speeds: list[float] = []
    for prev, cur in zip(trajectory.samples, trajectory.samples[1:]):
        total += distance_meters(prev, cur)
        if cur.timestamp_ms > prev.timestamp_ms:
            speeds.append(speed_kmh(prev, cur))

    if not speeds:
        return TripStatistics(
            total_distance_meters=total,
            point_count=len(trajectory),
        )

    return TripStatistics(
        total_distance_meters=total,
        average_speed_kmh=sum(speeds) / len(speeds),
        max_speed_kmh=max(speeds),
        min_speed_kmh=min(speeds),
        point_count=len(trajectory),
    )
