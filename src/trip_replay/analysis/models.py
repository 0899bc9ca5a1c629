"""Trip statistics model."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass


@dataclass(frozen=True)
class TripStatistics:
    """Aggregate figures derived from a whole trajectory.

    Never edited by hand: always recomputed from the trajectory via
    :func:`~trip_replay.analysis.statistics.compute_statistics`.
    """

    total_distance_meters: float = 0.0
    average_speed_kmh: float = 0.0
    """Mean of the per-segment speeds (not distance / total time)."""

    max_speed_kmh: float = 0.0
    min_speed_kmh: float = 0.0
    point_count: int = 0

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict."""
        return dataclasses.asdict(self)
