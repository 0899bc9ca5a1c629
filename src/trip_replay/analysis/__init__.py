"""Trip statistics over recorded trajectories."""

from trip_replay.analysis.models import TripStatistics
from trip_replay.analysis.statistics import compute_statistics

__all__ = [
    "TripStatistics",
    "compute_statistics",
]
