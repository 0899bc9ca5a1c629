"""Mission references, trajectory resolution and the backing stores.

Public API
----------
MissionReference    - validated view of a mission document
TimeWindow          - inclusive epoch-ms range
TrajectoryResolver  - embedded trace → history window → empty
ResolvedTrajectory  - resolver result with its source
MissionStorage      - SQLite mission + location-history store
normalize_timestamp - heterogeneous timestamp → epoch ms
"""

from trip_replay.missions.models import (
    MissionReference,
    ResolvedTrajectory,
    TimeWindow,
    TrajectorySource,
)
from trip_replay.missions.resolver import DEFAULT_WINDOW_MS, TrajectoryResolver
from trip_replay.missions.storage import MissionStorage
from trip_replay.missions.timestamps import normalize_timestamp, parse_timestamp

__all__ = [
    "DEFAULT_WINDOW_MS",
    "MissionReference",
    "MissionStorage",
    "ResolvedTrajectory",
    "TimeWindow",
    "TrajectoryResolver",
    "TrajectorySource",
    "normalize_timestamp",
    "parse_timestamp",
]
