"""Coordinate models and geodesy helpers.

Public API
----------
GeoPoint          - untimed latitude/longitude
CoordinateSample  - one timestamped position reading
Trajectory        - ordered immutable sequence of samples
distance_meters   - Haversine distance
speed_kmh         - speed between two samples
format_duration   - ``MM:SS`` formatting
"""

from trip_replay.geo.distance import (
    EARTH_RADIUS_M,
    distance_meters,
    eta_minutes,
    format_duration,
    progress_percent,
    speed_kmh,
)
from trip_replay.geo.models import CoordinateSample, GeoPoint, Trajectory

__all__ = [
    "EARTH_RADIUS_M",
    "CoordinateSample",
    "GeoPoint",
    "Trajectory",
    "distance_meters",
    "eta_minutes",
    "format_duration",
    "progress_percent",
    "speed_kmh",
]
