"""Great-circle distance, speed and duration helpers.

All functions are pure.  Distances are in metres, speeds in km/h, times in
milliseconds.
"""

from __future__ import annotations

import math

from trip_replay.geo.models import CoordinateSample, GeoPoint

EARTH_RADIUS_M = 6_371_000.0
_MPS_TO_KPH = 3.6


def distance_meters(a: GeoPoint | CoordinateSample, b: GeoPoint | CoordinateSample) -> float:
    """Return the Haversine distance between *a* and *b* in metres.

    Symmetric, 0 for identical points, never raises for finite input.
    """
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # rounding can push h a hair outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def speed_kmh(a: CoordinateSample, b: CoordinateSample) -> float:
    """Return the average speed travelling from *a* to *b* in km/h.

    Returns 0 when the samples share a timestamp or are out of order.
    """
    delta_s = (b.timestamp_ms - a.timestamp_ms) / 1000.0
    if delta_s <= 0:
        return 0.0
    return distance_meters(a, b) / delta_s * _MPS_TO_KPH


def format_duration(ms: int) -> str:
    """Format *ms* as zero-padded ``MM:SS``.  Minutes are not capped at 59."""
    total_seconds = max(0, int(ms)) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def progress_percent(
    origin: GeoPoint | CoordinateSample,
    current: GeoPoint | CoordinateSample,
    destination: GeoPoint | CoordinateSample,
) -> float:
    """Return how far *current* has closed the gap from *origin* to *destination*.

    Result is clamped to [0, 100].  When origin and destination coincide the
    trip counts as complete.
    """
    total = distance_meters(origin, destination)
    if total == 0:
        return 100.0
    remaining = distance_meters(current, destination)
    return max(0.0, min(100.0, (total - remaining) / total * 100.0))


def eta_minutes(distance_m: float, average_speed_kmh: float = 30.0) -> int:
    """Estimate minutes needed to cover *distance_m* at *average_speed_kmh*."""
    if average_speed_kmh <= 0 or distance_m <= 0:
        return 0
    hours = (distance_m / 1000.0) / average_speed_kmh
    return round(hours * 60)
