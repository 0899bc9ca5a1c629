"""Coordinate data models."""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair without a timestamp (e.g. an incident location)."""

    latitude: float
    longitude: float

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> GeoPoint | None:
        """Build a point from ``latitude/longitude`` or ``lat/lng`` keys.

        Returns None when either coordinate is missing or not a finite number.
        """
        lat = _first_number(d, "latitude", "lat")
        lng = _first_number(d, "longitude", "lng")
        if lat is None or lng is None:
            return None
        return cls(latitude=lat, longitude=lng)


@dataclass(frozen=True)
class CoordinateSample:
    """One timestamped position reading. Immutable once recorded."""

    latitude: float
    """Degrees, WGS84."""

    longitude: float
    """Degrees, WGS84."""

    timestamp_ms: int
    """Epoch milliseconds."""

    accuracy_m: float | None = field(default=None, compare=False)
    """Reported horizontal accuracy in metres, when the location source has one."""

    @classmethod
    def from_dict(
        cls, d: Mapping[str, Any], default_timestamp_ms: int = 0
    ) -> CoordinateSample | None:
        """Parse a location-source payload or a stored trace entry.

        Accepts ``latitude/longitude`` or the legacy ``lat/lng`` keys.  A
        missing or non-numeric ``timestamp`` falls back to
        *default_timestamp_ms*.  Returns None when a coordinate is missing.
        """
        point = GeoPoint.from_dict(d)
        if point is None:
            return None
        ts = _first_number(d, "timestamp", "timestamp_ms")
        accuracy = _first_number(d, "accuracy", "accuracy_m")
        return cls(
            latitude=point.latitude,
            longitude=point.longitude,
            timestamp_ms=int(ts) if ts is not None else default_timestamp_ms,
            accuracy_m=accuracy,
        )

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.timestamp_ms,
        }


@dataclass(frozen=True)
class Trajectory:
    """An ordered, immutable sequence of samples belonging to one mission.

    Timestamps are expected to be non-decreasing; equal timestamps are allowed.
    """

    samples: tuple[CoordinateSample, ...] = ()

    @classmethod
    def from_dicts(cls, items: list[Mapping[str, Any]]) -> Trajectory:
        """Parse stored trace entries, skipping those without coordinates.

        An entry without a timestamp inherits the previous sample's timestamp
        so ordering is preserved.
        """
        samples: list[CoordinateSample] = []
        last_ts = 0
        for item in items:
            if not isinstance(item, Mapping):
                continue
            sample = CoordinateSample.from_dict(item, default_timestamp_ms=last_ts)
            if sample is None:
                continue
            samples.append(sample)
            last_ts = sample.timestamp_ms
        return cls(tuple(samples))

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[CoordinateSample]:
        return iter(self.samples)

    def __getitem__(self, index: int) -> CoordinateSample:
        return self.samples[index]

    @property
    def is_empty(self) -> bool:
        return not self.samples

    @property
    def duration_ms(self) -> int:
        """Time between the first and last sample; 0 for fewer than two samples."""
        if len(self.samples) < 2:
            return 0
        return max(0, self.samples[-1].timestamp_ms - self.samples[0].timestamp_ms)

    def prefix(self, index: int) -> Trajectory:
        """Return the samples up to and including *index*."""
        if index < 0:
            return Trajectory()
        return Trajectory(self.samples[: index + 1])

    def to_dicts(self) -> list[dict]:
        return [s.to_dict() for s in self.samples]


def _first_number(d: Mapping[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = d.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)) and math.isfinite(value):
            return float(value)
    return None
