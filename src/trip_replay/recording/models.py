"""Recording session data models."""

from __future__ import annotations

from dataclasses import dataclass, field

from trip_replay.geo.models import CoordinateSample


@dataclass
class RecorderConfig:
    """Tunables for :class:`~trip_replay.recording.recorder.SampleRecorder`."""

    min_distance_m: float = 10.0
    """A sample is appended to the path only if it lies further than this from
    the last appended sample."""

    max_accuracy_m: float | None = None
    """Discard fixes reporting a worse accuracy than this.  None accepts all."""


@dataclass
class RecordingSession:
    """Mutable state of an active recording.  Discarded on ``stop()``."""

    start_time_ms: int
    last_position: CoordinateSample | None = None
    """Most recent *raw* sample, used for the running statistics."""

    accumulated_distance_m: float = 0.0
    current_speed_kmh: float = 0.0
    elapsed_ms: int = 0
    path: list[CoordinateSample] = field(default_factory=list)
    """Throttled samples; becomes the persisted trajectory."""


@dataclass(frozen=True)
class RecordingSnapshot:
    """Read-only view of a session for live display."""

    elapsed_ms: int
    accumulated_distance_m: float
    current_speed_kmh: float
    path_length: int
    last_position: CoordinateSample | None
