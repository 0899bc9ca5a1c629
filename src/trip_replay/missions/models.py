"""Mission reference and trajectory resolution models."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from trip_replay.geo.models import GeoPoint, Trajectory
from trip_replay.missions.timestamps import parse_timestamp


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive time range in epoch milliseconds."""

    start_ms: int
    end_ms: int

    def __post_init__(self) -> None:
        if self.end_ms < self.start_ms:
            raise ValueError(
                f"Window end ({self.end_ms}) precedes its start ({self.start_ms})"
            )

    def contains(self, ms: int) -> bool:
        return self.start_ms <= ms <= self.end_ms


@dataclass(frozen=True)
class MissionReference:
    """A mission as seen by the replay core.

    Built once from the raw store document by :meth:`from_document`; nothing
    downstream inspects the raw document again.
    """

    mission_id: str
    agent_id: str | None = None
    """Driver/responder assigned to the mission."""

    location: GeoPoint | None = None
    """Incident location."""

    status: str = ""
    emergency_type: str = ""
    assigned_at_ms: int | None = None
    resolved_at_ms: int | None = None
    trajectory: Trajectory | None = None
    """Trace recorded during the mission, if one was written back."""

    @property
    def has_trace(self) -> bool:
        return self.trajectory is not None and not self.trajectory.is_empty

    @classmethod
    def from_document(cls, doc: Mapping[str, Any], mission_id: str | None = None) -> MissionReference:
        """Validate a raw mission document.

        Timestamp markers that cannot be read are treated as absent.

        Raises
        ------
        ValueError
            If the document has no usable id.
        """
        mid = mission_id if mission_id is not None else doc.get("id")
        if not mid:
            raise ValueError("Mission document has no id")

        team = doc.get("assignedTeam")
        agent_id = None
        if isinstance(team, Mapping) and team.get("driverId"):
            agent_id = str(team["driverId"])

        location = None
        raw_location = doc.get("location")
        if isinstance(raw_location, Mapping):
            location = GeoPoint.from_dict(raw_location)

        trajectory = None
        tracking = doc.get("trackingData")
        if isinstance(tracking, Mapping) and isinstance(tracking.get("coordinates"), list):
            trajectory = Trajectory.from_dicts(tracking["coordinates"])

        return cls(
            mission_id=str(mid),
            agent_id=agent_id,
            location=location,
            status=str(doc.get("status") or ""),
            emergency_type=str(doc.get("emergencyType") or ""),
            assigned_at_ms=parse_timestamp(doc.get("assignedAt")),
            resolved_at_ms=parse_timestamp(doc.get("resolvedAt")),
            trajectory=trajectory,
        )


class TrajectorySource(enum.Enum):
    """Where a resolved trajectory came from."""

    EMBEDDED = "embedded"
    HISTORY = "history"
    EMPTY = "empty"


@dataclass(frozen=True)
class ResolvedTrajectory:
    """Result of :meth:`~trip_replay.missions.resolver.TrajectoryResolver.resolve`."""

    trajectory: Trajectory
    source: TrajectorySource
    window: TimeWindow | None = None
    """The window queried, when the historical store was consulted."""

    error: str | None = None
    """Set when the historical store failed; the trajectory is then empty."""
