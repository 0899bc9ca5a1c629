"""MissionStorage — SQLite mission store and historical-sample store.

Schema design notes:
  - Mission documents are kept as the JSON the dispatch side produced,
    heterogeneous timestamp shapes included; they are validated into
    :class:`MissionReference` on every read.
  - ``agents`` lookup table: avoids repeating the agent id string on every
    sample row.
  - ``location_samples`` is append-only and indexed by (agent, time) for the
    window queries used by replay.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone

from trip_replay.analysis.models import TripStatistics
from trip_replay.errors import MissionNotFoundError, StoreError
from trip_replay.geo.models import CoordinateSample, Trajectory
from trip_replay.missions.models import MissionReference

_logger = logging.getLogger(__name__)

_DDL = """
PRAGMA journal_mode = WAL;
PRAGMA synchronous  = NORMAL;

CREATE TABLE IF NOT EXISTS agents (
    idx      INTEGER PRIMARY KEY,
    agent_id TEXT    NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS location_samples (
    agent_idx    INTEGER NOT NULL,
    timestamp_ms INTEGER NOT NULL,
    latitude     REAL    NOT NULL,
    longitude    REAL    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_samples_agent_time
    ON location_samples (agent_idx, timestamp_ms);

CREATE TABLE IF NOT EXISTS missions (
    id            TEXT PRIMARY KEY,
    document_json TEXT NOT NULL,
    updated_at    TEXT NOT NULL
                  DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_INSERT_AGENT = "INSERT OR IGNORE INTO agents (agent_id) VALUES (?)"
_SELECT_AGENT = "SELECT idx FROM agents WHERE agent_id = ?"

_INSERT_SAMPLE = """
INSERT INTO location_samples (agent_idx, timestamp_ms, latitude, longitude)
VALUES (?, ?, ?, ?)
"""

_SELECT_WINDOW = """
SELECT s.timestamp_ms, s.latitude, s.longitude
FROM   location_samples s
JOIN   agents a ON a.idx = s.agent_idx
WHERE  a.agent_id = ? AND s.timestamp_ms BETWEEN ? AND ?
ORDER  BY s.timestamp_ms
"""

_UPSERT_MISSION = """
INSERT INTO missions (id, document_json) VALUES (?, ?)
ON CONFLICT (id) DO UPDATE SET
    document_json = excluded.document_json,
    updated_at    = strftime('%Y-%m-%dT%H:%M:%SZ', 'now')
"""


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def _iso(ms: int) -> str:
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


class MissionStorage:
    """Stores mission documents and agent location history in SQLite.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  Pass ``":memory:"`` for in-process testing.
    batch_size:
        Number of buffered sample rows that triggers a flush.

    Raises
    ------
    StoreError
        Wrapping any :class:`sqlite3.Error` from the underlying database.
    """

    def __init__(self, db_path: str = "trips.db", batch_size: int = 500) -> None:
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            for stmt in _DDL.strip().split(";"):
                stmt = stmt.strip()
                if stmt:
                    self._conn.execute(stmt)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open mission store {db_path!r}: {exc}") from exc
        self._agent_cache: dict[str, int] = {}
        self._batch: list[tuple] = []
        self._batch_size = batch_size

    # ------------------------------------------------------------------
    # Mission documents
    # ------------------------------------------------------------------

    def save_mission(self, document: dict) -> str:
        """Insert or replace a mission document and return its id.

        Raises
        ------
        ValueError
            If the document has no ``id``.
        """
        mission_id = document.get("id")
        if not mission_id:
            raise ValueError("Mission document has no id")
        payload = json.dumps(document, default=_json_default)
        try:
            self._conn.execute(_UPSERT_MISSION, (str(mission_id), payload))
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot save mission {mission_id!r}: {exc}") from exc
        return str(mission_id)

    def get_mission(self, mission_id: str) -> MissionReference | None:
        """Return the mission with *mission_id*, or None if it does not exist."""
        doc = self._get_document(mission_id)
        if doc is None:
            return None
        return MissionReference.from_document(doc, mission_id=mission_id)

    def list_missions(self, with_trace_only: bool = False) -> list[MissionReference]:
        """Return all missions ordered by id, optionally only those with a trace."""
        try:
            rows = self._conn.execute(
                "SELECT id, document_json FROM missions ORDER BY id"
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot list missions: {exc}") from exc
        missions = [
            MissionReference.from_document(json.loads(r["document_json"]), mission_id=r["id"])
            for r in rows
        ]
        if with_trace_only:
            missions = [m for m in missions if m.has_trace]
        return missions

    def save_trip(
        self,
        mission_id: str,
        trajectory: Trajectory,
        statistics: TripStatistics,
    ) -> None:
        """Attach a completed trajectory and its statistics to a mission.

        Raises
        ------
        MissionNotFoundError
            If no mission with *mission_id* exists.
        """
        doc = self._get_document(mission_id)
        if doc is None:
            raise MissionNotFoundError(f"Mission {mission_id!r} not found")

        tracking = {
            "coordinates": trajectory.to_dicts(),
            "totalDistance": statistics.total_distance_meters,
            "averageSpeed": statistics.average_speed_kmh,
            "maxSpeed": statistics.max_speed_kmh,
            "minSpeed": statistics.min_speed_kmh,
            "pointCount": statistics.point_count,
        }
        if not trajectory.is_empty:
            tracking["startTime"] = _iso(trajectory[0].timestamp_ms)
            tracking["endTime"] = _iso(trajectory[-1].timestamp_ms)
        doc["trackingData"] = tracking
        self.save_mission({**doc, "id": mission_id})
        _logger.info("Saved trip for mission %s (%d points)", mission_id, len(trajectory))

    # ------------------------------------------------------------------
    # Location history
    # ------------------------------------------------------------------

    def save_sample(self, agent_id: str, sample: CoordinateSample) -> None:
        """Persist one location sample.  Writes are batched for performance."""
        self._batch.append((
            self._agent_idx(agent_id),
            sample.timestamp_ms,
            sample.latitude,
            sample.longitude,
        ))
        if len(self._batch) >= self._batch_size:
            self._flush()

    def save_samples(self, agent_id: str, samples: list[CoordinateSample]) -> int:
        """Persist several samples and flush.  Returns how many were written."""
        for sample in samples:
            self.save_sample(agent_id, sample)
        self._flush()
        return len(samples)

    def samples_between(
        self, agent_id: str, start_ms: int, end_ms: int
    ) -> list[CoordinateSample]:
        """Return *agent_id*'s samples with ``start_ms <= timestamp <= end_ms``, oldest first."""
        self._flush()
        try:
            rows = self._conn.execute(_SELECT_WINDOW, (agent_id, start_ms, end_ms)).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Historical query failed for agent {agent_id!r}: {exc}") from exc
        return [
            CoordinateSample(
                latitude=float(r["latitude"]),
                longitude=float(r["longitude"]),
                timestamp_ms=int(r["timestamp_ms"]),
            )
            for r in rows
        ]

    def close(self) -> None:
        """Flush buffered writes and close the database connection."""
        self._flush()
        self._conn.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_document(self, mission_id: str) -> dict | None:
        try:
            row = self._conn.execute(
                "SELECT document_json FROM missions WHERE id = ?", (mission_id,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot read mission {mission_id!r}: {exc}") from exc
        return json.loads(row["document_json"]) if row else None

    def _agent_idx(self, agent_id: str) -> int:
        """Return the integer PK for *agent_id*, creating a row if needed."""
        if agent_id not in self._agent_cache:
            self._flush()
            try:
                self._conn.execute(_INSERT_AGENT, (agent_id,))
                self._conn.commit()
                row = self._conn.execute(_SELECT_AGENT, (agent_id,)).fetchone()
            except sqlite3.Error as exc:
                raise StoreError(f"Cannot register agent {agent_id!r}: {exc}") from exc
            self._agent_cache[agent_id] = row[0]
        return self._agent_cache[agent_id]

    def _flush(self) -> None:
        if not self._batch:
            return
        try:
            self._conn.executemany(_INSERT_SAMPLE, self._batch)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot write location samples: {exc}") from exc
        finally:
            self._batch.clear()
