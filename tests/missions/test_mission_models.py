"""Tests for MissionReference.from_document and TimeWindow."""

from __future__ import annotations

import pytest

from trip_replay.geo.models import GeoPoint
from trip_replay.missions.models import MissionReference, TimeWindow

TEN_AM_MS = 1_734_429_600_000


def make_document(**overrides) -> dict:
    doc = {
        "id": "alert-1",
        "emergencyType": "Medical Emergency",
        "status": "Resolved",
        "location": {"latitude": 6.5244, "longitude": 3.3792, "address": "Lagos"},
        "assignedTeam": {"driverId": "driver-1", "driverName": "A. Driver", "vehicle": "A1"},
        "assignedAt": {"seconds": 1_734_429_600, "nanoseconds": 0},
        "resolvedAt": "2024-12-17T10:30:00Z",
    }
    doc.update(overrides)
    return doc


class TestFromDocument:
    def test_core_fields(self):
        m = MissionReference.from_document(make_document())
        assert m.mission_id == "alert-1"
        assert m.agent_id == "driver-1"
        assert m.location == GeoPoint(6.5244, 3.3792)
        assert m.status == "Resolved"
        assert m.emergency_type == "Medical Emergency"

    def test_mixed_timestamp_shapes(self):
        m = MissionReference.from_document(make_document())
        assert m.assigned_at_ms == TEN_AM_MS
        assert m.resolved_at_ms == TEN_AM_MS + 30 * 60 * 1000

    def test_unreadable_marker_treated_as_absent(self):
        m = MissionReference.from_document(make_document(assignedAt={"weird": True}))
        assert m.assigned_at_ms is None

    def test_no_team_no_agent(self):
        doc = make_document()
        del doc["assignedTeam"]
        assert MissionReference.from_document(doc).agent_id is None

    def test_embedded_trace_legacy_keys(self):
        doc = make_document(trackingData={
            "coordinates": [
                {"lat": 6.5244, "lng": 3.3792, "timestamp": 1000},
                {"lat": 6.5250, "lng": 3.3800, "timestamp": 2000},
            ],
            "startTime": "2024-12-17T10:00:00Z",
        })
        m = MissionReference.from_document(doc)
        assert m.has_trace
        assert len(m.trajectory) == 2
        assert m.trajectory[1].latitude == 6.5250

    def test_empty_trace_is_not_a_trace(self):
        m = MissionReference.from_document(make_document(trackingData={"coordinates": []}))
        assert m.trajectory is not None
        assert not m.has_trace

    def test_missing_id_raises(self):
        doc = make_document()
        del doc["id"]
        with pytest.raises(ValueError):
            MissionReference.from_document(doc)

    def test_explicit_id_overrides(self):
        doc = make_document()
        del doc["id"]
        assert MissionReference.from_document(doc, mission_id="row-7").mission_id == "row-7"

    def test_bad_location_ignored(self):
        m = MissionReference.from_document(make_document(location={"address": "unknown"}))
        assert m.location is None


class TestTimeWindow:
    def test_contains_inclusive(self):
        w = TimeWindow(100, 200)
        assert w.contains(100)
        assert w.contains(200)
        assert not w.contains(201)

    def test_reversed_raises(self):
        with pytest.raises(ValueError):
            TimeWindow(200, 100)
