"""Tests for RecordingEngine."""

from __future__ import annotations

import time
from unittest.mock import MagicMock

import pytest

from trip_replay.errors import AlreadyRecordingError
from trip_replay.geo.models import CoordinateSample
from trip_replay.recording.engine import RecordingEngine
from trip_replay.recording.recorder import SampleRecorder
from trip_replay.recording.stream import PositionEvent


def event(lat: float, ts: int) -> PositionEvent:
    return PositionEvent(
        sample=CoordinateSample(latitude=lat, longitude=3.3, timestamp_ms=ts),
        received_at=time.monotonic(),
    )


def make_stream(*events: PositionEvent) -> MagicMock:
    stream = MagicMock()
    stream.get_event.side_effect = list(events) + [None] * 10
    return stream


def test_start_opens_session_and_stream():
    stream = make_stream()
    engine = RecordingEngine(stream, SampleRecorder(clock=lambda: 0))
    engine.start()

    stream.start.assert_called_once()
    assert engine.recorder.is_recording


def test_start_while_recording_raises():
    engine = RecordingEngine(make_stream(), SampleRecorder(clock=lambda: 0))
    engine.start()
    with pytest.raises(AlreadyRecordingError):
        engine.start()


def test_tick_moves_one_event_into_recorder():
    engine = RecordingEngine(make_stream(event(6.5, 0)), SampleRecorder(clock=lambda: 0))
    engine.start()

    assert engine.tick() is True
    assert engine.recorder.snapshot().path_length == 1
    assert engine.tick() is False


def test_stop_drains_and_returns_statistics():
    stream = make_stream(event(6.5, 0), event(6.501, 10_000), event(6.502, 20_000))
    engine = RecordingEngine(stream, SampleRecorder(clock=lambda: 0))
    engine.start()

    trajectory, stats = engine.stop()

    stream.stop.assert_called_once()
    assert len(trajectory) == 3
    assert stats.point_count == 3
    assert stats.total_distance_meters > 200
    assert not engine.recorder.is_recording
