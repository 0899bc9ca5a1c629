"""Live trip recording.

Public API
----------
SampleRecorder   - throttled path + running statistics for one session
RecorderConfig   - throttle / accuracy settings
PositionStream   - background polling of a location source
RecordingEngine  - stream → recorder glue
"""

from trip_replay.recording.engine import RecordingEngine
from trip_replay.recording.models import RecorderConfig, RecordingSession, RecordingSnapshot
from trip_replay.recording.recorder import SampleRecorder
from trip_replay.recording.stream import PositionEvent, PositionStream

__all__ = [
    "PositionEvent",
    "PositionStream",
    "RecorderConfig",
    "RecordingEngine",
    "RecordingSession",
    "RecordingSnapshot",
    "SampleRecorder",
]
