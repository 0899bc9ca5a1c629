"""RecordingEngine — connects a PositionStream to a SampleRecorder."""

from __future__ import annotations

from trip_replay.analysis.models import TripStatistics
from trip_replay.analysis.statistics import compute_statistics
from trip_replay.geo.models import Trajectory
from trip_replay.recording.recorder import SampleRecorder


class RecordingEngine:
    """Drives a recording from a position stream.

    The caller pumps :meth:`tick` (or :meth:`drain`) from its own loop; the
    stream's polling thread never touches the recorder directly.

    Parameters
    ----------
    stream:
        A :class:`~trip_replay.recording.stream.PositionStream` or any object
        with ``start()``, ``stop()`` and ``get_event(timeout)``.
    recorder:
        The :class:`~trip_replay.recording.recorder.SampleRecorder` to feed.
    """

    def __init__(self, stream, recorder: SampleRecorder | None = None) -> None:
        self._stream = stream
        self._recorder = recorder or SampleRecorder()

    @property
    def recorder(self) -> SampleRecorder:
        return self._recorder

    def start(self) -> None:
        """Open a recording session, then start the stream."""
        self._recorder.start()
        self._stream.start()

    def tick(self) -> bool:
        """Move one queued position into the recorder.

        Returns True if a position was consumed (stored or not).
        """
        event = self._stream.get_event(timeout=0.0)
        if event is None:
            return False
        self._recorder.on_position(event.sample)
        return True

    def drain(self) -> int:
        """Consume every queued position.  Returns how many were consumed."""
        count = 0
        while self.tick():
            count += 1
        return count

    def stop(self) -> tuple[Trajectory, TripStatistics]:
        """Stop the stream, flush what it queued and close the session.

        Returns the recorded trajectory together with its statistics, ready
        to be written back to the mission store.
        """
        self._stream.stop()
        self.drain()
        trajectory = self._recorder.stop()
        return trajectory, compute_statistics(trajectory)
