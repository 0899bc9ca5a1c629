"""Exception hierarchy shared by all trip_replay components."""

from __future__ import annotations


class TripReplayError(Exception):
    """Base class for every error raised by this package."""


class InvalidTransitionError(TripReplayError):
    """An operation was called in a state that does not allow it.

    Always signals a control-flow bug in the caller, so it is never swallowed.
    """


class AlreadyRecordingError(InvalidTransitionError):
    """``start()`` was called while a recording session is active."""


class NotRecordingError(InvalidTransitionError):
    """A session operation was called with no active recording."""


class PlaybackNotLoadedError(InvalidTransitionError):
    """A playback control was used before a trajectory was loaded."""


class StoreError(TripReplayError):
    """The mission or historical-sample store rejected a read or write."""


class MissionNotFoundError(StoreError):
    """No mission exists with the requested id."""
