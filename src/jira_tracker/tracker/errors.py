"""Exceptions raised by the tracker state engine.

``TrackerError`` subclasses are caller errors: the store is left unchanged and
the caller can correct the request. ``StateFileError`` covers failures to read
or write the state file and always chains the underlying exception.
"""


class TrackerError(Exception):
    """Base class for recoverable tracker errors."""


class KeyFormatError(TrackerError):
    """The issue key does not look like ``ABC-123``."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Malformed issue key: '{key}'")
        self.key = key


class OccupiedError(TrackerError):
    """A tracker with the key already exists."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Tracker '{key}' already exists")
        self.key = key


class NotFoundError(TrackerError):
    """No tracker with the key exists, or nothing is running."""

    def __init__(self, key: str | None = None) -> None:
        message = f"Tracker '{key}' not found" if key else "No tracker is running"
        super().__init__(message)
        self.key = key


class DurationAdjustmentError(TrackerError):
    """A negative adjustment would take the tracker below zero."""


class StateFileError(Exception):
    """Reading, parsing or writing the state file failed."""


class StateFileNotFoundError(StateFileError):
    """The state file does not exist."""
