"""Tracker state engine.

Provides the in-memory tracker store, its thread-safe persisted wrapper,
the JSON state file and the state file watcher.

Example:
    from jira_tracker.tracker import StateFile, TrackerState

    state = TrackerState.open(StateFile("state.json"))
    state.create("ABC-123", "10042")
    state.start("ABC-123")
    print(state.current().duration)
"""

from jira_tracker.tracker.clock import SystemClock
from jira_tracker.tracker.durations import format_duration, parse_duration
from jira_tracker.tracker.errors import (
    DurationAdjustmentError,
    KeyFormatError,
    NotFoundError,
    OccupiedError,
    StateFileError,
    StateFileNotFoundError,
    TrackerError,
)
from jira_tracker.tracker.models import RunningRecord, Tracker, TrackerSnapshot, TrackerView
from jira_tracker.tracker.state import TrackerState
from jira_tracker.tracker.storage import StateFile
from jira_tracker.tracker.store import TrackerStore
from jira_tracker.tracker.watcher import StateFileWatcher

__all__ = [
    # State
    "TrackerState",
    "TrackerStore",
    "SystemClock",
    # Models
    "Tracker",
    "TrackerView",
    "TrackerSnapshot",
    "RunningRecord",
    # Persistence
    "StateFile",
    "StateFileWatcher",
    # Errors
    "TrackerError",
    "KeyFormatError",
    "OccupiedError",
    "NotFoundError",
    "DurationAdjustmentError",
    "StateFileError",
    "StateFileNotFoundError",
    # Durations
    "format_duration",
    "parse_duration",
]
