"""In-memory tracker store.

Holds the ordered trackers and the single running marker, and implements
every state transition. The store does no locking and no I/O; see
``jira_tracker.tracker.state`` for the thread-safe, persisted wrapper.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import timedelta

from jira_tracker.tracker import durations
from jira_tracker.tracker.clock import SystemClock
from jira_tracker.tracker.errors import (
    DurationAdjustmentError,
    KeyFormatError,
    NotFoundError,
    OccupiedError,
)
from jira_tracker.tracker.models import RunningRecord, Tracker, TrackerSnapshot, TrackerView

logger = logging.getLogger(__name__)

ISSUE_KEY_PATTERN = re.compile(r"\w+-\d+")


@dataclass
class RunningMarker:
    """Points at the tracker that is currently accumulating time.

    Attributes:
        key: Key of the running tracker.
        started: Monotonic clock reading when it was started.
    """

    key: str
    started: float


class TrackerStore:
    """Paused trackers plus at most one running marker.

    Invariant: when a marker is present its key is in ``_trackers``. Running
    time lives only in the marker until it is folded into the tracker's
    ``duration`` by a pause.

    Every operation validates before it mutates, so an operation that raises
    leaves the store unchanged.
    """

    def __init__(self, clock: SystemClock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._trackers: dict[str, Tracker] = {}
        self._running: RunningMarker | None = None

    @property
    def clock(self) -> SystemClock:
        return self._clock

    # -- snapshots ------------------------------------------------------

    @classmethod
    def from_snapshot(cls, snapshot: TrackerSnapshot, clock: SystemClock | None = None) -> "TrackerStore":
        """Build a store from persisted state.

        The running start time is re-based onto the monotonic clock, so time
        that passed while the process was down counts as running time.
        """
        store = cls(clock)
        store._trackers = dict(snapshot.trackers)
        running = snapshot.running
        if running is not None:
            if running.key not in store._trackers:
                logger.warning(f"Dropping running marker for unknown tracker '{running.key}'")
            else:
                age = (store._clock.utcnow() - running.start_time).total_seconds()
                store._running = RunningMarker(
                    key=running.key,
                    started=store._clock.monotonic() - max(0.0, age),
                )
        return store

    def to_snapshot(self) -> TrackerSnapshot:
        """Capture the full state for persistence."""
        running = None
        if self._running is not None:
            age = durations.running_elapsed(self._running.started, self._clock.monotonic())
            running = RunningRecord(key=self._running.key, start_time=self._clock.utcnow() - age)
        return TrackerSnapshot(
            running=running,
            trackers={key: tracker.model_copy(deep=True) for key, tracker in self._trackers.items()},
        )

    # -- helpers --------------------------------------------------------

    def _require(self, key: str) -> Tracker:
        tracker = self._trackers.get(key)
        if tracker is None:
            raise NotFoundError(key)
        return tracker

    def _is_running(self, key: str) -> bool:
        return self._running is not None and self._running.key == key

    def _running_elapsed(self, key: str) -> timedelta:
        if not self._is_running(key):
            return durations.ZERO
        return durations.running_elapsed(self._running.started, self._clock.monotonic())

    def elapsed(self, key: str) -> timedelta:
        """Full-precision adjusted elapsed time of a tracker."""
        return durations.elapsed(self._require(key), self._running_elapsed(key))

    def elapsed_seconds(self, key: str) -> timedelta:
        """Adjusted elapsed time truncated to whole seconds."""
        return durations.whole_seconds(self.elapsed(key))

    def _view(self, key: str) -> TrackerView:
        tracker = self._require(key)
        return TrackerView(
            key=key,
            id=tracker.id,
            description=tracker.description,
            duration=self.elapsed_seconds(key),
            running=self._is_running(key),
            start_time=tracker.start_time,
        )

    # -- queries --------------------------------------------------------

    def current(self) -> TrackerView:
        """View of the running tracker.

        Raises:
            NotFoundError: If nothing is running.
        """
        if self._running is None:
            raise NotFoundError()
        return self._view(self._running.key)

    def get(self, key: str) -> TrackerView:
        return self._view(key)

    def list(self) -> list[TrackerView]:
        """Views of all trackers in creation order."""
        return [self._view(key) for key in self._trackers]

    def sum(self) -> timedelta:
        """Total of all whole-second tracker durations, running included."""
        return durations.total(view.duration for view in self.list())

    def __len__(self) -> int:
        return len(self._trackers)

    # -- transitions ----------------------------------------------------

    def create(self, key: str, id: str) -> TrackerView:
        """Add a paused tracker with zero duration.

        Args:
            key: Issue key such as ``ABC-123``.
            id: Canonical issue ID from the issue lookup.

        Raises:
            KeyFormatError: If the key is malformed.
            OccupiedError: If the key already has a tracker.
        """
        if not ISSUE_KEY_PATTERN.fullmatch(key):
            raise KeyFormatError(key)
        if key in self._trackers:
            raise OccupiedError(key)
        self._trackers[key] = Tracker(id=id, start_time=self._clock.now())
        logger.debug(f"Created tracker '{key}' (id {id})")
        return self._view(key)

    def start(self, key: str) -> TrackerView:
        """Make ``key`` the running tracker.

        Whatever was running is paused first; restarting the running tracker
        folds its time so far and starts a new running period.
        """
        self._require(key)
        self.pause()
        self._running = RunningMarker(key=key, started=self._clock.monotonic())
        logger.debug(f"Started tracker '{key}'")
        return self._view(key)

    def pause(self) -> None:
        """Fold the running time into its tracker and clear the marker."""
        if self._running is None:
            return
        key = self._running.key
        self._trackers[key].duration += self._running_elapsed(key)
        self._running = None
        logger.debug(f"Paused tracker '{key}'")

    def set_description(self, key: str, description: str | None) -> TrackerView:
        tracker = self._require(key)
        tracker.description = description or None
        return self._view(key)

    def adjust_positive(self, key: str, duration: timedelta) -> TrackerView:
        """Record a manual addition to a tracker.

        Raises:
            NotFoundError: If the tracker does not exist.
            DurationAdjustmentError: If ``duration`` is negative or the
                total would exceed the largest representable duration.
        """
        tracker = self._require(key)
        self._check_can_add(key, duration)
        tracker.positive_adjustments.append(duration)
        logger.debug(f"Adjusted tracker '{key}' by +{duration}")
        return self._view(key)

    def adjust_negative(self, key: str, duration: timedelta) -> TrackerView:
        """Record a manual subtraction from a tracker.

        Raises:
            NotFoundError: If the tracker does not exist.
            DurationAdjustmentError: If ``duration`` exceeds the tracker's
                current elapsed time.
        """
        tracker = self._require(key)
        self._check_can_subtract(key, duration)
        tracker.negative_adjustments.append(duration)
        logger.debug(f"Adjusted tracker '{key}' by -{duration}")
        return self._view(key)

    def transfer(self, source: str, target: str, duration: timedelta) -> tuple[TrackerView, TrackerView]:
        """Move time from one tracker to another in one step.

        Returns:
            Views of the source and target trackers, in that order.
        """
        source_tracker = self._require(source)
        target_tracker = self._require(target)
        self._check_can_subtract(source, duration)
        self._check_can_add(target, duration)
        source_tracker.negative_adjustments.append(duration)
        target_tracker.positive_adjustments.append(duration)
        logger.debug(f"Moved {duration} from '{source}' to '{target}'")
        return self._view(source), self._view(target)

    def _check_can_subtract(self, key: str, duration: timedelta) -> None:
        _check_non_negative(duration)
        available = self.elapsed(key)
        if duration > available:
            raise DurationAdjustmentError(
                f"Cannot subtract {durations.format_duration(duration)} from '{key}', "
                f"only {durations.format_duration(available)} elapsed"
            )

    def _check_can_add(self, key: str, duration: timedelta) -> None:
        _check_non_negative(duration)
        try:
            durations.elapsed(self._require(key), self._running_elapsed(key) + duration)
        except OverflowError as e:
            raise DurationAdjustmentError(
                f"Cannot add {durations.format_duration(duration)} to '{key}', total would be too large"
            ) from e

    def remove(self, key: str) -> Tracker:
        """Delete a tracker, pausing it first if it is running.

        Returns:
            The removed tracker record.
        """
        self._require(key)
        if self._is_running(key):
            self.pause()
        tracker = self._trackers.pop(key)
        logger.debug(f"Removed tracker '{key}'")
        return tracker

    def remove_all(self) -> list[Tracker]:
        """Delete every tracker, returning them in creation order."""
        self.pause()
        removed = list(self._trackers.values())
        self._trackers.clear()
        logger.debug(f"Removed {len(removed)} trackers")
        return removed


def _check_non_negative(duration: timedelta) -> None:
    if duration < durations.ZERO:
        raise DurationAdjustmentError(f"Adjustment must not be negative: {duration}")
