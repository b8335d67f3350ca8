"""Thread-safe, persisted tracker state.

``TrackerState`` guards a ``TrackerStore`` with a readers/writer lock and
writes the whole state to the state file after every successful mutation.
The write happens after the exclusive lock is released, under shared access,
so two writers may flush in the opposite order to the one in which they
mutated. Each flush writes the complete current state, so the file always
ends up holding every update.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import TypeVar

from jira_tracker.tracker.clock import SystemClock
from jira_tracker.tracker.errors import StateFileNotFoundError
from jira_tracker.tracker.models import Tracker, TrackerView
from jira_tracker.tracker.storage import StateFile
from jira_tracker.tracker.store import TrackerStore
from jira_tracker.utils.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TrackerState:
    """Shared tracker state backed by a state file.

    Reads run concurrently; mutations are serialized. A mutating call returns
    only after the state file has been rewritten, and a failed write raises
    ``StateFileError`` to the caller.

    Example:
        state = TrackerState.open(StateFile("~/.jira_tracker/state.json"))
        state.create("ABC-123", "10042")
        state.start("ABC-123")
    """

    def __init__(self, storage: StateFile, store: TrackerStore | None = None) -> None:
        """Initialize the state.

        Args:
            storage: State file that every mutation is flushed to.
            store: Initial in-memory state (empty when omitted).
        """
        self._storage = storage
        self._store = store or TrackerStore()
        self._lock = ReadWriteLock()

    @classmethod
    def open(cls, storage: StateFile, clock: SystemClock | None = None) -> TrackerState:
        """Load the state from ``storage``, starting empty if the file is missing.

        Raises:
            StateFileError: If the file exists but cannot be read or parsed.
        """
        try:
            store = TrackerStore.from_snapshot(storage.read(), clock)
            logger.info(f"Loaded {len(store)} trackers from {storage.path}")
        except StateFileNotFoundError:
            logger.info(f"No state file at {storage.path}, starting empty")
            store = TrackerStore(clock)
        return cls(storage, store)

    @property
    def storage(self) -> StateFile:
        return self._storage

    # -- access helpers -------------------------------------------------

    def _reading(self, fn: Callable[[TrackerStore], T]) -> T:
        with self._lock.read_locked():
            return fn(self._store)

    def _writing(self, fn: Callable[[TrackerStore], T]) -> T:
        result = self._writing_without_flush(fn)
        self._reading(lambda store: self._storage.write(store.to_snapshot()))
        return result

    def _writing_without_flush(self, fn: Callable[[TrackerStore], T]) -> T:
        with self._lock.write_locked():
            return fn(self._store)

    # -- queries --------------------------------------------------------

    def current(self) -> TrackerView:
        return self._reading(lambda s: s.current())

    def get(self, key: str) -> TrackerView:
        return self._reading(lambda s: s.get(key))

    def list(self) -> list[TrackerView]:
        return self._reading(lambda s: s.list())

    def sum(self) -> timedelta:
        return self._reading(lambda s: s.sum())

    # -- mutations ------------------------------------------------------

    def create(self, key: str, id: str) -> TrackerView:
        return self._writing(lambda s: s.create(key, id))

    def start(self, key: str) -> TrackerView:
        return self._writing(lambda s: s.start(key))

    def pause(self) -> None:
        self._writing(lambda s: s.pause())

    def set_description(self, key: str, description: str | None) -> TrackerView:
        return self._writing(lambda s: s.set_description(key, description))

    def adjust_positive(self, key: str, duration: timedelta) -> TrackerView:
        return self._writing(lambda s: s.adjust_positive(key, duration))

    def adjust_negative(self, key: str, duration: timedelta) -> TrackerView:
        return self._writing(lambda s: s.adjust_negative(key, duration))

    def transfer(self, source: str, target: str, duration: timedelta) -> tuple[TrackerView, TrackerView]:
        return self._writing(lambda s: s.transfer(source, target, duration))

    def remove(self, key: str) -> Tracker:
        return self._writing(lambda s: s.remove(key))

    def remove_all(self) -> list[Tracker]:
        return self._writing(lambda s: s.remove_all())

    # -- reload ---------------------------------------------------------

    def reload(self) -> None:
        """Replace the whole state with the contents of the state file.

        Does not write the file back, so it is safe to call from a watcher
        on that file. On failure the in-memory state is left as it was.

        Raises:
            StateFileError: If the file cannot be read or parsed.
        """

        def replace(store: TrackerStore) -> int:
            self._store = TrackerStore.from_snapshot(self._storage.read(), store.clock)
            return len(self._store)

        count = self._writing_without_flush(replace)
        logger.info(f"Reloaded {count} trackers from {self._storage.path}")
