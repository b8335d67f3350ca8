"""Reload the tracker state when the state file changes on disk.

The state file may be edited by hand or synced from another machine. The
watcher observes the file's directory and, once changes have settled for a
short debounce period, calls back (normally ``TrackerState.reload``).
"""

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

_RELOAD_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED, EVENT_TYPE_CLOSED}


class StateFileEventHandler(FileSystemEventHandler):
    """Forwards file system events that touch the state file."""

    def __init__(self, path: Path, on_change: Callable[[], None]) -> None:
        self._path = path.resolve()
        self._on_change = on_change

    def _matches(self, raw_path: str | bytes) -> bool:
        return bool(raw_path) and Path(os.fsdecode(raw_path)).resolve() == self._path

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _RELOAD_EVENTS:
            return
        if self._matches(event.src_path) or self._matches(getattr(event, "dest_path", "")):
            logger.debug(f"State file event: {event.event_type}")
            self._on_change()


class StateFileWatcher:
    """Calls ``callback`` after the state file has changed.

    Bursts of events are collapsed: every event restarts a ``debounce``
    second timer and the callback runs once when it expires. If the callback
    raises, the error is logged and the next change triggers a new attempt.

    Example:
        with StateFileWatcher(storage.path, state.reload):
            serve()
    """

    def __init__(self, path: str | Path, callback: Callable[[], None], debounce: float = 1.0) -> None:
        """Initialize the watcher.

        Args:
            path: State file to watch. Its parent directory must exist.
            callback: Called once per settled burst of changes.
            debounce: Quiet period in seconds before calling back.
        """
        self._path = Path(path)
        self._callback = callback
        self._debounce = debounce
        self._timer: threading.Timer | None = None
        self._timer_lock = threading.Lock()
        self._observer: Observer | None = None
        self.event_handler = StateFileEventHandler(self._path, self._schedule)

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def _schedule(self) -> None:
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._timer_lock:
            self._timer = None
        logger.info(f"State file {self._path} changed, reloading")
        try:
            self._callback()
        except Exception:
            logger.exception(f"Reloading {self._path} failed, waiting for the next change")

    def start(self) -> None:
        """Start watching the state file's directory."""
        if self._observer is not None:
            return
        directory = self._path.parent.resolve()
        directory.mkdir(parents=True, exist_ok=True)
        observer = Observer()
        observer.schedule(self.event_handler, str(directory), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.debug(f"Started monitoring of {self._path}")

    def stop(self) -> None:
        """Stop watching and drop any pending callback."""
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            logger.debug(f"Stopped monitoring of {self._path}")

    def __enter__(self) -> "StateFileWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False
