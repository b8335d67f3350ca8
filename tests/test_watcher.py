"""Tests for the state file watcher."""

import threading
import time

from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from jira_tracker.tracker import StateFileWatcher
from jira_tracker.tracker.watcher import StateFileEventHandler


class TestStateFileEventHandler:
    """Tests for event filtering."""

    def _handler(self, tmp_path):
        calls = []
        handler = StateFileEventHandler(tmp_path / "state.json", lambda: calls.append(1))
        return handler, calls

    def test_matching_events(self, tmp_path):
        handler, calls = self._handler(tmp_path)
        path = str(tmp_path / "state.json")

        handler.on_any_event(FileModifiedEvent(path))
        handler.on_any_event(FileCreatedEvent(path))
        handler.on_any_event(FileMovedEvent(str(tmp_path / "state.json.tmp"), path))

        assert len(calls) == 3

    def test_ignores_other_files(self, tmp_path):
        handler, calls = self._handler(tmp_path)

        handler.on_any_event(FileModifiedEvent(str(tmp_path / "state.json.lock")))
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "other.json")))
        handler.on_any_event(DirCreatedEvent(str(tmp_path / "state.json")))

        assert calls == []


class TestStateFileWatcher:
    """Tests for debouncing and error handling."""

    def test_burst_triggers_one_callback(self, tmp_path):
        fired = threading.Event()
        calls = []

        def callback():
            calls.append(time.monotonic())
            fired.set()

        watcher = StateFileWatcher(tmp_path / "state.json", callback, debounce=0.1)
        event = FileModifiedEvent(str(tmp_path / "state.json"))
        for _ in range(5):
            watcher.event_handler.on_any_event(event)

        assert fired.wait(timeout=2)
        time.sleep(0.3)
        assert len(calls) == 1
        watcher.stop()

    def test_callback_failure_is_logged(self, tmp_path, caplog):
        """A failing reload does not stop later reloads."""
        attempts = []
        succeeded = threading.Event()

        def callback():
            attempts.append(1)
            if len(attempts) == 1:
                raise ValueError("corrupt")
            succeeded.set()

        watcher = StateFileWatcher(tmp_path / "state.json", callback, debounce=0.05)
        event = FileModifiedEvent(str(tmp_path / "state.json"))

        watcher.event_handler.on_any_event(event)
        deadline = time.monotonic() + 2
        while not attempts and time.monotonic() < deadline:
            time.sleep(0.01)
        watcher.event_handler.on_any_event(event)

        assert succeeded.wait(timeout=2)
        assert len(attempts) == 2
        assert "failed" in caplog.text
        watcher.stop()

    def test_stop_cancels_pending_callback(self, tmp_path):
        calls = []
        watcher = StateFileWatcher(tmp_path / "state.json", lambda: calls.append(1), debounce=0.2)

        watcher.event_handler.on_any_event(FileModifiedEvent(str(tmp_path / "state.json")))
        watcher.stop()
        time.sleep(0.4)

        assert calls == []
        assert not watcher.is_running
