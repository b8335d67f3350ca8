"""JSON file persistence for tracker state.

This module handles loading and saving the full tracker state to a JSON file,
with file locking so a reader never sees a half-written file.
"""

import json
import logging
from pathlib import Path

from filelock import FileLock
from pydantic import ValidationError

from jira_tracker.tracker.errors import StateFileError, StateFileNotFoundError
from jira_tracker.tracker.models import TrackerSnapshot

logger = logging.getLogger(__name__)


class StateFile:
    """JSON file-based storage for the tracker state.

    Every write replaces the whole document with a full snapshot. Reads and
    writes hold a lock file next to the state file.

    Example:
        storage = StateFile("/path/to/state.json")
        snapshot = storage.read()
        storage.write(snapshot)
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the state file storage.

        Args:
            path: Path to the JSON state file.
        """
        self._path = Path(path)
        self._lock_path = self._path.with_name(self._path.name + ".lock")
        self._lock = FileLock(str(self._lock_path))

    @property
    def path(self) -> Path:
        """Get the state file path."""
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def read(self) -> TrackerSnapshot:
        """Read and parse the state file.

        Returns:
            Parsed tracker state.

        Raises:
            StateFileNotFoundError: If the file does not exist.
            StateFileError: If the file cannot be read or is not valid state.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock:
                content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise StateFileNotFoundError(f"State file not found: {self._path}") from e
        except OSError as e:
            raise StateFileError(f"Cannot read state file {self._path}: {e}") from e

        try:
            snapshot = TrackerSnapshot.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            raise StateFileError(f"Invalid state file {self._path}: {e}") from e

        logger.debug(f"Loaded {len(snapshot.trackers)} trackers from {self._path}")
        return snapshot

    def write(self, snapshot: TrackerSnapshot) -> None:
        """Write the full state to the file.

        Args:
            snapshot: State to write.

        Raises:
            StateFileError: If the file cannot be written.
        """
        content = json.dumps(snapshot.model_dump(mode="json"), indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock:
                self._path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StateFileError(f"Cannot write state file {self._path}: {e}") from e
        logger.debug(f"Saved {len(snapshot.trackers)} trackers to {self._path}")
