"""Shared fixtures for the tracker tests."""

from datetime import datetime, timedelta, timezone

import pytest

from jira_tracker.tracker import StateFile, TrackerState, TrackerStore


class FakeClock:
    """Clock that only moves when told to.

    The monotonic and wall clocks advance together, like a real machine that
    is never adjusted.
    """

    def __init__(self) -> None:
        self.mono = 1000.0
        self.wall = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def monotonic(self) -> float:
        return self.mono

    def now(self) -> datetime:
        return self.wall.astimezone()

    def utcnow(self) -> datetime:
        return self.wall

    def advance(self, seconds: float) -> None:
        self.mono += seconds
        self.wall += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> TrackerStore:
    return TrackerStore(clock)


@pytest.fixture
def storage(tmp_path) -> StateFile:
    return StateFile(tmp_path / "state.json")


@pytest.fixture
def state(storage, clock) -> TrackerState:
    return TrackerState(storage, TrackerStore(clock))
