"""Jira Tracker - track working time on Jira issues and submit it to Tempo."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("jira-tracker")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from jira_tracker.tracker import TrackerState, TrackerStore, TrackerView

__all__ = ["TrackerState", "TrackerStore", "TrackerView"]
