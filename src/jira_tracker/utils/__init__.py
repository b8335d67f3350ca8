"""Utility helpers."""

from jira_tracker.utils.rwlock import ReadWriteLock

__all__ = ["ReadWriteLock"]
