"""HTTP API for the tracker."""

from jira_tracker.api.app import create_app

__all__ = ["create_app"]
