"""Clients for the Jira and Tempo REST APIs."""

from jira_tracker.integrations.jira import IssueInfo, JiraClient, JiraError
from jira_tracker.integrations.tempo import TempoClient, TempoError

__all__ = ["JiraClient", "IssueInfo", "JiraError", "TempoClient", "TempoError"]
