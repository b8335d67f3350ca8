"""Jira issue lookup.

Resolves an issue key such as ``ABC-123`` to the issue's numeric ID, which
Tempo needs for worklogs.

API Documentation: https://developer.atlassian.com/cloud/jira/platform/rest/v3/
"""

import logging

import httpx
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class JiraError(Exception):
    """A Jira request failed or returned something unexpected."""


class IssueInfo(BaseModel):
    """The parts of a Jira issue the tracker needs."""

    id: str = Field(..., description="Numeric issue ID")
    key: str = Field(..., description="Issue key")
    summary: str | None = Field(default=None, description="Issue summary")


class JiraClient:
    """Minimal async client for Jira Cloud.

    Example:
        jira = JiraClient("https://example.atlassian.net", "me@example.com", "token")
        issue = await jira.get_issue_info("ABC-123")
    """

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Jira site URL.
            email: Account email for basic auth.
            api_token: API token for basic auth.
            timeout: Request timeout in seconds.
            transport: Optional transport override (used by tests).
        """
        self._base_url = base_url.rstrip("/")
        self._auth = httpx.BasicAuth(email, api_token)
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            auth=self._auth,
            timeout=self._timeout,
            headers={"Accept": "application/json"},
            transport=self._transport,
        )

    async def _get(self, path: str, **params: str) -> dict:
        try:
            async with self._client() as client:
                response = await client.get(path, params=params or None)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise JiraError(f"HTTP {e.response.status_code}: {e.response.text[:200]}") from e
        except httpx.RequestError as e:
            raise JiraError(f"Connection error: {e}") from e
        except ValueError as e:
            raise JiraError(f"Invalid response from Jira: {e}") from e

    async def get_issue_info(self, key: str) -> IssueInfo:
        """Look up an issue by key.

        Args:
            key: Issue key such as ``ABC-123``

        Returns:
            Issue ID, key and summary

        Raises:
            JiraError: If the issue cannot be fetched.
        """
        data = await self._get(f"/rest/api/3/issue/{key}", fields="summary")
        try:
            issue = IssueInfo(
                id=str(data["id"]),
                key=data.get("key", key),
                summary=(data.get("fields") or {}).get("summary"),
            )
        except (KeyError, ValidationError) as e:
            raise JiraError(f"Unexpected issue payload for '{key}': {e}") from e
        logger.debug(f"Resolved issue {key} to id {issue.id}")
        return issue

    async def get_account_id(self) -> str:
        """Get the Atlassian account ID of the authenticated user."""
        data = await self._get("/rest/api/3/myself")
        account_id = data.get("accountId")
        if not account_id:
            raise JiraError("Jira did not return an accountId")
        return account_id
