"""Tempo worklog submission.

Uploads the tracked time as one worklog per tracker.

API Documentation: https://apidocs.tempo.io/
"""

import logging

import httpx

from jira_tracker.tracker.models import TrackerView

logger = logging.getLogger(__name__)

DEFAULT_TEMPO_URL = "https://api.tempo.io/4"


class TempoError(Exception):
    """Submitting a worklog to Tempo failed."""


def build_worklog(tracker: TrackerView, account_id: str) -> dict:
    """Build the Tempo worklog payload for a tracker."""
    try:
        issue_id = int(tracker.id)
    except ValueError as e:
        raise TempoError(f"Tracker '{tracker.key}' has a non-numeric issue id '{tracker.id}'") from e
    return {
        "authorAccountId": account_id,
        "issueId": issue_id,
        "timeSpentSeconds": tracker.seconds,
        "startDate": tracker.start_time.strftime("%Y-%m-%d"),
        "startTime": tracker.start_time.strftime("%H:%M:%S"),
        "description": tracker.description or tracker.key,
    }


class TempoClient:
    """Minimal async client for the Tempo REST API.

    Example:
        tempo = TempoClient("token")
        await tempo.submit_all(state.list(), account_id)
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_TEMPO_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Accept": "application/json",
        }
        self._timeout = timeout
        self._transport = transport

    async def submit_all(self, trackers: list[TrackerView], account_id: str) -> int:
        """Submit one worklog per tracker with time on it.

        Trackers with zero duration are skipped. Submission stops at the
        first failure.

        Args:
            trackers: Trackers to submit
            account_id: Atlassian account ID of the worklog author

        Returns:
            Number of worklogs created

        Raises:
            TempoError: If a worklog cannot be created.
        """
        submitted = 0
        async with httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            for tracker in trackers:
                if tracker.seconds <= 0:
                    logger.debug(f"Skipping {tracker.key}, no time tracked")
                    continue
                payload = build_worklog(tracker, account_id)
                try:
                    response = await client.post("/worklogs", json=payload)
                    response.raise_for_status()
                except httpx.HTTPStatusError as e:
                    raise TempoError(
                        f"Submitting {tracker.key} failed: HTTP {e.response.status_code}: {e.response.text[:200]}"
                    ) from e
                except httpx.RequestError as e:
                    raise TempoError(f"Submitting {tracker.key} failed: connection error: {e}") from e
                submitted += 1
                logger.info(f"Submitted {tracker.seconds}s for {tracker.key}")
        return submitted
