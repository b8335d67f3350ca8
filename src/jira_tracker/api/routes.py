"""HTTP routes for trackers."""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, Response

from jira_tracker.api.schemas import AdjustTrackerBody, SumResponse
from jira_tracker.config import Settings
from jira_tracker.integrations import JiraClient, JiraError, TempoClient
from jira_tracker.tracker import NotFoundError, TrackerState, TrackerView

logger = logging.getLogger(__name__)

router = APIRouter()


def get_state(request: Request) -> TrackerState:
    return request.app.state.tracker_state


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_jira(request: Request) -> JiraClient:
    return request.app.state.jira


def get_tempo(request: Request) -> TempoClient:
    return request.app.state.tempo


# -- /trackers --------------------------------------------------------------


@router.get("/trackers")
def list_trackers(state: TrackerState = Depends(get_state)) -> list[TrackerView]:
    return state.list()


@router.delete("/trackers", status_code=204)
def clear(state: TrackerState = Depends(get_state)) -> Response:
    state.remove_all()
    return Response(status_code=204)


@router.get("/trackers/{key}")
def get_tracker(key: str, state: TrackerState = Depends(get_state)) -> TrackerView:
    return state.get(key)


@router.post("/trackers/{key}")
async def create(
    key: str,
    state: TrackerState = Depends(get_state),
    jira: JiraClient = Depends(get_jira),
) -> TrackerView:
    """Create a tracker for a Jira issue and start it."""
    try:
        issue = await jira.get_issue_info(key)
    except JiraError as e:
        logger.warning(f"Issue lookup for {key} failed: {e}")
        raise NotFoundError(key) from e
    await asyncio.to_thread(state.create, key, issue.id)
    return await asyncio.to_thread(state.start, key)


@router.put("/trackers/{key}")
def adjust(key: str, body: AdjustTrackerBody, state: TrackerState = Depends(get_state)) -> TrackerView:
    if "description" in body.model_fields_set:
        return state.set_description(key, body.description)
    if body.plus is not None:
        if body.using:
            _, tracker = state.transfer(body.using, key, body.plus)
            return tracker
        return state.adjust_positive(key, body.plus)
    if body.using:
        tracker, _ = state.transfer(key, body.using, body.minus)
        return tracker
    return state.adjust_negative(key, body.minus)


@router.delete("/trackers/{key}", status_code=204)
def delete(key: str, state: TrackerState = Depends(get_state)) -> Response:
    state.remove(key)
    return Response(status_code=204)


@router.post("/trackers/{key}/start")
def start(key: str, state: TrackerState = Depends(get_state)) -> TrackerView:
    return state.start(key)


# -- /tracker ---------------------------------------------------------------


@router.get("/tracker")
def current(state: TrackerState = Depends(get_state)) -> TrackerView:
    return state.current()


@router.post("/tracker/pause", status_code=204)
def pause(state: TrackerState = Depends(get_state)) -> Response:
    state.pause()
    return Response(status_code=204)


# -- totals and submission --------------------------------------------------


@router.get("/sum")
def total(state: TrackerState = Depends(get_state)) -> SumResponse:
    return SumResponse(duration=state.sum())


@router.post("/submit", status_code=204)
async def submit(
    state: TrackerState = Depends(get_state),
    settings: Settings = Depends(get_settings),
    jira: JiraClient = Depends(get_jira),
    tempo: TempoClient = Depends(get_tempo),
) -> Response:
    """Upload all trackers to Tempo, then clear them."""
    trackers = await asyncio.to_thread(state.list)
    account_id = settings.jira_account_id or await jira.get_account_id()
    count = await tempo.submit_all(trackers, account_id)
    await asyncio.to_thread(state.remove_all)
    logger.info(f"Submitted {count} worklogs and cleared {len(trackers)} trackers")
    return Response(status_code=204)
