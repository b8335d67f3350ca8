"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from jira_tracker import __version__
from jira_tracker.api.errors import register_error_handlers
from jira_tracker.api.routes import router
from jira_tracker.config import Settings
from jira_tracker.integrations import JiraClient, TempoClient
from jira_tracker.tracker import StateFile, StateFileWatcher, TrackerState

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    state: TrackerState | None = None,
    jira: JiraClient | None = None,
    tempo: TempoClient | None = None,
    watch: bool = True,
) -> FastAPI:
    """Build the API around a tracker state.

    Args:
        settings: Application settings.
        state: Tracker state (loaded from ``settings.json_file`` when omitted).
        jira: Jira client (built from settings when omitted).
        tempo: Tempo client (built from settings when omitted).
        watch: Reload the state when the state file changes on disk.

    Returns:
        The configured FastAPI app.
    """
    if state is None:
        state = TrackerState.open(StateFile(settings.get_state_file()))
    if jira is None:
        jira = JiraClient(
            settings.jira_url,
            settings.jira_email,
            settings.jira_api_token,
            timeout=settings.http_timeout,
        )
    if tempo is None:
        tempo = TempoClient(
            settings.tempo_api_token,
            base_url=settings.tempo_url,
            timeout=settings.http_timeout,
        )

    watcher = None
    if watch:
        watcher = StateFileWatcher(state.storage.path, state.reload, settings.watch_debounce_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if watcher is not None:
            watcher.start()
        logger.info(f"Tracking state in {state.storage.path}")
        try:
            yield
        finally:
            if watcher is not None:
                watcher.stop()

    app = FastAPI(title="Jira Tracker", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.tracker_state = state
    app.state.jira = jira
    app.state.tempo = tempo
    app.state.watcher = watcher

    register_error_handlers(app)
    app.include_router(router)
    return app
