"""Mapping of tracker and integration errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from jira_tracker.integrations import JiraError, TempoError
from jira_tracker.tracker.errors import (
    DurationAdjustmentError,
    KeyFormatError,
    NotFoundError,
    OccupiedError,
    StateFileError,
)

logger = logging.getLogger(__name__)

_EXCEPTION_STATUS = {
    KeyFormatError: 400,
    DurationAdjustmentError: 400,
    NotFoundError: 404,
    OccupiedError: 409,
    StateFileError: 500,
    JiraError: 502,
    TempoError: 502,
}


def _make_handler(status_code: int):
    """Create a handler that renders an exception as ``{"detail": ...}``."""

    async def _handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return _handler


def register_error_handlers(app: FastAPI) -> None:
    """Register the exception handlers on the FastAPI app."""
    for exc_cls, status in _EXCEPTION_STATUS.items():
        app.add_exception_handler(exc_cls, _make_handler(status))
