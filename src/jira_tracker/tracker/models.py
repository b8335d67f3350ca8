"""Pydantic models for tracker records, views and the persisted state.

Durations are written as float seconds and timestamps as ISO-8601 strings.
State files written by older releases stored durations as ``{"secs", "nanos"}``
objects and the running start as ``{"secs_since_epoch", "nanos_since_epoch"}``;
both are still accepted on read.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from pydantic import (
    AwareDatetime,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    SerializerFunctionWrapHandler,
    field_serializer,
    model_serializer,
)

from jira_tracker.tracker.durations import format_duration


def _legacy_duration(value: Any) -> Any:
    if isinstance(value, dict) and "secs" in value:
        return timedelta(seconds=value["secs"], microseconds=value.get("nanos", 0) / 1000)
    return value


def _legacy_timestamp(value: Any) -> Any:
    if isinstance(value, dict) and "secs_since_epoch" in value:
        seconds = value["secs_since_epoch"] + value.get("nanos_since_epoch", 0) / 1e9
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    return value


Seconds = Annotated[
    timedelta,
    BeforeValidator(_legacy_duration),
    PlainSerializer(lambda value: value.total_seconds(), return_type=float, when_used="json"),
]

# Fields dropped from the serialized record when empty
_SPARSE_FIELDS = ("description", "positive_adjustments", "negative_adjustments")


class Tracker(BaseModel):
    """Accumulated paused time for one issue.

    Attributes:
        id: Canonical issue ID resolved from the issue key.
        description: Optional free text.
        duration: Time folded in from finished running periods.
        positive_adjustments: Manual additions, in the order they were made.
        negative_adjustments: Manual subtractions, in the order they were made.
        start_time: Local time the tracker was created.
    """

    id: str = Field(..., description="Canonical issue ID")
    description: str | None = Field(default=None, description="Optional description")
    duration: Seconds = Field(default=timedelta(0), description="Accumulated paused time")
    positive_adjustments: list[Seconds] = Field(
        default_factory=list,
        description="Manual positive corrections",
    )
    negative_adjustments: list[Seconds] = Field(
        default_factory=list,
        description="Manual negative corrections",
    )
    start_time: datetime = Field(..., description="Creation time (local zone)")

    @model_serializer(mode="wrap")
    def _sparse(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name in _SPARSE_FIELDS:
            if not data.get(name):
                data.pop(name, None)
        return data


class RunningRecord(BaseModel):
    """Persisted form of the running marker.

    The monotonic start instant cannot survive a restart, so it is stored as
    the absolute time the tracker was started.
    """

    key: str = Field(..., description="Key of the running tracker")
    start_time: Annotated[AwareDatetime, BeforeValidator(_legacy_timestamp)] = Field(
        ..., description="Absolute start time (UTC)"
    )


class TrackerSnapshot(BaseModel):
    """Root structure of the state file."""

    running: RunningRecord | None = Field(default=None, description="Running tracker, if any")
    trackers: dict[str, Tracker] = Field(
        default_factory=dict,
        description="Trackers by issue key, in creation order",
    )


class TrackerView(BaseModel):
    """Read-only projection of a tracker as reported to callers.

    ``duration`` includes adjustments and live running time and is truncated
    to whole seconds. In JSON it is rendered as a string like ``"1h 2m 3s"``.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    id: str
    description: str | None = None
    duration: timedelta
    running: bool
    start_time: datetime

    @property
    def seconds(self) -> int:
        return int(self.duration.total_seconds())

    @field_serializer("duration", when_used="json")
    def _format_duration(self, value: timedelta) -> str:
        return format_duration(value)
