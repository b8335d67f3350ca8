"""Request and response bodies for the HTTP API."""

from datetime import timedelta
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_serializer, model_validator

from jira_tracker.tracker.durations import format_duration, parse_duration


def _parse_duration(value: Any) -> Any:
    if isinstance(value, str):
        return parse_duration(value)
    return value


# Accepts "1h 30m" style strings as well as plain seconds
DurationInput = Annotated[timedelta, BeforeValidator(_parse_duration)]


class AdjustTrackerBody(BaseModel):
    """Body of ``PUT /trackers/{key}``.

    Exactly one action must be given:

    - ``description``: set (or clear, with null or "") the description
    - ``plus``: add time; with ``using`` the time is taken from that tracker
    - ``minus``: subtract time; with ``using`` the time is given to that tracker
    """

    model_config = ConfigDict(extra="forbid")

    description: str | None = Field(default=None, description="New description")
    plus: DurationInput | None = Field(
        default=None,
        validation_alias=AliasChoices("plus", "add", "increase"),
        description="Duration to add",
    )
    minus: DurationInput | None = Field(
        default=None,
        validation_alias=AliasChoices("minus", "sub", "subtract", "decrease"),
        description="Duration to subtract",
    )
    using: str | None = Field(
        default=None,
        validation_alias=AliasChoices("using", "from", "to"),
        description="Other tracker to move the time from or to",
    )

    @model_validator(mode="after")
    def _single_action(self) -> "AdjustTrackerBody":
        actions = [name for name in ("description", "plus", "minus") if name in self.model_fields_set]
        if len(actions) != 1:
            raise ValueError("Exactly one of 'description', 'plus' or 'minus' is required")
        action = actions[0]
        if action != "description" and getattr(self, action) is None:
            raise ValueError(f"'{action}' requires a duration")
        if action == "description" and self.using is not None:
            raise ValueError("'using' only applies to 'plus' and 'minus'")
        return self


class SumResponse(BaseModel):
    """Total tracked time across all trackers."""

    duration: timedelta

    @field_serializer("duration", when_used="json")
    def _format_duration(self, value: timedelta) -> str:
        return format_duration(value)
