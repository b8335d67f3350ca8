"""Duration arithmetic and human-readable duration strings."""

import re
from datetime import timedelta
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from jira_tracker.tracker.models import Tracker

ZERO = timedelta(0)
_SECOND = timedelta(seconds=1)

# Seconds per unit, keyed by every spelling parse_duration() accepts
_UNITS: dict[str, int] = {
    "d": 86400, "day": 86400, "days": 86400,
    "h": 3600, "hr": 3600, "hrs": 3600, "hour": 3600, "hours": 3600,
    "m": 60, "min": 60, "mins": 60, "minute": 60, "minutes": 60,
    "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
}

_DURATION_PART = re.compile(r"\s*(\d+(?:\.\d+)?)\s*([a-z]+)\s*", re.IGNORECASE)


def total(durations: Iterable[timedelta]) -> timedelta:
    """Sum a sequence of durations."""
    return sum(durations, ZERO)


def running_elapsed(started: float, now: float) -> timedelta:
    """Time since a monotonic start instant, never negative."""
    return timedelta(seconds=max(0.0, now - started))


def elapsed(tracker: "Tracker", running: timedelta = ZERO) -> timedelta:
    """Adjusted elapsed time of a tracker.

    Args:
        tracker: The tracker record.
        running: Live time of the tracker if it is the running one.

    Returns:
        ``duration + running + positive adjustments - negative adjustments``,
        clamped at zero.
    """
    gained = tracker.duration + running + total(tracker.positive_adjustments)
    return max(ZERO, gained - total(tracker.negative_adjustments))


def whole_seconds(value: timedelta) -> timedelta:
    """Truncate a duration to whole seconds."""
    return timedelta(seconds=value // _SECOND)


def format_duration(value: timedelta | int | float) -> str:
    """Format a duration into a human-readable string.

    Args:
        value: Duration as a timedelta or as seconds

    Returns:
        Formatted string like "1h 2m 3s" or "2d 5m"
    """
    seconds = int(value.total_seconds()) if isinstance(value, timedelta) else int(value)
    if seconds <= 0:
        return "0s"

    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0:
        parts.append(f"{secs}s")

    return " ".join(parts)


def parse_duration(text: str) -> timedelta:
    """Parse a human-readable duration such as "1h 30m", "90min" or "15m".

    Args:
        text: Duration string made of ``<number><unit>`` groups

    Returns:
        The parsed duration

    Raises:
        ValueError: If the string is empty, contains anything else or is
            too large for a timedelta.
    """
    text = text.strip()
    if not text:
        raise ValueError("Empty duration")

    result = ZERO
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ValueError(f"Invalid duration: '{text}'")
        number, unit = match.groups()
        factor = _UNITS.get(unit.lower())
        if factor is None:
            raise ValueError(f"Unknown duration unit '{unit}' in '{text}'")
        try:
            result += timedelta(seconds=float(number) * factor)
        except OverflowError as e:
            raise ValueError(f"Duration too large: '{text}'") from e
        pos = match.end()

    return result
