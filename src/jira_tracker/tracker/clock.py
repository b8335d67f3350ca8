"""Time sources for the tracker store."""

import time
from datetime import datetime, timezone


class SystemClock:
    """Reads the real clocks.

    ``monotonic()`` is used for elapsed accounting (immune to wall-clock jumps),
    ``now()`` for timestamps that are shown or persisted.
    """

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        """Current local time with its UTC offset attached."""
        return datetime.now().astimezone()

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)
