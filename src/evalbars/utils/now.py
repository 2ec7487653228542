import time
from datetime import UTC, datetime


class Now:
    @staticmethod
    def as_datetime() -> datetime:
        """Return the current UTC time, used to stamp link updates."""

        return datetime.now(UTC)

    @staticmethod
    def monotonic() -> float:
        """Return a monotonic clock reading for cooldowns and expiries."""

        return time.monotonic()
