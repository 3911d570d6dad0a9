from datetime import datetime, timezone

from benkyo.domain.models import ensure_aware
from benkyo.domain.ports import Clock


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    A clock that only moves when told to.

    Used by tests and by the CLI's --at option to replay reviews at a given time.
    """

    def __init__(self, at: datetime):
        self._at = ensure_aware(at, "at")

    def now(self) -> datetime:
        return self._at

    def set(self, at: datetime) -> None:
        self._at = ensure_aware(at, "at")
