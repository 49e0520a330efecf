"""Injectable source of "now" for timestamps and month defaults."""

from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from cashflow.config import settings


class Clock(Protocol):
    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock in the configured timezone."""

    def __init__(self, timezone: str | None = None):
        self.tz = ZoneInfo(timezone or settings.timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return SystemClock()
