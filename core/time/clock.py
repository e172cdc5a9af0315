"""
Comptoir Core Time — Clocks
=============================
Engines never read the system time. They take dates as arguments;
CommerceService asks its Clock once per command and stamps the event.

    service = CommerceService(clock=FixedClock(datetime(2026, 2, 19, tzinfo=timezone.utc)))
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now_utc(self) -> datetime:
        ...  # pragma: no cover

    def today(self) -> date:
        ...  # pragma: no cover


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now_utc().date()


class FixedClock:
    """Pinned time for tests and replays. Only moves on advance()."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock needs a timezone-aware datetime.")
        self._instant = instant

    def now_utc(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return self._instant.date()

    def advance(self, **delta: float) -> None:
        """clock.advance(days=1, hours=2)"""
        self._instant += timedelta(**delta)
