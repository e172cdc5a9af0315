"""
Comptoir Core Time — Temporal Helpers
=======================================
Pure functions for calendar periods.
Every function takes its dates as arguments; none reads a clock.

Ledger dates are calendar days: a period [start, end] includes the
whole of its end day.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Union


# ══════════════════════════════════════════════════════════════
# DATE PERIOD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DatePeriod:
    """
    A closed calendar interval [start, end].
    start <= end, checked at construction.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if isinstance(self.start, datetime) or isinstance(self.end, datetime):
            raise TypeError("DatePeriod bounds must be dates, not datetimes.")
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise TypeError("DatePeriod bounds must be dates.")
        if self.start > self.end:
            raise ValueError(
                f"DatePeriod start ({self.start}) must be <= end ({self.end})."
            )

    def contains(self, day: Union[date, datetime]) -> bool:
        """Check if a day (or any moment of it) falls within the period."""
        return self.start <= as_day(day) <= self.end

    def is_before(self, day: Union[date, datetime]) -> bool:
        """True when the day is strictly before the period starts."""
        return as_day(day) < self.start

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


# ══════════════════════════════════════════════════════════════
# PURE TEMPORAL FUNCTIONS
# ══════════════════════════════════════════════════════════════

def as_day(value: Union[date, datetime]) -> date:
    """Calendar day of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def month_to_date(today: date) -> DatePeriod:
    """From the first day of today's month through today."""
    return DatePeriod(start=today.replace(day=1), end=today)
