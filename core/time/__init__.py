"""
Comptoir Core Time — Public API
=================================
Clocks and calendar periods.
Engines receive dates; only the service reads a Clock.
"""

from core.time.clock import Clock, FixedClock, SystemClock
from core.time.temporal import DatePeriod, as_day, month_to_date

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "DatePeriod",
    "as_day",
    "month_to_date",
]
