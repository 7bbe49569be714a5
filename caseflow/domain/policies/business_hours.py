"""BusinessHoursPolicy — acceptance deadline counted on weekdays only."""

from __future__ import annotations

from datetime import datetime, timedelta

ACCEPTANCE_WINDOW_HOURS = 24

# datetime.weekday(): Monday=0 ... Saturday=5, Sunday=6
_WEEKEND = frozenset({5, 6})

_ONE_HOUR = timedelta(hours=1)


def is_business_day(moment: datetime) -> bool:
    return moment.weekday() not in _WEEKEND


def compute_deadline(start: datetime, hours: int = ACCEPTANCE_WINDOW_HOURS) -> datetime:
    """Pure function: return *start* advanced by *hours* business hours.

    Walks forward one hour at a time. A step counts only if the instant it
    lands on falls Monday–Friday (weekday taken in the timestamp's own
    timezone). No holiday calendar.

    Examples (hours=24):
      Friday 17:00    → Monday 17:00
      Monday 10:00    → Tuesday 10:00
      Wednesday 09:00 → Thursday 09:00

    Raises:
        ValueError: if *hours* is negative.
    """
    if hours < 0:
        raise ValueError(f"hours must be non-negative, got {hours}")

    deadline = start
    remaining = hours
    while remaining > 0:
        deadline += _ONE_HOUR
        if is_business_day(deadline):
            remaining -= 1
    return deadline
