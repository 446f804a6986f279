"""
Date Range Filter

Decides whether a moment falls inside the CURRENT day, week or month,
relative to "now". Everything is evaluated in local wall-clock time.

Weeks start on Sunday at local midnight and end on the following
Saturday at 23:59:59.999, both inclusive. Bounds come from calendar
arithmetic, so a week that straddles a month or year boundary is
handled like any other.
"""

from datetime import datetime, timedelta
from typing import Optional

from spendlog.models.expense import TimeWindow


def to_local(moment: datetime) -> datetime:
    """Naive local wall-clock time for a moment. Naive input is already local."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def week_bounds(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Return (Sunday 00:00:00.000, Saturday 23:59:59.999) around now, local."""
    now = to_local(now or datetime.now())
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    # weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (today.weekday() + 1) % 7
    start = today - timedelta(days=days_since_sunday)
    end = start + timedelta(days=7) - timedelta(milliseconds=1)
    return start, end


def in_window(
    moment: datetime,
    window: "Optional[str | TimeWindow]",
    now: Optional[datetime] = None,
) -> bool:
    """True if moment belongs to the current window. ALL always matches."""
    window = TimeWindow.parse(window)
    if window is TimeWindow.ALL:
        return True

    moment = to_local(moment)
    now = to_local(now or datetime.now())

    if window is TimeWindow.DAY:
        return moment.date() == now.date()
    if window is TimeWindow.WEEK:
        start, end = week_bounds(now)
        return start <= moment <= end
    return (moment.year, moment.month) == (now.year, now.month)
