"""Tests for the date range filter."""

from datetime import datetime, timedelta, timezone

import pytest

from spendlog.models.expense import TimeWindow
from spendlog.queries.windows import in_window, to_local, week_bounds


# Saturday 31 August 2024, midday
SATURDAY = datetime(2024, 8, 31, 12, 0, 0)


class TestWeekBounds:
    """Tests for Sunday-to-Saturday week bounds."""

    def test_saturday_belongs_to_week_starting_previous_sunday(self):
        """Test that Saturday closes the week begun on Sunday."""
        start, end = week_bounds(SATURDAY)
        assert start == datetime(2024, 8, 25, 0, 0, 0)
        assert end == datetime(2024, 8, 31, 23, 59, 59, 999000)

    def test_sunday_starts_its_own_week(self):
        """Test that Sunday midnight opens a new week."""
        start, end = week_bounds(datetime(2024, 9, 1, 0, 0, 0))
        assert start == datetime(2024, 9, 1)
        assert end == datetime(2024, 9, 7, 23, 59, 59, 999000)

    def test_week_spanning_year_boundary(self):
        """Test week bounds across New Year."""
        start, end = week_bounds(datetime(2025, 1, 2, 9, 30))
        assert start == datetime(2024, 12, 29)
        assert end == datetime(2025, 1, 4, 23, 59, 59, 999000)


class TestInWindow:
    """Tests for the window predicate."""

    def test_all_always_matches(self):
        """Test that the all window matches anything."""
        assert in_window(datetime(1999, 1, 1), TimeWindow.ALL, now=SATURDAY)
        assert in_window(datetime(1999, 1, 1), None, now=SATURDAY)

    def test_day(self):
        """Test the calendar-day window."""
        assert in_window(datetime(2024, 8, 31, 0, 0), "day", now=SATURDAY)
        assert in_window(datetime(2024, 8, 31, 23, 59, 59), "day", now=SATURDAY)
        assert not in_window(datetime(2024, 8, 30, 23, 59, 59), "day", now=SATURDAY)
        assert not in_window(datetime(2024, 9, 1, 0, 0), "day", now=SATURDAY)

    def test_week_edges(self):
        """Test the first and last instants of the week."""
        last_moment = datetime(2024, 8, 31, 23, 59, 59, 999000)
        next_sunday = datetime(2024, 9, 1, 0, 0, 0)
        this_sunday = datetime(2024, 8, 25, 0, 0, 0)

        assert in_window(last_moment, "week", now=SATURDAY)
        assert in_window(this_sunday, "week", now=SATURDAY)
        assert not in_window(next_sunday, "week", now=SATURDAY)
        assert not in_window(this_sunday - timedelta(milliseconds=1), "week", now=SATURDAY)

    def test_week_crosses_month_boundary(self):
        """Test a week spanning two months."""
        now = datetime(2024, 9, 3, 8, 0)  # Tuesday
        assert in_window(datetime(2024, 9, 1, 0, 0), "week", now=now)
        assert not in_window(datetime(2024, 8, 31, 23, 59, 59, 999000), "week", now=now)

    def test_week_crosses_year_boundary(self):
        """Test a week spanning two years."""
        now = datetime(2025, 1, 2, 9, 30)
        assert in_window(datetime(2024, 12, 29, 0, 0), "week", now=now)
        assert in_window(datetime(2025, 1, 4, 23, 59, 59, 999000), "week", now=now)
        assert not in_window(datetime(2024, 12, 28, 23, 59, 59, 999000), "week", now=now)

    def test_month(self):
        """Test the calendar-month window."""
        assert in_window(datetime(2024, 8, 1, 0, 0), "month", now=SATURDAY)
        assert not in_window(datetime(2024, 9, 1, 0, 0), "month", now=SATURDAY)
        assert not in_window(datetime(2023, 8, 15), "month", now=SATURDAY)

    def test_aware_moments_are_compared_in_local_time(self):
        """Test that UTC-aware moments are judged in local time."""
        local_moment = datetime(2024, 8, 31, 23, 30)
        aware_utc = local_moment.astimezone(timezone.utc)
        assert to_local(aware_utc) == local_moment
        assert in_window(aware_utc, "day", now=SATURDAY)

    def test_unknown_window_raises(self):
        """Test that unknown window names raise ValueError."""
        with pytest.raises(ValueError):
            in_window(SATURDAY, "fortnight", now=SATURDAY)
