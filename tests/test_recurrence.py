"""Tests for next-occurrence calculation and relative date formatting."""

from datetime import datetime, timedelta

import pytest

from domains.reminders.models import Recurrence
from domains.reminders.recurrence import format_relative, next_occurrence

STEPS = {
    Recurrence.DAILY: timedelta(days=1),
    Recurrence.WEEKLY: timedelta(weeks=1),
}


class TestOneShot:
    """One-shot reminders always return their anchor."""

    @pytest.mark.parametrize("now", [
        datetime(2023, 12, 31, 23, 59),
        datetime(2024, 1, 1, 9, 0),
        datetime(2024, 6, 1, 12, 0),
    ])
    def test_anchor_returned_regardless_of_now(self, make_reminder, now):
        r = make_reminder(on_date="2024-01-01", at_time="09:00")
        assert next_occurrence(r, now) == datetime(2024, 1, 1, 9, 0)


class TestRecurring:
    """Recurring reminders advance past now by whole steps."""

    def test_future_anchor_unchanged(self, make_reminder):
        r = make_reminder(on_date="2024-05-01", recurrence=Recurrence.DAILY)
        assert next_occurrence(r, datetime(2024, 3, 15)) == datetime(2024, 5, 1, 9, 0)

    def test_anchor_equal_to_now_unchanged(self, make_reminder):
        r = make_reminder(on_date="2024-03-15", recurrence=Recurrence.WEEKLY)
        now = datetime(2024, 3, 15, 9, 0)
        assert next_occurrence(r, now) == now

    @pytest.mark.parametrize("recurrence", [Recurrence.DAILY, Recurrence.WEEKLY])
    @pytest.mark.parametrize("now", [
        datetime(2024, 1, 1, 9, 1),
        datetime(2024, 1, 8, 9, 0),
        datetime(2024, 3, 15, 0, 0),
        datetime(2025, 7, 4, 18, 30),
    ])
    def test_tightest_step_at_or_after_now(self, make_reminder, recurrence, now):
        r = make_reminder(on_date="2024-01-01", at_time="09:00", recurrence=recurrence)
        result = next_occurrence(r, now)
        assert result >= now
        assert result - STEPS[recurrence] < now
        assert (result - r.anchor) % STEPS[recurrence] == timedelta(0)

    def test_daily_lands_on_same_time_of_day(self, make_reminder, now):
        r = make_reminder(on_date="2024-01-01", at_time="09:00", recurrence=Recurrence.DAILY)
        assert next_occurrence(r, now) == datetime(2024, 3, 15, 9, 0)

    def test_weekly_keeps_weekday(self, make_reminder, now):
        # 2024-01-01 is a Monday
        r = make_reminder(on_date="2024-01-01", at_time="09:00", recurrence=Recurrence.WEEKLY)
        result = next_occurrence(r, now)
        assert result == datetime(2024, 3, 18, 9, 0)
        assert result.weekday() == 0

    def test_pay_rent_monthly_scenario(self, make_reminder):
        r = make_reminder(title="Pay rent", on_date="2024-01-01", at_time="09:00",
                          recurrence=Recurrence.MONTHLY)
        assert next_occurrence(r, datetime(2024, 3, 15, 0, 0)) == datetime(2024, 4, 1, 9, 0)

    def test_monthly_same_day_later_time(self, make_reminder):
        r = make_reminder(on_date="2024-01-15", at_time="09:00", recurrence=Recurrence.MONTHLY)
        assert next_occurrence(r, datetime(2024, 3, 15, 8, 0)) == datetime(2024, 3, 15, 9, 0)
        assert next_occurrence(r, datetime(2024, 3, 15, 10, 0)) == datetime(2024, 4, 15, 9, 0)

    def test_monthly_end_of_month_clamps_without_drift(self, make_reminder):
        r = make_reminder(on_date="2024-01-31", at_time="09:00", recurrence=Recurrence.MONTHLY)
        assert next_occurrence(r, datetime(2024, 2, 10)) == datetime(2024, 2, 29, 9, 0)
        assert next_occurrence(r, datetime(2024, 3, 1)) == datetime(2024, 3, 31, 9, 0)
        assert next_occurrence(r, datetime(2024, 4, 1)) == datetime(2024, 4, 30, 9, 0)

    def test_monthly_across_year_boundary(self, make_reminder):
        r = make_reminder(on_date="2023-11-05", at_time="07:30", recurrence=Recurrence.MONTHLY)
        assert next_occurrence(r, datetime(2024, 1, 6)) == datetime(2024, 2, 5, 7, 30)

    def test_is_pure(self, make_reminder, now):
        r = make_reminder(recurrence=Recurrence.MONTHLY)
        assert next_occurrence(r, now) == next_occurrence(r, now)
        assert r.date.isoformat() == "2024-01-01"


class TestFormatRelative:
    """Relative date strings for chat listings."""

    NOW = datetime(2024, 3, 15, 10, 0)  # Friday

    @pytest.mark.parametrize("when, expected", [
        (datetime(2024, 3, 15, 9, 0), "today at 9:00 AM"),
        (datetime(2024, 3, 16, 14, 30), "tomorrow at 2:30 PM"),
        (datetime(2024, 3, 14, 0, 5), "yesterday at 12:05 AM"),
        (datetime(2024, 3, 19, 12, 0), "Tuesday at 12:00 PM"),
        (datetime(2024, 3, 11, 8, 0), "last Monday at 8:00 AM"),
        (datetime(2024, 4, 1, 9, 0), "04/01/2024 at 9:00 AM"),
        (datetime(2024, 3, 1, 9, 0), "03/01/2024 at 9:00 AM"),
    ])
    def test_formats(self, when, expected):
        assert format_relative(when, self.NOW) == expected
