"""
Tests for natural language date parsing, recurrence rules and due date display.
"""

import datetime
import pytest

from app.domain.models import RecurrencePattern, RecurrenceType
from app.i18n import set_language
from app.services.natural_language import (
    ParsedDate, format_date_for_display, format_due_date, get_next_occurrence,
    is_overdue, parse_natural_date, parse_recurrence, parse_task_date_input,
)

TODAY = datetime.date(2025, 1, 15)  # Wednesday


def d(month: int, day: int, year: int = 2025) -> datetime.date:
    return datetime.date(year, month, day)


class TestParseNaturalDate:

    @pytest.mark.parametrize("text,expected", [
        ("today", d(1, 15)),
        ("TOD", d(1, 15)),
        ("tomorrow", d(1, 16)),
        ("tmr", d(1, 16)),
        ("tom", d(1, 16)),
        ("yesterday", d(1, 14)),
        ("2025-03-01", d(3, 1)),
        ("  in 3 days ", d(1, 18)),
        ("in 1 week", d(1, 22)),
        ("in 2 months", d(3, 15)),
        ("in 1 year", d(1, 15, 2026)),
        ("2 weeks from now", d(1, 29)),
    ])
    def test_simple_expressions(self, text, expected):
        assert parse_natural_date(text, TODAY) == expected

    @pytest.mark.parametrize("text,expected", [
        ("monday", d(1, 20)),
        ("fri", d(1, 17)),
        ("next monday", d(1, 20)),
        ("next wednesday", d(1, 22)),  # same weekday means a week ahead
        ("this monday", d(1, 13)),
        ("this friday", d(1, 17)),
        ("last monday", d(1, 13)),
        ("last wed", d(1, 8)),
    ])
    def test_weekdays(self, text, expected):
        assert parse_natural_date(text, TODAY) == expected

    def test_month_arithmetic_clamps_to_month_end(self):
        assert parse_natural_date("in 1 month", d(1, 31)) == d(2, 28)

    @pytest.mark.parametrize("text", ["", "someday", "2025-02-30", "next month", "in a week"])
    def test_unrecognized_input(self, text):
        assert parse_natural_date(text, TODAY) is None


class TestParseRecurrence:

    def test_daily(self):
        for text in ("every day", "daily"):
            pattern = parse_recurrence(text, TODAY)
            assert pattern.type == RecurrenceType.DAILY
            assert pattern.interval == 1
            assert pattern.natural_language == text

    def test_every_n_days(self):
        pattern = parse_recurrence("every 3 days", TODAY)
        assert (pattern.type, pattern.interval) == (RecurrenceType.DAILY, 3)

    def test_weekdays_and_weekends(self):
        assert parse_recurrence("every weekday", TODAY).days_of_week == [0, 1, 2, 3, 4]
        assert parse_recurrence("weekends", TODAY).days_of_week == [5, 6]

    def test_every_weekday_name(self):
        pattern = parse_recurrence("every friday", TODAY)
        assert pattern.type == RecurrenceType.WEEKLY
        assert pattern.days_of_week == [4]

    def test_every_n_weeks_uses_todays_weekday(self):
        pattern = parse_recurrence("every 2 weeks", TODAY)
        assert (pattern.interval, pattern.days_of_week) == (2, [2])

    def test_every_n_weeks_on_day(self):
        pattern = parse_recurrence("every 2 weeks on monday", TODAY)
        assert (pattern.type, pattern.interval, pattern.days_of_week) == (RecurrenceType.WEEKLY, 2, [0])

    def test_monthly_keeps_day_of_month(self):
        pattern = parse_recurrence("monthly", TODAY)
        assert (pattern.type, pattern.day_of_month) == (RecurrenceType.MONTHLY, 15)
        assert parse_recurrence("every 3 months", TODAY).interval == 3

    def test_first_weekday_of_month_is_custom(self):
        pattern = parse_recurrence("first monday of every month", TODAY)
        assert pattern.type == RecurrenceType.CUSTOM
        assert pattern.days_of_week == [0]

    def test_yearly(self):
        for text in ("every year", "yearly", "annually"):
            pattern = parse_recurrence(text, TODAY)
            assert (pattern.type, pattern.day_of_month, pattern.month_of_year) == (RecurrenceType.YEARLY, 15, 1)

    def test_not_a_recurrence(self):
        assert parse_recurrence("tomorrow", TODAY) is None


class TestParseTaskDateInput:

    def test_date_with_time(self):
        result = parse_task_date_input("tomorrow at 5pm", TODAY)
        assert result == {"due_date": ParsedDate(date=d(1, 16), has_time=True, time="17:00")}

    @pytest.mark.parametrize("text,expected_time", [
        ("today at 17:30", "17:30"),
        ("today at 5:30 pm", "17:30"),
        ("today at 12am", "00:00"),
        ("today at 12pm", "12:00"),
    ])
    def test_time_formats(self, text, expected_time):
        assert parse_task_date_input(text, TODAY)["due_date"].time == expected_time

    def test_date_without_time(self):
        parsed = parse_task_date_input("next fri", TODAY)["due_date"]
        assert parsed.date == d(1, 17)
        assert not parsed.has_time
        assert parsed.time is None

    def test_recurrence_wins(self):
        result = parse_task_date_input("every day at 9am", TODAY)
        assert result["recurrence"].type == RecurrenceType.DAILY
        assert result["due_time"] == "09:00"
        assert "due_date" not in result

    def test_recurrence_keeps_time(self):
        result = parse_task_date_input("every monday at 5pm", TODAY)
        assert result["recurrence"].days_of_week == [0]
        assert result["due_time"] == "17:00"

    def test_recurrence_without_time(self):
        assert "due_time" not in parse_task_date_input("every day", TODAY)

    def test_nothing_understood(self):
        assert parse_task_date_input("whenever", TODAY) == {}


class TestGetNextOccurrence:

    def test_daily_interval(self):
        pattern = RecurrencePattern(type=RecurrenceType.DAILY, interval=2)
        assert get_next_occurrence(pattern, TODAY) == d(1, 17)

    def test_weekly_picks_next_listed_day_this_week(self):
        pattern = RecurrencePattern(type=RecurrenceType.WEEKLY, days_of_week=[0, 2, 4])
        assert get_next_occurrence(pattern, TODAY) == d(1, 17)

    def test_weekly_wraps_to_following_week(self):
        pattern = RecurrencePattern(type=RecurrenceType.WEEKLY, days_of_week=[0, 2, 4])
        assert get_next_occurrence(pattern, d(1, 17)) == d(1, 20)

    def test_weekly_interval_skips_weeks(self):
        pattern = RecurrencePattern(type=RecurrenceType.WEEKLY, interval=2, days_of_week=[0])
        assert get_next_occurrence(pattern, d(1, 13)) == d(1, 27)

    def test_weekly_without_days(self):
        pattern = RecurrencePattern(type=RecurrenceType.WEEKLY)
        assert get_next_occurrence(pattern, TODAY) == d(1, 22)

    def test_monthly_clamps_and_recovers(self):
        pattern = RecurrencePattern(type=RecurrenceType.MONTHLY, day_of_month=31)
        assert get_next_occurrence(pattern, d(1, 31)) == d(2, 28)
        assert get_next_occurrence(pattern, d(2, 28)) == d(3, 31)

    def test_yearly_leap_day(self):
        pattern = RecurrencePattern(type=RecurrenceType.YEARLY, day_of_month=29, month_of_year=2)
        assert get_next_occurrence(pattern, d(2, 29, 2024)) == d(2, 28, 2025)

    def test_first_weekday_of_month(self):
        pattern = parse_recurrence("first monday of every month", TODAY)
        assert get_next_occurrence(pattern, TODAY) == d(2, 3)

    def test_last_weekday_of_month(self):
        pattern = parse_recurrence("last friday of month", TODAY)
        assert get_next_occurrence(pattern, TODAY) == d(1, 31)
        assert get_next_occurrence(pattern, d(1, 31)) == d(2, 28)

    def test_end_date_stops_recurrence(self):
        pattern = RecurrencePattern(type=RecurrenceType.DAILY, end_date=TODAY)
        assert get_next_occurrence(pattern, TODAY) is None

    def test_accepts_datetime(self):
        pattern = RecurrencePattern(type=RecurrenceType.DAILY)
        assert get_next_occurrence(pattern, datetime.datetime(2025, 1, 15, 18, 0)) == d(1, 16)


class TestFormatting:

    @pytest.mark.parametrize("offset,expected", [
        (0, "Today"),
        (1, "Tomorrow"),
        (-1, "Yesterday"),
        (3, "Saturday"),
        (10, "Jan 25"),
        (-5, "Jan 10"),
    ])
    def test_format_date_for_display(self, offset, expected):
        day = TODAY + datetime.timedelta(days=offset)
        assert format_date_for_display(day, TODAY) == expected

    def test_format_date_for_display_in_german(self):
        set_language("de")
        assert format_date_for_display(TODAY, TODAY) == "Heute"
        assert format_date_for_display(TODAY + datetime.timedelta(days=5), TODAY) == "Montag"

    @pytest.mark.parametrize("due,time,expected", [
        (d(1, 15), "17:30", "Today 5:30 PM"),
        (d(1, 16), None, "Tomorrow"),
        (d(1, 20), None, "Mon 20 Jan"),
        (d(1, 5, 2026), "00:15", "Mon 5 Jan 2026 12:15 AM"),
    ])
    def test_format_due_date(self, due, time, expected):
        assert format_due_date(due, time, TODAY) == expected

    def test_format_due_date_without_date(self):
        assert format_due_date(None) == ""


class TestIsOverdue:

    def test_no_time_means_end_of_day(self):
        assert not is_overdue(TODAY, None, datetime.datetime(2025, 1, 15, 23, 0))
        assert is_overdue(TODAY, None, datetime.datetime(2025, 1, 16, 0, 0, 1))

    def test_with_time(self):
        assert is_overdue(TODAY, "09:00", datetime.datetime(2025, 1, 15, 10, 0))
        assert not is_overdue(TODAY, "11:00", datetime.datetime(2025, 1, 15, 10, 0))

    def test_without_due_date(self):
        assert not is_overdue(None)
