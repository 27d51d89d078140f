"""
Tests for reminder time calculation and the reminder scheduler.
"""

import datetime
import pytest

from app.domain.models import Reminder, ReminderType, Task
from app.services.reminder_scheduler import (
    ReminderScheduler, calculate_reminder_datetime, is_reminder_due,
)

NOW = datetime.datetime(2025, 1, 15, 16, 30)


def absolute(reminder_id: str, at: datetime.datetime, **kwargs) -> Reminder:
    return Reminder(id=reminder_id, task_id="t1", type=ReminderType.ABSOLUTE, date_time=at, **kwargs)


def relative(reminder_id: str, minutes: int) -> Reminder:
    return Reminder(id=reminder_id, task_id="t1", type=ReminderType.RELATIVE, relative_minutes=minutes)


def make_task(reminders, **kwargs) -> Task:
    return Task(id=kwargs.pop("id", "t1"), title="Call the dentist", reminders=reminders, **kwargs)


class TestCalculateReminderDatetime:

    def test_absolute(self):
        assert calculate_reminder_datetime(ReminderType.ABSOLUTE, NOW, None, None) == NOW

    def test_relative_with_due_time(self):
        result = calculate_reminder_datetime(ReminderType.RELATIVE, None, 30, NOW.date(), "17:00")
        assert result == NOW

    def test_relative_without_due_time_counts_from_midnight(self):
        result = calculate_reminder_datetime(ReminderType.RELATIVE, None, 60, NOW.date())
        assert result == datetime.datetime(2025, 1, 14, 23, 0)

    @pytest.mark.parametrize("args", [
        (ReminderType.ABSOLUTE, None, None, None),
        (ReminderType.RELATIVE, None, None, datetime.date(2025, 1, 15)),
        (ReminderType.RELATIVE, None, 15, None),
    ])
    def test_unresolvable(self, args):
        assert calculate_reminder_datetime(*args) is None


class TestIsReminderDue:

    def test_due_within_last_minute(self):
        task = make_task([])
        assert is_reminder_due(absolute("r", NOW), task, NOW)
        assert is_reminder_due(absolute("r", NOW - datetime.timedelta(seconds=59)), task, NOW)

    def test_not_due_outside_window(self):
        task = make_task([])
        assert not is_reminder_due(absolute("r", NOW - datetime.timedelta(minutes=1)), task, NOW)
        assert not is_reminder_due(absolute("r", NOW + datetime.timedelta(seconds=1)), task, NOW)

    def test_relative_uses_task_due(self):
        task = make_task([], due_date=NOW.date(), due_time="16:45")
        assert is_reminder_due(relative("r", 15), task, NOW)


class TestReminderScheduler:

    @pytest.fixture
    def fired(self):
        return []

    @pytest.fixture
    def scheduler(self, fired, qapp):
        scheduler = ReminderScheduler(lambda: [])
        scheduler.reminder_due.connect(lambda task, reminder: fired.append((task.id, reminder.id)))
        return scheduler

    def test_emits_for_due_reminders(self, scheduler, fired):
        tasks = [make_task([absolute("r1", NOW), absolute("r2", NOW + datetime.timedelta(hours=1))])]
        result = scheduler.check_reminders(tasks, NOW)
        assert fired == [("t1", "r1")]
        assert [(t.id, r.id) for t, r in result] == [("t1", "r1")]

    def test_skips_completed_tasks_and_triggered_reminders(self, scheduler, fired):
        tasks = [
            make_task([absolute("r1", NOW)], completed=True),
            make_task([absolute("r2", NOW, is_triggered=True)], id="t2"),
        ]
        scheduler.check_reminders(tasks, NOW)
        assert fired == []

    def test_shown_reminder_is_not_repeated_within_two_minutes(self, scheduler, fired):
        tasks = [make_task([absolute("r1", NOW)])]
        scheduler.check_reminders(tasks, NOW)
        scheduler.check_reminders(tasks, NOW + datetime.timedelta(seconds=30))
        assert fired == [("t1", "r1")]

    def test_shown_memory_expires(self, scheduler, fired):
        reminder = absolute("r1", NOW)
        scheduler.check_reminders([make_task([reminder])], NOW)
        later = NOW + datetime.timedelta(minutes=2)
        scheduler.check_reminders([make_task([absolute("r1", later)])], later)
        assert fired == [("t1", "r1"), ("t1", "r1")]

    def test_start_checks_immediately_and_stop_halts(self, qapp):
        tasks = [make_task([absolute("r1", datetime.datetime.now())])]
        scheduler = ReminderScheduler(lambda: tasks, interval_seconds=60)
        fired = []
        scheduler.reminder_due.connect(lambda task, reminder: fired.append(reminder.id))

        scheduler.start()
        assert scheduler.is_running
        assert fired == ["r1"]

        scheduler.stop()
        assert not scheduler.is_running
