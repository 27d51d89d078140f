"""
Reminder Scheduler - Periodically checks tasks for due reminders.

Architecture Decision: Observer Pattern (Qt Signals)
The scheduler only decides *when* a reminder fires and emits `reminder_due`.
Showing the notification (tray balloon) is the UI's job.
"""

import datetime
import logging
from typing import Callable, Dict, List, Optional, Tuple

from PySide6.QtCore import QObject, QTimer, Signal

from app.domain.models import Reminder, ReminderType, Task

logger = logging.getLogger(__name__)

CHECK_INTERVAL_SECONDS = 60
DUE_WINDOW = datetime.timedelta(minutes=1)
SHOWN_MEMORY = datetime.timedelta(minutes=2)


def calculate_reminder_datetime(
    reminder_type: ReminderType,
    absolute: Optional[datetime.datetime],
    relative_minutes: Optional[int],
    due_date: Optional[datetime.date],
    due_time: Optional[str] = None,
) -> Optional[datetime.datetime]:
    """
    Resolve when a reminder fires.

    Relative reminders count back from the task's due date and time;
    without a due time they count back from midnight of the due date.
    Returns None when the reminder cannot be resolved.
    """
    if reminder_type == ReminderType.ABSOLUTE:
        return absolute

    if relative_minutes is None or due_date is None:
        return None

    due_at = datetime.datetime.combine(due_date, datetime.time())
    if due_time:
        hours, minutes = due_time.split(":")
        due_at = due_at.replace(hour=int(hours), minute=int(minutes))
    return due_at - datetime.timedelta(minutes=relative_minutes)


def reminder_datetime(reminder: Reminder, task: Task) -> Optional[datetime.datetime]:
    return calculate_reminder_datetime(
        reminder.type, reminder.date_time, reminder.relative_minutes,
        task.due_date, task.due_time,
    )


def is_reminder_due(reminder: Reminder, task: Task,
                    now: Optional[datetime.datetime] = None) -> bool:
    """A reminder is due when its time falls within the last minute: (now - 1 min, now]"""
    now = now or datetime.datetime.now()
    fire_at = reminder_datetime(reminder, task)
    if fire_at is None:
        return False
    return now - DUE_WINDOW < fire_at <= now


class ReminderScheduler(QObject):
    """
    Checks the store's tasks every minute and emits `reminder_due`.

    A reminder that fired is remembered for two minutes so consecutive checks
    do not show it twice.
    """

    reminder_due = Signal(object, object)  # (Task, Reminder)

    def __init__(self, get_tasks: Callable[[], List[Task]],
                 interval_seconds: int = CHECK_INTERVAL_SECONDS):
        super().__init__()
        self.get_tasks = get_tasks
        self.interval_seconds = interval_seconds
        self._shown: Dict[str, datetime.datetime] = {}

        self.timer = QTimer()
        self.timer.timeout.connect(self._on_timeout)

    def _on_timeout(self):
        self.check_reminders(self.get_tasks())

    def _forget_old(self, now: datetime.datetime):
        for key, shown_at in list(self._shown.items()):
            if now - shown_at >= SHOWN_MEMORY:
                del self._shown[key]

    def check_reminders(self, tasks: List[Task],
                        now: Optional[datetime.datetime] = None) -> List[Tuple[Task, Reminder]]:
        """
        Emit `reminder_due` for every due reminder of an incomplete task.

        Returns:
            The (task, reminder) pairs that fired during this check.
        """
        now = now or datetime.datetime.now()
        self._forget_old(now)

        fired = []
        for task in tasks:
            if task.completed:
                continue
            for reminder in task.reminders:
                key = f"{task.id}-{reminder.id}"
                if reminder.is_triggered or key in self._shown:
                    continue
                if is_reminder_due(reminder, task, now):
                    self._shown[key] = now
                    fired.append((task, reminder))
                    logger.info(f"Reminder due for task '{task.title}'")
                    self.reminder_due.emit(task, reminder)
        return fired

    def start(self):
        """Check immediately, then every interval"""
        self.stop()
        self.check_reminders(self.get_tasks())
        self.timer.start(self.interval_seconds * 1000)
        logger.info(f"Reminder scheduler started ({self.interval_seconds}s interval)")

    def stop(self):
        if self.timer.isActive():
            self.timer.stop()
            logger.info("Reminder scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self.timer.isActive()
