"""Services layer - Business logic"""

from .calendar_service import CalendarService
from .reminder_scheduler import ReminderScheduler
from .report_service import ReportService
from .sync_service import SyncService
from .task_store import TaskStore

__all__ = ["CalendarService", "ReminderScheduler", "ReportService", "SyncService", "TaskStore"]
