"""Domain layer - Pure business entities and logic"""

from .models import (
    Task, Project, Section, Label, Filter, Reminder, Subtask, Comment,
    KarmaProfile, KarmaEvent, ProductivityStats, RecurrencePattern,
    ViewState, UserPreferences, Priority, TaskStatus, RecurrenceType,
    ReminderType, ViewType,
)
from .errors import BackendError, AuthError, NotFoundError

__all__ = [
    "Task", "Project", "Section", "Label", "Filter", "Reminder", "Subtask",
    "Comment", "KarmaProfile", "KarmaEvent", "ProductivityStats",
    "RecurrencePattern", "ViewState", "UserPreferences", "Priority",
    "TaskStatus", "RecurrenceType", "ReminderType", "ViewType",
    "BackendError", "AuthError", "NotFoundError",
]
