"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
Pydantic provides runtime data validation, ensuring data integrity when loading
from the backend, the local storage cache or YAML config files. It also gives us
cheap immutable-style updates via model_copy(), which the store relies on.
"""

from datetime import datetime, date
from enum import Enum
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, ConfigDict


class Priority(str, Enum):
    P1 = "p1"  # Urgent (red)
    P2 = "p2"  # High (orange)
    P3 = "p3"  # Medium (blue)
    P4 = "p4"  # Low (default)


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    REVIEW = "review"
    DONE = "done"


class RecurrenceType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class ReminderType(str, Enum):
    ABSOLUTE = "absolute"
    RELATIVE = "relative"


class ViewType(str, Enum):
    INBOX = "inbox"
    TODAY = "today"
    UPCOMING = "upcoming"
    PROJECT = "project"
    LABEL = "label"
    FILTER = "filter"
    COMPLETED = "completed"
    SEARCH = "search"
    INSIGHTS = "insights"


class Section(BaseModel):
    """A named group of tasks inside a project."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    name: str = Field(..., min_length=1, max_length=120)
    order: int = 0
    created_at: datetime = Field(default_factory=datetime.now)


class Project(BaseModel):
    """
    Represents a project (a list of tasks).

    There is no "Inbox" project: tasks without a project_id live in the Inbox view.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = Field(..., min_length=1, max_length=120)
    color: str = "#999999"
    parent_id: Optional[str] = None
    view_style: str = Field(default="list", pattern="^(list|board|calendar)$")
    is_favorite: bool = False
    is_archived: bool = False
    order: int = 0
    created_at: datetime = Field(default_factory=datetime.now)

    sections: List[Section] = Field(default_factory=list)


class Label(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = Field(..., min_length=1, max_length=60)
    color: str = "#999999"
    is_favorite: bool = False
    created_at: datetime = Field(default_factory=datetime.now)


class Reminder(BaseModel):
    """
    A reminder attached to a task.

    Absolute reminders fire at date_time. Relative reminders fire
    relative_minutes before the task's due date (and time, when set).
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    type: ReminderType = ReminderType.ABSOLUTE
    date_time: Optional[datetime] = None
    relative_minutes: Optional[int] = Field(default=None, ge=0)
    is_triggered: bool = False
    created_at: datetime = Field(default_factory=datetime.now)


class RecurrencePattern(BaseModel):
    """
    Recurrence rule produced by the natural language parser.

    days_of_week uses Python's weekday numbering (0=Monday .. 6=Sunday).
    """
    type: RecurrenceType
    interval: int = Field(default=1, ge=1)
    days_of_week: Optional[List[int]] = None
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    month_of_year: Optional[int] = Field(default=None, ge=1, le=12)
    end_date: Optional[date] = None
    natural_language: str = ""


class Subtask(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str = Field(..., min_length=1)
    completed: bool = False
    order: int = 0


class Comment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    content: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=datetime.now)


class Task(BaseModel):
    """
    Represents a to-do item.

    Examples: "Pay rent", "Write quarterly report"
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None

    # Organization
    project_id: Optional[str] = None  # None = Inbox
    section_id: Optional[str] = None
    label_ids: List[str] = Field(default_factory=list)

    # Status & Priority
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.P4
    completed: bool = False
    completed_at: Optional[datetime] = None

    # Dates
    due_date: Optional[date] = None
    due_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    recurrence: Optional[RecurrencePattern] = None

    # Hierarchy
    parent_task_id: Optional[str] = None
    order: int = 0
    estimated_minutes: Optional[int] = Field(default=None, ge=0)

    # Relations (loaded separately from the backend)
    reminders: List[Reminder] = Field(default_factory=list)
    subtasks: List[Subtask] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)


class Filter(BaseModel):
    """A saved filter query, e.g. "priority:p1 & due:today"."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = Field(..., min_length=1, max_length=120)
    query: str = Field(..., min_length=1)
    color: str = "#999999"
    is_favorite: bool = False
    order: int = 0
    created_at: datetime = Field(default_factory=datetime.now)


class KarmaEvent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime
    points: int
    tasks_completed: int = 1
    reason: str = "completed_task"  # "completed_task", "daily_goal", "streak_bonus"


class KarmaProfile(BaseModel):
    """Gamified productivity score of the user."""
    model_config = ConfigDict(from_attributes=True)

    total_points: int = 0
    level: int = 1
    current_streak: int = 0
    longest_streak: int = 0
    daily_goal: int = Field(default=5, ge=1)
    weekly_goal: int = Field(default=30, ge=1)
    last_completion_date: Optional[datetime] = None
    points_history: List[KarmaEvent] = Field(default_factory=list)


class ProductivityStats(BaseModel):
    tasks_completed_today: int = 0
    tasks_completed_this_week: int = 0
    tasks_completed_this_month: int = 0
    completions_by_project: Dict[str, int] = Field(default_factory=dict)
    completions_by_label: Dict[str, int] = Field(default_factory=dict)
    completion_heatmap: Dict[str, int] = Field(default_factory=dict)  # ISO date -> count
    most_productive_day: Optional[str] = None
    most_productive_time: Optional[str] = None
    average_completion_time: float = 0.0  # in minutes


class ViewState(BaseModel):
    type: ViewType = ViewType.TODAY
    project_id: Optional[str] = None
    label_id: Optional[str] = None
    filter_id: Optional[str] = None
    search_query: Optional[str] = None


class UserPreferences(BaseModel):
    """
    User configuration and preferences.

    This allows users to customize behavior without touching code.
    """
    model_config = ConfigDict(from_attributes=True)

    # UI settings
    theme: str = Field(default="auto", description="Theme: 'light', 'dark', or 'auto' (follows system)")
    language: str = Field(default="auto", description="UI language: 'en', 'de', or 'auto' (detect from system)")
    minimize_to_tray: bool = True

    # Reminders
    notifications_enabled: bool = Field(default=True, description="Show desktop notifications for reminders")
    reminder_check_interval_seconds: int = Field(default=60, ge=5, description="How often reminders are checked")
    default_reminder_preset: str = Field(default="none", description="Preset applied to new tasks with a due time")

    # Calendar
    holiday_country: Optional[str] = Field(default=None, description="ISO country code for holidays in the calendar, e.g. 'DE'")
    holiday_subdivision: Optional[str] = Field(default=None, description="Optional subdivision, e.g. 'BY'")

    # Sync
    offline_mode: bool = Field(default=False, description="Mirror synced data to local storage")
    resync_on_failure: bool = Field(default=True, description="Reload all data after a failed write")
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    retry_max_delay_seconds: float = Field(default=30.0, ge=0)


# ============================================================================
# CONSTANTS
# ============================================================================

PRIORITY_LABELS: Dict[Priority, str] = {
    Priority.P1: "Priority 1",
    Priority.P2: "Priority 2",
    Priority.P3: "Priority 3",
    Priority.P4: "Priority 4",
}

PRIORITY_COLORS: Dict[Priority, str] = {
    Priority.P1: "#CC0000",
    Priority.P2: "#FF9800",
    Priority.P3: "#4A90E2",
    Priority.P4: "#999999",
}

KARMA_POINTS: Dict[Priority, int] = {
    Priority.P1: 10,
    Priority.P2: 6,
    Priority.P3: 4,
    Priority.P4: 2,
}

KARMA_LEVELS = [
    {"level": 1, "points_required": 0, "title": "Beginner"},
    {"level": 2, "points_required": 50, "title": "Novice"},
    {"level": 3, "points_required": 150, "title": "Intermediate"},
    {"level": 4, "points_required": 300, "title": "Advanced"},
    {"level": 5, "points_required": 500, "title": "Expert"},
    {"level": 6, "points_required": 800, "title": "Master"},
    {"level": 7, "points_required": 1200, "title": "Grand Master"},
    {"level": 8, "points_required": 1800, "title": "Legend"},
    {"level": 9, "points_required": 2600, "title": "Enlightened"},
    {"level": 10, "points_required": 3600, "title": "Productivity God"},
]

DEFAULT_COLORS = [
    "#CC0000",  # red
    "#FF9800",  # orange
    "#FFC107",  # amber
    "#4CAF50",  # green
    "#00BCD4",  # cyan
    "#2196F3",  # blue
    "#673AB7",  # deep purple
    "#9C27B0",  # purple
    "#E91E63",  # pink
    "#795548",  # brown
    "#607D8B",  # blue gray
    "#999999",  # gray
]

# Reminder presets -> minutes before the due time
REMINDER_PRESETS: Dict[str, Optional[int]] = {
    "none": None,
    "5min": 5,
    "15min": 15,
    "30min": 30,
    "1hour": 60,
    "1day": 24 * 60,
}
