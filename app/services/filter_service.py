"""
Filter Service - Query-by-string filtering and the built-in task views.

A saved filter stores a query such as "project:abc & priority:p1 & due:today".
The query is a conjunction of key:value clauses; unknown keys and malformed
clauses are ignored rather than rejected, so a filter written by an older
version of the app still shows something.

Architecture Decision: Why pure functions over a task list?
The store owns the task list; views are derived data. Keeping the view logic
free of state makes it trivially testable with a fixed `today`.
"""

import datetime
import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel

from app.domain.models import Filter, Priority, Task, ViewState, ViewType

logger = logging.getLogger(__name__)

FILTER_KEYS = ("project", "label", "priority", "due")
DUE_VALUES = ("today", "overdue", "this_week", "no_date")
PRIORITY_VALUES = tuple(p.value for p in Priority)

UPCOMING_DAYS = 7


class FilterClause(BaseModel):
    key: str
    value: str


def parse_filter_query(query: str) -> List[FilterClause]:
    """
    Split a filter query into clauses.

    Clauses without a colon, with an unknown key or with an empty value are
    dropped. `due:` only accepts today, overdue, this_week and no_date.
    """
    clauses = []
    for part in query.split("&"):
        part = part.strip()
        if ":" not in part:
            if part:
                logger.debug(f"Ignoring filter clause without ':': '{part}'")
            continue

        key, value = part.split(":", 1)
        key = key.strip().lower()
        value = value.strip()

        if key not in FILTER_KEYS or not value:
            logger.debug(f"Ignoring filter clause '{part}'")
            continue
        if key == "due":
            value = value.lower()
            if value not in DUE_VALUES:
                logger.debug(f"Ignoring unknown due value '{value}'")
                continue
        if key == "priority":
            value = value.lower()

        clauses.append(FilterClause(key=key, value=value))
    return clauses


def build_filter_query(project: Optional[str] = None, label: Optional[str] = None,
                       priority: Optional[str] = None, due: Optional[str] = None) -> str:
    """Build a query string from the filter editor fields, e.g. "label:x & due:today"."""
    parts = []
    if project:
        parts.append(f"project:{project}")
    if label:
        parts.append(f"label:{label}")
    if priority:
        parts.append(f"priority:{priority}")
    if due:
        parts.append(f"due:{due}")
    return " & ".join(parts)


def sort_by_priority(tasks: Iterable[Task]) -> List[Task]:
    """Stable sort, p1 first"""
    return sorted(tasks, key=lambda t: t.priority.value)


def _matches(task: Task, clause: FilterClause, today: datetime.date) -> bool:
    if clause.key == "project":
        return task.project_id == clause.value
    if clause.key == "label":
        return clause.value in task.label_ids
    if clause.key == "priority":
        return task.priority.value == clause.value

    # due
    if clause.value == "no_date":
        return task.due_date is None
    if task.due_date is None:
        return False
    if clause.value == "today":
        return task.due_date == today
    if clause.value == "overdue":
        return task.due_date < today
    return today <= task.due_date <= today + datetime.timedelta(days=UPCOMING_DAYS)


def apply_filter(tasks: Iterable[Task], query: str,
                 today: Optional[datetime.date] = None) -> List[Task]:
    """
    Return the incomplete tasks matching every clause of the query,
    sorted by priority.
    """
    today = today or datetime.date.today()
    clauses = parse_filter_query(query)
    matched = [
        t for t in tasks
        if not t.completed and all(_matches(t, c, today) for c in clauses)
    ]
    return sort_by_priority(matched)


# ============================================================================
# BUILT-IN VIEWS
# ============================================================================

def inbox_tasks(tasks: Iterable[Task]) -> List[Task]:
    return [t for t in tasks if not t.completed and t.project_id is None]


def today_tasks(tasks: Iterable[Task], today: Optional[datetime.date] = None) -> List[Task]:
    """Incomplete tasks due today. Overdue tasks are not included."""
    today = today or datetime.date.today()
    return sort_by_priority(t for t in tasks if not t.completed and t.due_date == today)


def upcoming_tasks(tasks: Iterable[Task], today: Optional[datetime.date] = None) -> List[Task]:
    """Incomplete tasks due within the next week (excluding today), by date then priority."""
    today = today or datetime.date.today()
    horizon = today + datetime.timedelta(days=UPCOMING_DAYS)
    upcoming = [
        t for t in tasks
        if not t.completed and t.due_date and today < t.due_date <= horizon
    ]
    return sorted(upcoming, key=lambda t: (t.due_date, t.priority.value))


def overdue_tasks(tasks: Iterable[Task], today: Optional[datetime.date] = None) -> List[Task]:
    today = today or datetime.date.today()
    return sort_by_priority(
        t for t in tasks if not t.completed and t.due_date and t.due_date < today
    )


_ANY_SECTION = object()


def tasks_by_project(tasks: Iterable[Task], project_id: str, section_id=_ANY_SECTION) -> List[Task]:
    """
    Incomplete tasks of a project. Passing section_id (None included)
    restricts the result to that section; None means the project root.
    """
    return sort_by_priority(
        t for t in tasks
        if not t.completed
        and t.project_id == project_id
        and (section_id is _ANY_SECTION or t.section_id == section_id)
    )


def tasks_by_label(tasks: Iterable[Task], label_id: str) -> List[Task]:
    return sort_by_priority(t for t in tasks if not t.completed and label_id in t.label_ids)


def completed_tasks(tasks: Iterable[Task]) -> List[Task]:
    return [t for t in tasks if t.completed]


def search_tasks(tasks: Iterable[Task], query: str) -> List[Task]:
    """Case-insensitive substring match on title or description, completed tasks included."""
    needle = query.lower()
    return [
        t for t in tasks
        if needle in t.title.lower() or (t.description and needle in t.description.lower())
    ]


def tasks_for_view(view_state: ViewState, tasks: List[Task], filters: List[Filter],
                   today: Optional[datetime.date] = None) -> List[Task]:
    """Dispatch a ViewState to the matching view query"""
    view = view_state.type

    if view == ViewType.INBOX:
        return inbox_tasks(tasks)
    if view == ViewType.TODAY:
        return today_tasks(tasks, today)
    if view == ViewType.UPCOMING:
        return upcoming_tasks(tasks, today)
    if view == ViewType.PROJECT:
        return tasks_by_project(tasks, view_state.project_id) if view_state.project_id else []
    if view == ViewType.LABEL:
        return tasks_by_label(tasks, view_state.label_id) if view_state.label_id else []
    if view == ViewType.FILTER:
        saved = next((f for f in filters if f.id == view_state.filter_id), None)
        return apply_filter(tasks, saved.query, today) if saved else []
    if view == ViewType.COMPLETED:
        return completed_tasks(tasks)
    if view == ViewType.SEARCH:
        return search_tasks(tasks, view_state.search_query) if view_state.search_query else []
    # Insights shows statistics, not a task list
    return []
