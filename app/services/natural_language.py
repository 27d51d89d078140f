"""
Natural language date and recurrence parsing.

Turns user input such as "tomorrow", "next fri", "in 3 weeks",
"every 2 weeks on monday" or "last friday of every month" into dates and
RecurrencePattern objects, and computes the next occurrence of a pattern.

All functions take an explicit `today`/`from_date` so results are
reproducible; they default to the current local date.
"""

import calendar
import datetime
import re
from typing import Optional, Dict

from dateutil.relativedelta import relativedelta
from PySide6.QtCore import QLocale
from pydantic import BaseModel

from app.domain.models import RecurrencePattern, RecurrenceType
from app.i18n import tr


# Python weekday numbering: Monday=0 .. Sunday=6
WEEKDAYS: Dict[str, int] = {
    "mon": 0, "monday": 0,
    "tue": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}

_DAY = r"(mon|monday|tue|tuesday|wed|wednesday|thu|thursday|fri|friday|sat|saturday|sun|sunday)"
_UNIT = r"(day|days|week|weeks|month|months|year|years)"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_WEEKDAY_RE = re.compile(rf"^(next|this|last)?\s*{_DAY}$")
_IN_RE = re.compile(rf"^in\s+(\d+)\s+{_UNIT}$")
_FROM_NOW_RE = re.compile(rf"^(\d+)\s+{_UNIT}\s+from\s+now$")

_EVERY_N_DAYS_RE = re.compile(r"^every\s+(\d+)\s+days?$")
_EVERY_DAY_OF_WEEK_RE = re.compile(rf"^every\s+{_DAY}$")
_EVERY_N_WEEKS_RE = re.compile(r"^every\s+(\d+)\s+weeks?$")
_EVERY_N_WEEKS_ON_RE = re.compile(rf"^every\s+(\d+)\s+weeks?\s+on\s+{_DAY}$")
_EVERY_N_MONTHS_RE = re.compile(r"^every\s+(\d+)\s+months?$")
_MONTHLY_DAY_RE = re.compile(rf"^(first|last)\s+{_DAY}\s+of\s+(every\s+)?month$")

_TIME_SUFFIX_RE = re.compile(r"^(.*?)\s+at\s+(\d{1,2})(?::(\d{2}))?\s*(am|pm)?$")


class ParsedDate(BaseModel):
    """Result of parsing free-form due date input"""
    date: datetime.date
    has_time: bool = False
    time: Optional[str] = None  # HH:MM, 24h


# ============================================================================
# DATE PARSING
# ============================================================================

def _add(base: datetime.date, amount: int, unit: str) -> datetime.date:
    if unit.startswith("day"):
        return base + datetime.timedelta(days=amount)
    if unit.startswith("week"):
        return base + datetime.timedelta(weeks=amount)
    if unit.startswith("month"):
        return base + relativedelta(months=amount)
    return base + relativedelta(years=amount)


def parse_natural_date(text: str, today: Optional[datetime.date] = None) -> Optional[datetime.date]:
    """
    Parse natural language date input.

    Examples: "today", "tomorrow", "next monday", "in 3 days", "2024-01-15"

    Returns:
        The parsed date, or None if the input is not understood.
    """
    cleaned = text.lower().strip()
    today = today or datetime.date.today()

    if _ISO_DATE_RE.match(cleaned):
        try:
            return datetime.date.fromisoformat(cleaned)
        except ValueError:
            return None

    if cleaned in ("today", "tod"):
        return today
    if cleaned in ("tomorrow", "tmr", "tom"):
        return today + datetime.timedelta(days=1)
    if cleaned == "yesterday":
        return today - datetime.timedelta(days=1)

    match = _WEEKDAY_RE.match(cleaned)
    if match:
        modifier, day = match.groups()
        return _resolve_weekday(WEEKDAYS[day], modifier or "next", today)

    match = _IN_RE.match(cleaned) or _FROM_NOW_RE.match(cleaned)
    if match:
        amount, unit = match.groups()
        return _add(today, int(amount), unit)

    return None


def _resolve_weekday(target: int, modifier: str, today: datetime.date) -> datetime.date:
    """
    next: the next occurrence after today (a week ahead when today is that day)
    last: the previous occurrence before today
    this: that day within the current Monday-start week
    """
    current = today.weekday()
    if modifier == "next":
        delta = (target - current) % 7 or 7
        return today + datetime.timedelta(days=delta)
    if modifier == "last":
        delta = (current - target) % 7 or 7
        return today - datetime.timedelta(days=delta)
    return today + datetime.timedelta(days=target - current)


def _parse_time(hours: str, minutes: Optional[str], meridiem: Optional[str]) -> Optional[str]:
    hour = int(hours)
    minute = int(minutes) if minutes else 0
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        hour = hour % 12 + (12 if meridiem == "pm" else 0)
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


# ============================================================================
# RECURRENCE PARSING
# ============================================================================

def parse_recurrence(text: str, today: Optional[datetime.date] = None) -> Optional[RecurrencePattern]:
    """
    Parse natural language recurrence patterns.

    Examples: "every day", "every weekday", "every monday", "every 2 weeks",
    "every month", "first monday of every month", "yearly"
    """
    cleaned = text.lower().strip()
    today = today or datetime.date.today()

    def pattern(rtype: RecurrenceType, interval: int = 1, **kwargs) -> RecurrencePattern:
        return RecurrencePattern(type=rtype, interval=interval, natural_language=cleaned, **kwargs)

    if cleaned in ("every day", "daily"):
        return pattern(RecurrenceType.DAILY)

    match = _EVERY_N_DAYS_RE.match(cleaned)
    if match:
        return pattern(RecurrenceType.DAILY, int(match.group(1)))

    if cleaned in ("every weekday", "weekdays"):
        return pattern(RecurrenceType.WEEKLY, days_of_week=[0, 1, 2, 3, 4])

    if cleaned in ("every weekend", "weekends"):
        return pattern(RecurrenceType.WEEKLY, days_of_week=[5, 6])

    match = _EVERY_DAY_OF_WEEK_RE.match(cleaned)
    if match:
        return pattern(RecurrenceType.WEEKLY, days_of_week=[WEEKDAYS[match.group(1)]])

    match = _EVERY_N_WEEKS_RE.match(cleaned)
    if match:
        return pattern(RecurrenceType.WEEKLY, int(match.group(1)), days_of_week=[today.weekday()])

    match = _EVERY_N_WEEKS_ON_RE.match(cleaned)
    if match:
        return pattern(RecurrenceType.WEEKLY, int(match.group(1)), days_of_week=[WEEKDAYS[match.group(2)]])

    if cleaned in ("every month", "monthly"):
        return pattern(RecurrenceType.MONTHLY, day_of_month=today.day)

    match = _EVERY_N_MONTHS_RE.match(cleaned)
    if match:
        return pattern(RecurrenceType.MONTHLY, int(match.group(1)), day_of_month=today.day)

    match = _MONTHLY_DAY_RE.match(cleaned)
    if match:
        # Position (first/last) stays in natural_language
        return pattern(RecurrenceType.CUSTOM, days_of_week=[WEEKDAYS[match.group(2)]])

    if cleaned in ("every year", "yearly", "annually"):
        return pattern(RecurrenceType.YEARLY, day_of_month=today.day, month_of_year=today.month)

    return None


def parse_task_date_input(text: str, today: Optional[datetime.date] = None) -> dict:
    """
    Parse combined due date input that might be a recurrence or a date,
    optionally followed by "at <time>".

    Returns:
        A dict with any of 'due_date' (ParsedDate) and 'recurrence'. A
        recurrence followed by a time ("every monday at 5pm") also carries
        'due_time' (HH:MM). Empty when nothing was understood.
    """
    cleaned = text.lower().strip()
    today = today or datetime.date.today()

    time_str = None
    match = _TIME_SUFFIX_RE.match(cleaned)
    if match:
        time_str = _parse_time(match.group(2), match.group(3), match.group(4))
        if time_str:
            cleaned = match.group(1).strip()

    recurrence = parse_recurrence(cleaned, today)
    if recurrence:
        result = {"recurrence": recurrence}
        if time_str:
            result["due_time"] = time_str
        return result

    parsed = parse_natural_date(cleaned, today)
    if parsed:
        return {"due_date": ParsedDate(date=parsed, has_time=time_str is not None, time=time_str)}

    return {}


# ============================================================================
# NEXT OCCURRENCE CALCULATION
# ============================================================================

def _week_start(day: datetime.date) -> datetime.date:
    return day - datetime.timedelta(days=day.weekday())


def _with_day(day: datetime.date, day_of_month: int) -> datetime.date:
    """Set the day of month, clamped to the month's length"""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=min(day_of_month, last))


def _nth_weekday_of_month(year: int, month: int, weekday: int, last: bool) -> datetime.date:
    weeks = calendar.Calendar().monthdatescalendar(year, month)
    candidates = [d for week in weeks for d in week if d.month == month and d.weekday() == weekday]
    return candidates[-1] if last else candidates[0]


def get_next_occurrence(pattern: RecurrencePattern,
                        from_date: Optional[datetime.date] = None) -> Optional[datetime.date]:
    """
    Calculate the next occurrence of a recurring task strictly after from_date.

    Returns:
        The next date, or None once the pattern's end_date has passed.
    """
    base = from_date or datetime.date.today()
    if isinstance(base, datetime.datetime):
        base = base.date()

    if pattern.type == RecurrenceType.DAILY:
        result = base + datetime.timedelta(days=pattern.interval)

    elif pattern.type == RecurrenceType.WEEKLY:
        if pattern.days_of_week:
            days = sorted(set(pattern.days_of_week))
            later_this_week = [d for d in days if d > base.weekday()]
            if later_this_week:
                result = _week_start(base) + datetime.timedelta(days=later_this_week[0])
            else:
                next_week = _week_start(base) + datetime.timedelta(weeks=pattern.interval)
                result = next_week + datetime.timedelta(days=days[0])
        else:
            result = base + datetime.timedelta(weeks=pattern.interval)

    elif pattern.type == RecurrenceType.MONTHLY:
        result = base + relativedelta(months=pattern.interval)
        if pattern.day_of_month:
            result = _with_day(result, pattern.day_of_month)

    elif pattern.type == RecurrenceType.YEARLY:
        result = base + relativedelta(years=pattern.interval)
        if pattern.month_of_year:
            result = _with_day(result.replace(day=1, month=pattern.month_of_year), pattern.day_of_month or base.day)
        elif pattern.day_of_month:
            result = _with_day(result, pattern.day_of_month)

    elif pattern.type == RecurrenceType.CUSTOM and pattern.days_of_week:
        last = pattern.natural_language.startswith("last")
        weekday = pattern.days_of_week[0]
        result = _nth_weekday_of_month(base.year, base.month, weekday, last)
        if result <= base:
            following = base.replace(day=1) + relativedelta(months=pattern.interval)
            result = _nth_weekday_of_month(following.year, following.month, weekday, last)

    else:
        result = base + datetime.timedelta(days=1)

    if pattern.end_date and result > pattern.end_date:
        return None
    return result


# ============================================================================
# FORMATTING
# ============================================================================

def format_recurrence(pattern: RecurrencePattern) -> str:
    """Format a recurrence pattern back to natural language"""
    return pattern.natural_language


def day_name(day: datetime.date, format_type=QLocale.FormatType.ShortFormat) -> str:
    # QLocale default follows set_language()
    return QLocale().dayName(day.isoweekday(), format_type)


def month_name(day: datetime.date, format_type=QLocale.FormatType.ShortFormat) -> str:
    return QLocale().monthName(day.month, format_type)


def format_date_for_display(day: datetime.date, today: Optional[datetime.date] = None) -> str:
    """
    Format a date relative to today: "Today", "Tomorrow", "Yesterday",
    the weekday name within the next week, otherwise "Jan 15".
    """
    today = today or datetime.date.today()
    diff = (day - today).days

    if diff == 0:
        return tr("date.today")
    if diff == 1:
        return tr("date.tomorrow")
    if diff == -1:
        return tr("date.yesterday")
    if 0 < diff <= 7:
        return day_name(day, QLocale.FormatType.LongFormat)
    return f"{month_name(day)} {day.day}"


def format_due_date(due_date: Optional[datetime.date], due_time: Optional[str] = None,
                    today: Optional[datetime.date] = None) -> str:
    """
    Format a due date the way the task list shows it.

    "Today 5:30 PM", "Tomorrow", "Mon 15 Jan", "Mon 15 Jan 2025" (other year)
    """
    if not due_date:
        return ""
    today = today or datetime.date.today()
    diff = (due_date - today).days

    if diff == 0:
        text = tr("date.today")
    elif diff == 1:
        text = tr("date.tomorrow")
    elif diff == -1:
        text = tr("date.yesterday")
    else:
        text = f"{day_name(due_date)} {due_date.day} {month_name(due_date)}"
        if due_date.year != today.year:
            text += f" {due_date.year}"

    if due_time:
        hours, minutes = due_time.split(":")
        hour = int(hours)
        meridiem = "PM" if hour >= 12 else "AM"
        text += f" {hour % 12 or 12}:{minutes} {meridiem}"

    return text


def due_datetime(due_date: datetime.date, due_time: Optional[str] = None) -> datetime.datetime:
    """Combine a due date and optional HH:MM time; no time means end of day"""
    if due_time:
        hours, minutes = due_time.split(":")
        return datetime.datetime.combine(due_date, datetime.time(int(hours), int(minutes)))
    return datetime.datetime.combine(due_date, datetime.time(23, 59, 59))


def is_overdue(due_date: Optional[datetime.date], due_time: Optional[str] = None,
               now: Optional[datetime.datetime] = None) -> bool:
    """A task without a time is overdue only after the end of its due day"""
    if not due_date:
        return False
    now = now or datetime.datetime.now()
    return due_datetime(due_date, due_time) < now
