"""
Karma Service - Gamified productivity scoring.

Completing a task earns points by priority (p1=10 .. p4=2), keeps a daily
streak alive and moves the user through the KARMA_LEVELS. The functions here
are pure: they take a profile and return an updated copy, leaving persistence
to the store.
"""

import datetime
import logging
from collections import Counter
from typing import Iterable, Optional, Tuple

from app.domain.models import (
    KARMA_LEVELS, KARMA_POINTS, KarmaEvent, KarmaProfile, Priority,
    ProductivityStats, Task,
)

logger = logging.getLogger(__name__)


def points_for(priority: Priority) -> int:
    return KARMA_POINTS[priority]


def level_for_points(total_points: int) -> int:
    """Highest level whose threshold is reached"""
    level = 1
    for entry in KARMA_LEVELS:
        if total_points >= entry["points_required"]:
            level = entry["level"]
    return level


def next_streak(profile: KarmaProfile, today: datetime.date) -> int:
    """
    Streak after a completion on `today`:
    same day keeps it, the following day extends it, anything else restarts at 1.
    """
    if profile.last_completion_date is None:
        return 1
    diff = (today - profile.last_completion_date.date()).days
    if diff == 0:
        return max(profile.current_streak, 1)
    if diff == 1:
        return profile.current_streak + 1
    return 1


def apply_completion(profile: KarmaProfile, task: Task,
                     now: Optional[datetime.datetime] = None) -> Tuple[KarmaProfile, KarmaEvent]:
    """
    Award karma for completing a task.

    Returns:
        Tuple of (updated profile, the event that was appended to its history)
    """
    now = now or datetime.datetime.now()
    points = points_for(task.priority)
    streak = next_streak(profile, now.date())
    total = profile.total_points + points

    event = KarmaEvent(date=now, points=points, tasks_completed=1, reason="completed_task")
    updated = profile.model_copy(update={
        "total_points": total,
        "level": level_for_points(total),
        "current_streak": streak,
        "longest_streak": max(profile.longest_streak, streak),
        "last_completion_date": now,
        "points_history": [*profile.points_history, event],
    })

    if updated.level > profile.level:
        logger.info(f"Karma level up: {profile.level} -> {updated.level}")
    return updated, event


def level_progress(profile: KarmaProfile) -> dict:
    """
    Progress towards the next level.

    Returns:
        Dict with level, title, next_title (None at max level),
        points_to_next and percent (0-100).
    """
    current = KARMA_LEVELS[0]
    following = None
    for index, entry in enumerate(KARMA_LEVELS):
        if profile.total_points >= entry["points_required"]:
            current = entry
            following = KARMA_LEVELS[index + 1] if index + 1 < len(KARMA_LEVELS) else None

    if following is None:
        return {
            "level": current["level"],
            "title": current["title"],
            "next_title": None,
            "points_to_next": 0,
            "percent": 100.0,
        }

    span = following["points_required"] - current["points_required"]
    earned = profile.total_points - current["points_required"]
    return {
        "level": current["level"],
        "title": current["title"],
        "next_title": following["title"],
        "points_to_next": following["points_required"] - profile.total_points,
        "percent": round(earned / span * 100, 1),
    }


def productivity_stats(tasks: Iterable[Task],
                       now: Optional[datetime.datetime] = None) -> ProductivityStats:
    """
    Derive productivity statistics from completed tasks.

    "This week" and "this month" are the trailing 7 and 30 days.
    """
    now = now or datetime.datetime.now()
    today = now.date()
    week_ago = today - datetime.timedelta(days=7)
    month_ago = today - datetime.timedelta(days=30)

    completed = [t for t in tasks if t.completed and t.completed_at]

    by_project: Counter = Counter()
    by_label: Counter = Counter()
    heatmap: Counter = Counter()
    weekdays: Counter = Counter()
    hours: Counter = Counter()
    durations = []

    for task in completed:
        done = task.completed_at
        by_project[task.project_id or "inbox"] += 1
        for label_id in task.label_ids:
            by_label[label_id] += 1
        heatmap[done.date().isoformat()] += 1
        weekdays[done.strftime("%A")] += 1
        hours[done.hour] += 1
        minutes = (done - task.created_at).total_seconds() / 60
        if minutes >= 0:
            durations.append(minutes)

    most_productive_time = None
    if hours:
        hour = hours.most_common(1)[0][0]
        most_productive_time = datetime.time(hour).strftime("%I:%M %p").lstrip("0")

    return ProductivityStats(
        tasks_completed_today=sum(1 for t in completed if t.completed_at.date() == today),
        tasks_completed_this_week=sum(1 for t in completed if t.completed_at.date() >= week_ago),
        tasks_completed_this_month=sum(1 for t in completed if t.completed_at.date() >= month_ago),
        completions_by_project=dict(by_project),
        completions_by_label=dict(by_label),
        completion_heatmap=dict(heatmap),
        most_productive_day=weekdays.most_common(1)[0][0] if weekdays else None,
        most_productive_time=most_productive_time,
        average_completion_time=round(sum(durations) / len(durations), 1) if durations else 0.0,
    )


def check_daily_goal(profile: KarmaProfile, stats: ProductivityStats) -> bool:
    return stats.tasks_completed_today >= profile.daily_goal


def check_weekly_goal(profile: KarmaProfile, stats: ProductivityStats) -> bool:
    return stats.tasks_completed_this_week >= profile.weekly_goal
