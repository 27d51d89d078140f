"""
Tests for karma points, streaks, levels and productivity statistics.
"""

import datetime
import pytest

from app.domain.models import KarmaProfile, Priority, Task
from app.services.karma_service import (
    apply_completion, check_daily_goal, check_weekly_goal, level_for_points,
    level_progress, next_streak, points_for, productivity_stats,
)

NOW = datetime.datetime(2025, 1, 15, 10, 30)  # Wednesday


def make_task(task_id: str = "t", **kwargs) -> Task:
    return Task(id=task_id, title=f"Task {task_id}", **kwargs)


class TestPointsAndLevels:

    @pytest.mark.parametrize("priority,points", [
        (Priority.P1, 10), (Priority.P2, 6), (Priority.P3, 4), (Priority.P4, 2),
    ])
    def test_points_by_priority(self, priority, points):
        assert points_for(priority) == points

    @pytest.mark.parametrize("total,level", [
        (0, 1), (49, 1), (50, 2), (149, 2), (150, 3), (799, 5), (800, 6), (3599, 9), (3600, 10), (99999, 10),
    ])
    def test_level_thresholds(self, total, level):
        assert level_for_points(total) == level


class TestStreak:

    def test_first_completion_starts_streak(self):
        assert next_streak(KarmaProfile(), NOW.date()) == 1

    def test_same_day_keeps_streak(self):
        profile = KarmaProfile(current_streak=4, last_completion_date=NOW.replace(hour=8))
        assert next_streak(profile, NOW.date()) == 4

    def test_next_day_extends_streak(self):
        profile = KarmaProfile(current_streak=4, last_completion_date=NOW - datetime.timedelta(days=1))
        assert next_streak(profile, NOW.date()) == 5

    def test_next_calendar_day_counts_even_within_24_hours(self):
        late = datetime.datetime(2025, 1, 14, 23, 50)
        profile = KarmaProfile(current_streak=2, last_completion_date=late)
        assert next_streak(profile, datetime.date(2025, 1, 15)) == 3

    def test_gap_resets_streak(self):
        profile = KarmaProfile(current_streak=9, last_completion_date=NOW - datetime.timedelta(days=2))
        assert next_streak(profile, NOW.date()) == 1


class TestApplyCompletion:

    def test_updates_profile_and_records_event(self):
        profile = KarmaProfile(total_points=45, current_streak=3, longest_streak=3,
                               last_completion_date=NOW - datetime.timedelta(days=1))
        updated, event = apply_completion(profile, make_task(priority=Priority.P1), NOW)

        assert updated.total_points == 55
        assert updated.level == 2
        assert updated.current_streak == 4
        assert updated.longest_streak == 4
        assert updated.last_completion_date == NOW
        assert updated.points_history == [event]
        assert (event.points, event.tasks_completed, event.reason) == (10, 1, "completed_task")

    def test_longest_streak_is_kept_after_reset(self):
        profile = KarmaProfile(current_streak=2, longest_streak=12,
                               last_completion_date=NOW - datetime.timedelta(days=5))
        updated, _ = apply_completion(profile, make_task(), NOW)
        assert (updated.current_streak, updated.longest_streak) == (1, 12)

    def test_original_profile_is_untouched(self):
        profile = KarmaProfile()
        apply_completion(profile, make_task(), NOW)
        assert profile.total_points == 0
        assert profile.points_history == []


class TestLevelProgress:

    def test_progress_within_level(self):
        progress = level_progress(KarmaProfile(total_points=100))
        assert progress["level"] == 2
        assert progress["title"] == "Novice"
        assert progress["next_title"] == "Intermediate"
        assert progress["points_to_next"] == 50
        assert progress["percent"] == 50.0

    def test_max_level(self):
        progress = level_progress(KarmaProfile(total_points=5000))
        assert progress["level"] == 10
        assert progress["next_title"] is None
        assert progress["percent"] == 100.0


class TestProductivityStats:

    @pytest.fixture
    def tasks(self):
        def done(task_id, days_ago, hour, **kwargs):
            completed_at = (NOW - datetime.timedelta(days=days_ago)).replace(hour=hour, minute=0)
            return make_task(task_id, completed=True, completed_at=completed_at,
                             created_at=completed_at - datetime.timedelta(minutes=30), **kwargs)

        return [
            done("a", 0, 9, project_id="work", label_ids=["x"]),
            done("b", 0, 9, project_id="work"),
            done("c", 3, 14, label_ids=["x", "y"]),
            done("d", 20, 9, project_id="home"),
            done("e", 44, 16, project_id="home"),
            make_task("open", project_id="work"),
        ]

    def test_counts_by_period(self, tasks):
        stats = productivity_stats(tasks, NOW)
        assert stats.tasks_completed_today == 2
        assert stats.tasks_completed_this_week == 3
        assert stats.tasks_completed_this_month == 4

    def test_breakdowns(self, tasks):
        stats = productivity_stats(tasks, NOW)
        assert stats.completions_by_project == {"work": 2, "inbox": 1, "home": 2}
        assert stats.completions_by_label == {"x": 2, "y": 1}
        assert stats.completion_heatmap["2025-01-15"] == 2
        assert stats.most_productive_day == "Wednesday"
        assert stats.most_productive_time == "9:00 AM"
        assert stats.average_completion_time == 30.0

    def test_no_completions(self):
        stats = productivity_stats([make_task()], NOW)
        assert stats.tasks_completed_today == 0
        assert stats.most_productive_day is None
        assert stats.average_completion_time == 0.0

    def test_goals(self, tasks):
        stats = productivity_stats(tasks, NOW)
        assert check_daily_goal(KarmaProfile(daily_goal=2), stats)
        assert not check_daily_goal(KarmaProfile(daily_goal=3), stats)
        assert check_weekly_goal(KarmaProfile(weekly_goal=3), stats)
        assert not check_weekly_goal(KarmaProfile(weekly_goal=30), stats)
