"""
Tests for the productivity report.
"""

import datetime
import pytest

from app.domain.models import KarmaProfile, Label, Priority, Project, Task
from app.services.report_service import DEFAULT_TEMPLATE, ReportService

NOW = datetime.datetime(2025, 1, 15, 10, 30)
TODAY = NOW.date()


@pytest.fixture
def service():
    return ReportService()


@pytest.fixture
def data():
    done_at = NOW.replace(hour=9, minute=0)
    tasks = [
        Task(id="a", title="Write summary", project_id="work", completed=True, completed_at=done_at,
             created_at=done_at - datetime.timedelta(minutes=45), label_ids=["focus"]),
        Task(id="b", title="Review PR", project_id="work", completed=True, completed_at=done_at,
             created_at=done_at - datetime.timedelta(minutes=45)),
        Task(id="c", title="Call bank", priority=Priority.P1, due_date=TODAY, due_time="14:00"),
        Task(id="d", title="File taxes", due_date=TODAY - datetime.timedelta(days=3)),
    ]
    projects = [Project(id="work", name="Work")]
    labels = [Label(id="focus", name="deep-work")]
    karma = KarmaProfile(total_points=120, level=2, current_streak=4, longest_streak=9, daily_goal=2)
    return tasks, projects, labels, karma


def test_report_content(service, data):
    report = service.render_report(*data, now=NOW)

    assert "Generated: 2025-01-15 10:30" in report
    assert "Level 2 - Novice (120 points)" in report
    assert "30 points to Intermediate (70.0%)" in report
    assert "Current streak: 4 days (longest: 9)" in report
    assert "Today:        2 / 2  goal reached" in report
    assert "Average time to complete: 45m" in report
    assert "Work" in report and "deep-work" in report
    assert "[p1] Call bank (Today 2:00 PM)" in report
    assert "Overdue (1)" in report
    assert "File taxes" in report


def test_report_without_tasks(service):
    report = service.render_report([], [], [], KarmaProfile(), now=NOW)
    assert "Nothing due today." in report
    assert "Overdue" not in report
    assert "Most productive day" not in report


def test_report_written_to_file(service, data, tmp_path):
    output = tmp_path / "reports" / "insights.txt"
    report = service.render_report(*data, now=NOW, output_file=output)
    assert output.read_text(encoding="utf-8") == report


def test_build_context_groups_by_name(service, data):
    context = service.build_context(*data, now=NOW)
    assert context["by_project"] == [("Work", 2)]
    assert context["by_label"] == [("deep-work", 1)]
    assert [t.id for t in context["today_tasks"]] == ["c"]


@pytest.mark.asyncio
async def test_generate_report_from_backend(service, backend):
    await backend.projects.create(Project(id="home", name="Home"), backend.user_id)
    await backend.tasks.create(Task(id="t1", title="Water plants", project_id="home",
                                    due_date=TODAY), backend.user_id)

    report = await service.generate_report(backend, now=NOW)

    assert "Water plants" in report


@pytest.mark.parametrize("minutes,expected", [(45, "45m"), (125, "2h 05m"), (60, "1h 00m")])
def test_format_minutes(minutes, expected):
    assert ReportService._format_minutes(minutes) == expected


def test_templates(service):
    assert DEFAULT_TEMPLATE in service.list_templates()
    assert service.render_template_string("{{ n | format_minutes }}", n=90) == "1h 30m"
