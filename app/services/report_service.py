"""
Report Generation Service using Jinja2 templates.

Architecture Decision: Template Pattern
The productivity report (the "Insights" view as text) is a template, so users
can customize it without changing code.
"""

import datetime
import logging
from pathlib import Path
from typing import List, Optional
from jinja2 import Environment, FileSystemLoader

from app.domain.models import KarmaProfile, Label, Project, Task
from app.services import karma_service
from app.services.filter_service import overdue_tasks, today_tasks
from app.services.natural_language import format_due_date
from app.utils import get_resource_path

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "productivity_report.txt"


class ReportService:
    """
    Renders productivity reports from the store's data.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize the report service.

        Args:
            template_dir: Directory containing Jinja2 templates
        """
        if template_dir is None:
            template_dir = get_resource_path("app/resources/templates")

        self.template_dir = Path(template_dir)

        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True
        )

        self.env.filters['format_minutes'] = self._format_minutes
        self.env.filters['format_date'] = self._format_date
        self.env.filters['format_due'] = format_due_date

    @staticmethod
    def _format_minutes(minutes: float) -> str:
        """Format minutes as '2h 05m'"""
        hours, rest = divmod(int(round(minutes)), 60)
        return f"{hours}h {rest:02d}m" if hours else f"{rest}m"

    @staticmethod
    def _format_date(dt: datetime.datetime, fmt: str = "%Y-%m-%d %H:%M") -> str:
        return dt.strftime(fmt)

    def build_context(self, tasks: List[Task], projects: List[Project], labels: List[Label],
                      karma: KarmaProfile, now: Optional[datetime.datetime] = None) -> dict:
        """Collect everything the report template shows"""
        now = now or datetime.datetime.now()
        stats = karma_service.productivity_stats(tasks, now)
        project_names = {p.id: p.name for p in projects}
        label_names = {l.id: l.name for l in labels}

        by_project = sorted(
            ((project_names.get(pid, "Inbox"), count) for pid, count in stats.completions_by_project.items()),
            key=lambda item: -item[1]
        )
        by_label = sorted(
            ((label_names.get(lid, lid), count) for lid, count in stats.completions_by_label.items()),
            key=lambda item: -item[1]
        )

        return {
            'generated_at': now,
            'stats': stats,
            'karma': karma,
            'progress': karma_service.level_progress(karma),
            'daily_goal_reached': karma_service.check_daily_goal(karma, stats),
            'weekly_goal_reached': karma_service.check_weekly_goal(karma, stats),
            'by_project': by_project,
            'by_label': by_label,
            'today_tasks': today_tasks(tasks, now.date()),
            'overdue_tasks': overdue_tasks(tasks, now.date()),
            'today': now.date(),
        }

    def render_report(self, tasks: List[Task], projects: List[Project], labels: List[Label],
                      karma: KarmaProfile, now: Optional[datetime.datetime] = None,
                      template_name: str = DEFAULT_TEMPLATE,
                      output_file: Optional[Path] = None) -> str:
        """
        Render the productivity report for the given data.

        When output_file is set the text is also written there (parent
        folders are created). Returns the rendered text.
        """
        text = self.env.get_template(template_name).render(**self.build_context(tasks, projects, labels, karma, now))

        if output_file:
            output_file = Path(output_file)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(text, encoding="utf-8")
            logger.info(f"Report written to {output_file}")

        return text

    async def generate_report(self, backend, now: Optional[datetime.datetime] = None,
                              template_name: str = DEFAULT_TEMPLATE,
                              output_file: Optional[Path] = None) -> str:
        """Load the user's data through a SyncService and render the report"""
        data = await backend.sync_all_data()
        return self.render_report(data.tasks, data.projects, data.labels, data.karma,
                                  now, template_name, output_file)

    def render_template_string(self, source: str, **context) -> str:
        return self.env.from_string(source).render(**context)

    def list_templates(self) -> List[str]:
        """Report templates shipped in the template directory"""
        return sorted(name for name in self.env.list_templates() if name.endswith((".txt", ".md")))
