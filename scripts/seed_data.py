"""
Data Seeder for TaskFlow.
Populates the database with realistic data for testing and demo purposes.

Usage:
    python scripts/seed_data.py [--reset]
"""

import asyncio
import sys
import random
from datetime import datetime, timedelta, date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.domain.models import Priority, ReminderType
from app.infra.config import get_settings, setup_logging
from app.infra.db import init_db
from app.services import SyncService, TaskStore
from app.services.natural_language import parse_task_date_input


def reset_database():
    """Delete the existing database file to ensure a fresh seed"""
    settings = get_settings()
    if settings.database_url:
        print("A custom database URL is configured, not deleting anything.")
        return

    db_path = settings.data_dir / 'taskflow.db'
    if db_path.exists():
        print(f"Removing existing database at: {db_path}")
        try:
            db_path.unlink()
        except PermissionError:
            print("ERROR: Could not remove database. It might be in use.")
            sys.exit(1)


DEMO_TASKS = [
    # (title, project, due input, priority, labels)
    ("Write quarterly report", "Work", "tomorrow at 5pm", Priority.P1, ["deep-work"]),
    ("Review pull requests", "Work", "every weekday", Priority.P2, []),
    ("Team sync", "Work", "every 2 weeks on monday", Priority.P3, ["meetings"]),
    ("Plan sprint", "Work", "next friday", Priority.P2, ["meetings"]),
    ("Pay rent", "Personal", "first monday of every month", Priority.P1, ["errands"]),
    ("Buy groceries", "Personal", "today", Priority.P3, ["errands"]),
    ("Call mom", "Personal", "this sunday", Priority.P2, []),
    ("Renew passport", "Personal", "in 3 weeks", Priority.P2, ["errands"]),
    ("Read 'Deep Work'", None, None, Priority.P4, ["deep-work"]),
    ("Clean up downloads folder", None, "yesterday", Priority.P4, []),
]


async def seed(reset: bool = False):
    if reset:
        reset_database()
    print("Starting data seeding...")

    await init_db()
    settings = get_settings()
    store = TaskStore(SyncService(settings.user_id), settings.preferences)
    await store.load()

    projects = {p.name: p for p in store.projects}
    for name, color in (("Work", "#2196F3"), ("Personal", "#4CAF50")):
        if name not in projects:
            print(f"Creating project: {name}")
            projects[name] = await store.add_project(name, color=color, is_favorite=True)

    work = projects["Work"]
    if not work.sections:
        for section_name in ("Planning", "In progress"):
            await store.add_section(work.id, section_name)

    labels = {l.name: l for l in store.labels}
    for name, color in (("deep-work", "#673AB7"), ("meetings", "#FF9800"), ("errands", "#00BCD4")):
        if name not in labels:
            labels[name] = await store.add_label(name, color=color)

    existing = {t.title for t in store.tasks}
    for title, project_name, due_input, priority, label_names in DEMO_TASKS:
        if title in existing:
            print(f"Task exists: {title}")
            continue

        fields = {"priority": priority, "label_ids": [labels[n].id for n in label_names]}
        parsed = parse_task_date_input(due_input) if due_input else {}
        if "recurrence" in parsed:
            fields["recurrence"] = parsed["recurrence"]
            fields["due_date"] = date.today()
            fields["due_time"] = parsed.get("due_time")
        elif "due_date" in parsed:
            fields["due_date"] = parsed["due_date"].date
            fields["due_time"] = parsed["due_date"].time

        project_id = projects[project_name].id if project_name else None
        print(f"Creating task: {title}")
        task = await store.add_task(title, project_id=project_id, **fields)

        if task and task.due_time:
            await store.add_reminder(task.id, ReminderType.RELATIVE, relative_minutes=30)

    # Some completion history for the insights view
    now = datetime.now()
    for days_ago in range(14, 0, -1):
        for _ in range(random.randint(0, 4)):
            completed_at = (now - timedelta(days=days_ago)).replace(
                hour=random.randint(8, 19), minute=random.randint(0, 59))
            task = await store.add_task(
                f"Done {days_ago}d ago #{random.randint(100, 999)}",
                project_id=random.choice([None, work.id, projects['Personal'].id]),
                priority=random.choice(list(Priority)),
                created_at=completed_at - timedelta(hours=random.randint(1, 48)),
            )
            if task:
                await store.toggle_task_completion(task.id, now=completed_at)

    print(f"Seeding complete: {len(store.projects)} projects, {len(store.tasks)} tasks, "
          f"{store.karma.total_points} karma points.")


if __name__ == "__main__":
    setup_logging("WARNING")
    asyncio.run(seed(reset="--reset" in sys.argv))
