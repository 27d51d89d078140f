"""
Task Store - In-memory application state with optimistic backend sync.

Architecture Decision: Optimistic updates with rollback
Every mutation follows the same path (see TaskStore._commit):

1. snapshot the current state
2. apply the change locally and notify observers (the UI updates instantly)
3. write to the backend through retry_operation()
4. on failure undo the entities this change touched (edits made meanwhile by
   other mutations stay), notify observers, log, emit a toast and optionally
   resync everything from the backend

New entities get client-generated UUIDs, so the optimistic record is the
final record and nothing has to be swapped in after the write succeeds.

Architecture Decision: Observer Pattern (Qt Signals)
The store emits signals when state changes, keeping it decoupled from the UI.
"""

import datetime
import logging
import uuid
from typing import Awaitable, Callable, Iterable, List, Optional

from PySide6.QtCore import QObject, Signal

from app.domain.models import (
    DEFAULT_COLORS, REMINDER_PRESETS, KARMA_LEVELS, Comment, Filter, KarmaProfile,
    Label, Project, Reminder, ReminderType, Section, Subtask, Task, TaskStatus,
    UserPreferences, ViewState, ViewType,
)
from app.i18n import tr
from app.services import filter_service, karma_service
from app.services.natural_language import get_next_occurrence
from app.services.retry import retry_operation
from app.services.sync_service import SyncResult, SyncService

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def _with_updates(model, updates: dict):
    """Apply user-supplied field updates with validation"""
    return type(model).model_validate({**model.model_dump(), **updates})


def _replace(items: Iterable, item) -> list:
    return [item if existing.id == item.id else existing for existing in items]


_COLLECTIONS = ("tasks", "projects", "labels", "filters")


def _revert_items(current: list, before: list, after: list) -> list:
    """Roll back one collection from `after` to `before`, keeping other edits in `current`"""
    before_by_id = {item.id: item for item in before}
    after_by_id = {item.id: item for item in after}

    # Entities this change added are left out
    reverted = []
    for item in current:
        ours = after_by_id.get(item.id) is item and before_by_id.get(item.id) is not item
        if not ours:
            reverted.append(item)
        elif item.id in before_by_id:
            reverted.append(before_by_id[item.id])

    present = {item.id for item in reverted}
    for index, item in enumerate(before):
        if item.id not in after_by_id and item.id not in present:
            reverted.insert(min(index, len(reverted)), item)
    return reverted


class TaskStore(QObject):
    """
    Mirrors the backend state of one user and exposes every mutation.

    Mutations return the created entity (or True) on success and None
    (or False) when the backend write failed and the change was rolled back.
    """

    state_changed = Signal()
    toast = Signal(str, str)  # (level, message) level: 'info' or 'error'
    sync_started = Signal()
    sync_finished = Signal(bool)  # success

    def __init__(self, backend: SyncService, preferences: Optional[UserPreferences] = None):
        super().__init__()
        self.backend = backend
        self.preferences = preferences or UserPreferences()

        self.tasks: List[Task] = []
        self.projects: List[Project] = []
        self.labels: List[Label] = []
        self.filters: List[Filter] = []
        self.karma = KarmaProfile()
        self.view_state = ViewState()

        self.is_syncing = False
        self.last_sync_time: Optional[datetime.datetime] = None
        self.last_error: Optional[str] = None

    @property
    def user_id(self) -> str:
        return self.backend.user_id

    # ========================================================================
    # OPTIMISTIC COMMIT
    # ========================================================================

    def _snapshot(self) -> dict:
        # Entities are only ever replaced, never mutated, so shallow copies suffice
        return {
            "tasks": list(self.tasks),
            "projects": list(self.projects),
            "labels": list(self.labels),
            "filters": list(self.filters),
            "karma": self.karma,
        }

    def _revert(self, before: dict, after: dict):
        """
        Undo the change between two snapshots on the current state.

        Only entities this change added, replaced or removed are touched, and
        only while they still hold the value it left them in. Writes of other
        mutations that ran in the meantime stay in place.
        """
        for name in _COLLECTIONS:
            setattr(self, name, _revert_items(getattr(self, name), before[name], after[name]))
        if after["karma"] is not before["karma"] and self.karma is after["karma"]:
            self.karma = before["karma"]

    def _on_retry(self, attempt: int, error: Exception):
        logger.warning(f"Retrying backend write (attempt {attempt}): {error}")

    async def _commit(self, action: str, apply: Callable[[], None],
                      write: Callable[[], Awaitable]) -> bool:
        """
        Apply a change optimistically, then persist it.

        Args:
            action: Name of the operation, used in logs and toasts
            apply: Mutates in-memory state
            write: Zero-argument coroutine function performing the backend write

        Returns:
            True if the backend write succeeded, False if it was rolled back.
        """
        before = self._snapshot()
        apply()
        after = self._snapshot()
        self.state_changed.emit()

        try:
            await retry_operation(
                write,
                max_retries=self.preferences.max_retries,
                delay=self.preferences.retry_delay_seconds,
                max_delay=self.preferences.retry_max_delay_seconds,
                on_retry=self._on_retry,
            )
        except Exception as e:
            self._revert(before, after)
            self.state_changed.emit()
            self.last_error = str(e)
            logger.error(f"Backend write '{action}' failed, change rolled back: {e}")
            self.toast.emit("error", tr("toast.save_failed", action=tr(f"action.{action}")))
            if self.preferences.resync_on_failure:
                await self.load()
            return False

        self._mirror()
        return True

    def _mirror(self):
        """Keep the offline copy current (no-op unless offline mode is on)"""
        if not self.backend.offline_mode:
            return
        self.backend.save_snapshot(SyncResult(
            projects=self.projects, tasks=self.tasks, labels=self.labels,
            filters=self.filters, karma=self.karma,
        ))

    # ========================================================================
    # LOADING
    # ========================================================================

    def _apply_sync_result(self, result: SyncResult):
        self.projects = result.projects
        self.tasks = result.tasks
        self.labels = result.labels
        self.filters = result.filters
        self.karma = result.karma

    async def load(self) -> bool:
        """
        Replace the in-memory state with the backend's.

        Falls back to the offline copy when the backend cannot be reached.
        Seeds a default project for users without any.
        """
        self.is_syncing = True
        self.sync_started.emit()
        try:
            result = await self.backend.sync_all_data()
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Failed to load data from backend: {e}")
            cached = self.backend.load_snapshot()
            if cached is not None:
                logger.info("Using offline copy")
                self._apply_sync_result(cached)
            self.toast.emit("error", tr("toast.sync_failed"))
            success = False
        else:
            self._apply_sync_result(result)
            if not self.projects:
                await self._seed_defaults()
            self._mirror()
            self.last_sync_time = datetime.datetime.now()
            self.last_error = None
            success = True
        finally:
            self.is_syncing = False

        stored_view = self.backend.load_from_local_storage("VIEW_STATE")
        if stored_view:
            self.view_state = ViewState.model_validate(stored_view)

        self.state_changed.emit()
        self.sync_finished.emit(success)
        return success

    async def _seed_defaults(self):
        """Create the default 'Work' project. The Inbox is a view, not a project."""
        project = Project(id=new_id(), name="Work", color="#2196F3", is_favorite=True, order=0)
        try:
            await self.backend.projects.create(project, self.user_id)
        except Exception as e:
            logger.warning(f"Could not create default project: {e}")
            return
        logger.info("Seeded default project 'Work'")
        self.projects = [project]

    # ========================================================================
    # PROJECTS
    # ========================================================================

    def get_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    async def add_project(self, name: str, color: str = DEFAULT_COLORS[-1], parent_id: Optional[str] = None,
                          view_style: str = "list", is_favorite: bool = False) -> Optional[Project]:
        project = Project(
            id=new_id(), name=name, color=color, parent_id=parent_id,
            view_style=view_style, is_favorite=is_favorite, order=len(self.projects),
        )

        def apply():
            self.projects = [*self.projects, project]

        ok = await self._commit("add_project", apply,
                                lambda: self.backend.projects.create(project, self.user_id))
        return project if ok else None

    async def update_project(self, project_id: str, **updates) -> bool:
        project = self.get_project(project_id)
        if project is None:
            logger.warning(f"update_project: unknown project {project_id}")
            return False
        updated = _with_updates(project, updates)

        def apply():
            self.projects = _replace(self.projects, updated)

        return await self._commit("update_project", apply,
                                  lambda: self.backend.projects.update(updated))

    async def delete_project(self, project_id: str) -> bool:
        """Delete a project with all its tasks"""
        def apply():
            self.projects = [p for p in self.projects if p.id != project_id]
            self.tasks = [t for t in self.tasks if t.project_id != project_id]

        return await self._commit("delete_project", apply,
                                  lambda: self.backend.projects.delete(project_id))

    async def reorder_projects(self, project_ids: List[str]) -> bool:
        """
        Order projects as listed. Projects missing from the list keep their
        relative order after the listed ones.
        """
        by_id = {p.id: p for p in self.projects}
        ordered = [by_id[pid] for pid in project_ids if pid in by_id]
        ordered += [p for p in self.projects if p.id not in project_ids]
        reordered = [p.model_copy(update={"order": index}) for index, p in enumerate(ordered)]

        def apply():
            self.projects = reordered

        return await self._commit("reorder_projects", apply,
                                  lambda: self.backend.projects.reorder((p.id, p.order) for p in reordered))

    # ========================================================================
    # SECTIONS
    # ========================================================================

    def _update_project_sections(self, project_id: str, update: Callable[[List[Section]], List[Section]]):
        self.projects = [
            p.model_copy(update={"sections": update(p.sections)}) if p.id == project_id else p
            for p in self.projects
        ]

    async def add_section(self, project_id: str, name: str) -> Optional[Section]:
        project = self.get_project(project_id)
        if project is None:
            logger.warning(f"add_section: unknown project {project_id}")
            return None
        section = Section(id=new_id(), project_id=project_id, name=name, order=len(project.sections))

        def apply():
            self._update_project_sections(project_id, lambda sections: [*sections, section])

        ok = await self._commit("add_section", apply,
                                lambda: self.backend.projects.create_section(section))
        return section if ok else None

    async def update_section(self, project_id: str, section_id: str, name: str) -> bool:
        def rename(sections):
            return [s.model_copy(update={"name": name}) if s.id == section_id else s for s in sections]

        def apply():
            self._update_project_sections(project_id, rename)

        return await self._commit("update_section", apply,
                                  lambda: self.backend.projects.update_section(section_id, name))

    async def delete_section(self, project_id: str, section_id: str) -> bool:
        """Delete a section; its tasks move to the project root"""
        def apply():
            self._update_project_sections(
                project_id, lambda sections: [s for s in sections if s.id != section_id])
            self.tasks = [
                t.model_copy(update={"section_id": None}) if t.section_id == section_id else t
                for t in self.tasks
            ]

        return await self._commit("delete_section", apply,
                                  lambda: self.backend.projects.delete_section(section_id))

    # ========================================================================
    # LABELS
    # ========================================================================

    def get_label(self, label_id: str) -> Optional[Label]:
        return next((l for l in self.labels if l.id == label_id), None)

    async def add_label(self, name: str, color: str = DEFAULT_COLORS[-1],
                        is_favorite: bool = False) -> Optional[Label]:
        label = Label(id=new_id(), name=name, color=color, is_favorite=is_favorite)

        def apply():
            self.labels = [*self.labels, label]

        ok = await self._commit("add_label", apply,
                                lambda: self.backend.labels.create(label, self.user_id))
        return label if ok else None

    async def update_label(self, label_id: str, **updates) -> bool:
        label = self.get_label(label_id)
        if label is None:
            logger.warning(f"update_label: unknown label {label_id}")
            return False
        updated = _with_updates(label, updates)

        def apply():
            self.labels = _replace(self.labels, updated)

        return await self._commit("update_label", apply,
                                  lambda: self.backend.labels.update(updated))

    async def delete_label(self, label_id: str) -> bool:
        """Delete a label and remove it from every task"""
        def apply():
            self.labels = [l for l in self.labels if l.id != label_id]
            self.tasks = [
                t.model_copy(update={"label_ids": [i for i in t.label_ids if i != label_id]})
                if label_id in t.label_ids else t
                for t in self.tasks
            ]

        return await self._commit("delete_label", apply,
                                  lambda: self.backend.labels.delete(label_id))

    # ========================================================================
    # TASKS
    # ========================================================================

    def get_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def _default_reminders(self, task: Task) -> List[Reminder]:
        minutes = REMINDER_PRESETS.get(self.preferences.default_reminder_preset)
        if minutes is None or task.due_date is None or task.reminders:
            return task.reminders
        return [Reminder(id=new_id(), task_id=task.id, type=ReminderType.RELATIVE,
                         relative_minutes=minutes)]

    async def add_task(self, title: str, project_id: Optional[str] = None,
                       section_id: Optional[str] = None, **fields) -> Optional[Task]:
        """
        Create a task. Extra keyword arguments are Task fields
        (priority, due_date, due_time, label_ids, recurrence, ...).

        Raises:
            ValueError: If the fields do not form a valid task
        """
        task = Task(id=new_id(), title=title, project_id=project_id,
                    section_id=section_id, **fields)
        task = task.model_copy(update={"reminders": self._default_reminders(task)})

        def apply():
            self.tasks = [*self.tasks, task]

        ok = await self._commit("add_task", apply,
                                lambda: self.backend.tasks.create(task, self.user_id))
        return task if ok else None

    async def update_task(self, task_id: str, **updates) -> bool:
        task = self.get_task(task_id)
        if task is None:
            logger.warning(f"update_task: unknown task {task_id}")
            return False
        updated = _with_updates(task, {**updates, "updated_at": datetime.datetime.now()})

        def apply():
            self.tasks = _replace(self.tasks, updated)

        return await self._commit("update_task", apply,
                                  lambda: self.backend.tasks.update(updated))

    async def delete_task(self, task_id: str) -> bool:
        def apply():
            self.tasks = [t for t in self.tasks if t.id != task_id]

        return await self._commit("delete_task", apply,
                                  lambda: self.backend.tasks.delete(task_id))

    def _next_occurrence(self, task: Task, now: datetime.datetime) -> Optional[Task]:
        next_date = get_next_occurrence(task.recurrence, task.due_date or now.date())
        if next_date is None:
            logger.info(f"Recurrence of '{task.title}' has ended")
            return None
        task_id = new_id()
        return task.model_copy(update={
            "id": task_id,
            "completed": False,
            "completed_at": None,
            "status": TaskStatus.TODO,
            "due_date": next_date,
            "created_at": now,
            "updated_at": now,
            "subtasks": [s.model_copy(update={"id": new_id(), "completed": False}) for s in task.subtasks],
            "comments": [],
            "reminders": [
                r.model_copy(update={"id": new_id(), "task_id": task_id, "is_triggered": False})
                for r in task.reminders if r.type == ReminderType.RELATIVE
            ],
        })

    async def toggle_task_completion(self, task_id: str,
                                     now: Optional[datetime.datetime] = None) -> bool:
        """
        Complete or reopen a task.

        Completing awards karma and, for a recurring task, creates the next
        occurrence as a new task.
        """
        task = self.get_task(task_id)
        if task is None:
            logger.warning(f"toggle_task_completion: unknown task {task_id}")
            return False

        now = now or datetime.datetime.now()
        completing = not task.completed
        updated = task.model_copy(update={
            "completed": completing,
            "completed_at": now if completing else None,
            "status": TaskStatus.DONE if completing else TaskStatus.TODO,
            "updated_at": now,
        })
        next_task = self._next_occurrence(task, now) if completing and task.recurrence else None
        previous_level = self.karma.level
        karma, event = karma_service.apply_completion(self.karma, task, now) if completing else (None, None)

        def apply():
            self.tasks = _replace(self.tasks, updated)
            if next_task:
                self.tasks = [*self.tasks, next_task]
            if karma:
                self.karma = karma

        def write():
            return self.backend.tasks.save_completion(updated, self.user_id, next_task=next_task,
                                                      profile=karma, event=event)

        ok = await self._commit("complete_task", apply, write)
        if ok and karma:
            self._announce_progress(previous_level, now)
        return ok

    def _announce_progress(self, previous_level: int, now: datetime.datetime):
        if self.karma.level > previous_level:
            title = KARMA_LEVELS[self.karma.level - 1]["title"]
            self.toast.emit("info", tr("toast.level_up", title=title))
        stats = self.productivity_stats(now)
        if stats.tasks_completed_today == self.karma.daily_goal:
            self.toast.emit("info", tr("toast.daily_goal", count=stats.tasks_completed_today))

    async def move_task(self, task_id: str, project_id: Optional[str],
                        section_id: Optional[str] = None) -> bool:
        task = self.get_task(task_id)
        if task is None:
            logger.warning(f"move_task: unknown task {task_id}")
            return False
        moved = task.model_copy(update={
            "project_id": project_id,
            "section_id": section_id,
            "updated_at": datetime.datetime.now(),
        })

        def apply():
            self.tasks = _replace(self.tasks, moved)

        return await self._commit("move_task", apply, lambda: self.backend.tasks.update(moved))

    async def duplicate_task(self, task_id: str) -> Optional[Task]:
        """Copy a task as a new, incomplete task titled '<title> (copy)'"""
        task = self.get_task(task_id)
        if task is None:
            logger.warning(f"duplicate_task: unknown task {task_id}")
            return None
        now = datetime.datetime.now()
        copy_id = new_id()
        duplicate = task.model_copy(update={
            "id": copy_id,
            "title": f"{task.title} (copy)",
            "completed": False,
            "completed_at": None,
            "status": TaskStatus.TODO,
            "created_at": now,
            "updated_at": now,
            "subtasks": [s.model_copy(update={"id": new_id()}) for s in task.subtasks],
            "comments": [c.model_copy(update={"id": new_id()}) for c in task.comments],
            "reminders": [
                r.model_copy(update={"id": new_id(), "task_id": copy_id}) for r in task.reminders
            ],
        })

        def apply():
            self.tasks = [*self.tasks, duplicate]

        ok = await self._commit("duplicate_task", apply,
                                lambda: self.backend.tasks.create(duplicate, self.user_id))
        return duplicate if ok else None

    def _update_task_field(self, task_id: str, field: str, update: Callable[[list], list]):
        now = datetime.datetime.now()
        self.tasks = [
            t.model_copy(update={field: update(getattr(t, field)), "updated_at": now})
            if t.id == task_id else t
            for t in self.tasks
        ]

    # ========================================================================
    # SUBTASKS & COMMENTS
    # ========================================================================

    async def add_subtask(self, task_id: str, title: str) -> Optional[Subtask]:
        task = self.get_task(task_id)
        if task is None:
            logger.warning(f"add_subtask: unknown task {task_id}")
            return None
        subtask = Subtask(id=new_id(), title=title, order=len(task.subtasks))

        def apply():
            self._update_task_field(task_id, "subtasks", lambda items: [*items, subtask])

        ok = await self._commit("add_subtask", apply,
                                lambda: self.backend.tasks.add_subtask(task_id, subtask))
        return subtask if ok else None

    async def toggle_subtask(self, task_id: str, subtask_id: str) -> bool:
        task = self.get_task(task_id)
        subtask = next((s for s in task.subtasks if s.id == subtask_id), None) if task else None
        if subtask is None:
            logger.warning(f"toggle_subtask: unknown subtask {subtask_id}")
            return False
        completed = not subtask.completed

        def apply():
            self._update_task_field(task_id, "subtasks", lambda items: [
                s.model_copy(update={"completed": completed}) if s.id == subtask_id else s
                for s in items
            ])

        return await self._commit("toggle_subtask", apply,
                                  lambda: self.backend.tasks.set_subtask_completed(task_id, subtask_id, completed))

    async def delete_subtask(self, task_id: str, subtask_id: str) -> bool:
        def apply():
            self._update_task_field(task_id, "subtasks",
                                    lambda items: [s for s in items if s.id != subtask_id])

        return await self._commit("delete_subtask", apply,
                                  lambda: self.backend.tasks.delete_subtask(task_id, subtask_id))

    async def add_comment(self, task_id: str, content: str) -> Optional[Comment]:
        if self.get_task(task_id) is None:
            logger.warning(f"add_comment: unknown task {task_id}")
            return None
        comment = Comment(id=new_id(), content=content)

        def apply():
            self._update_task_field(task_id, "comments", lambda items: [*items, comment])

        ok = await self._commit("add_comment", apply,
                                lambda: self.backend.tasks.add_comment(task_id, comment))
        return comment if ok else None

    async def delete_comment(self, task_id: str, comment_id: str) -> bool:
        def apply():
            self._update_task_field(task_id, "comments",
                                    lambda items: [c for c in items if c.id != comment_id])

        return await self._commit("delete_comment", apply,
                                  lambda: self.backend.tasks.delete_comment(task_id, comment_id))

    # ========================================================================
    # FILTERS
    # ========================================================================

    def get_filter(self, filter_id: str) -> Optional[Filter]:
        return next((f for f in self.filters if f.id == filter_id), None)

    async def add_filter(self, name: str, query: str, color: str = DEFAULT_COLORS[-1],
                         is_favorite: bool = False) -> Optional[Filter]:
        saved = Filter(id=new_id(), name=name, query=query, color=color,
                       is_favorite=is_favorite, order=len(self.filters))

        def apply():
            self.filters = [*self.filters, saved]

        ok = await self._commit("add_filter", apply,
                                lambda: self.backend.filters.create(saved, self.user_id))
        return saved if ok else None

    async def update_filter(self, filter_id: str, **updates) -> bool:
        saved = self.get_filter(filter_id)
        if saved is None:
            logger.warning(f"update_filter: unknown filter {filter_id}")
            return False
        updated = _with_updates(saved, updates)

        def apply():
            self.filters = _replace(self.filters, updated)

        return await self._commit("update_filter", apply,
                                  lambda: self.backend.filters.update(updated))

    async def delete_filter(self, filter_id: str) -> bool:
        def apply():
            self.filters = [f for f in self.filters if f.id != filter_id]

        return await self._commit("delete_filter", apply,
                                  lambda: self.backend.filters.delete(filter_id))

    # ========================================================================
    # REMINDERS
    # ========================================================================

    async def add_reminder(self, task_id: str, reminder_type: ReminderType = ReminderType.ABSOLUTE,
                           date_time: Optional[datetime.datetime] = None,
                           relative_minutes: Optional[int] = None) -> Optional[Reminder]:
        """
        Attach a reminder to a task.

        Raises:
            ValueError: If the reminder type lacks its date_time or relative_minutes
        """
        if reminder_type == ReminderType.ABSOLUTE and date_time is None:
            raise ValueError("Absolute reminders need a date_time")
        if reminder_type == ReminderType.RELATIVE and relative_minutes is None:
            raise ValueError("Relative reminders need relative_minutes")
        if self.get_task(task_id) is None:
            logger.warning(f"add_reminder: unknown task {task_id}")
            return None

        reminder = Reminder(id=new_id(), task_id=task_id, type=reminder_type,
                            date_time=date_time, relative_minutes=relative_minutes)

        def apply():
            self._update_task_field(task_id, "reminders", lambda items: [*items, reminder])

        ok = await self._commit("add_reminder", apply,
                                lambda: self.backend.tasks.add_reminder(reminder))
        return reminder if ok else None

    async def delete_reminder(self, task_id: str, reminder_id: str) -> bool:
        def apply():
            self._update_task_field(task_id, "reminders",
                                    lambda items: [r for r in items if r.id != reminder_id])

        return await self._commit("delete_reminder", apply,
                                  lambda: self.backend.tasks.delete_reminder(task_id, reminder_id))

    async def mark_reminder_triggered(self, task_id: str, reminder_id: str) -> bool:
        def apply():
            self._update_task_field(task_id, "reminders", lambda items: [
                r.model_copy(update={"is_triggered": True}) if r.id == reminder_id else r
                for r in items
            ])

        return await self._commit("trigger_reminder", apply,
                                  lambda: self.backend.tasks.mark_reminder_triggered(task_id, reminder_id))

    # ========================================================================
    # VIEW STATE
    # ========================================================================

    def set_view_state(self, view_state: ViewState):
        self.view_state = view_state
        self.backend.save_to_local_storage("VIEW_STATE", view_state)
        self.state_changed.emit()

    def go_to_inbox(self):
        self.set_view_state(ViewState(type=ViewType.INBOX))

    def go_to_today(self):
        self.set_view_state(ViewState(type=ViewType.TODAY))

    def go_to_upcoming(self):
        self.set_view_state(ViewState(type=ViewType.UPCOMING))

    def go_to_completed(self):
        self.set_view_state(ViewState(type=ViewType.COMPLETED))

    def go_to_insights(self):
        self.set_view_state(ViewState(type=ViewType.INSIGHTS))

    def go_to_project(self, project_id: str):
        self.set_view_state(ViewState(type=ViewType.PROJECT, project_id=project_id))

    def go_to_label(self, label_id: str):
        self.set_view_state(ViewState(type=ViewType.LABEL, label_id=label_id))

    def go_to_filter(self, filter_id: str):
        self.set_view_state(ViewState(type=ViewType.FILTER, filter_id=filter_id))

    def go_to_search(self, query: str):
        self.set_view_state(ViewState(type=ViewType.SEARCH, search_query=query))

    # ========================================================================
    # QUERIES
    # ========================================================================

    def tasks_for_current_view(self, today: Optional[datetime.date] = None) -> List[Task]:
        return filter_service.tasks_for_view(self.view_state, self.tasks, self.filters, today)

    def today_tasks(self, today: Optional[datetime.date] = None) -> List[Task]:
        return filter_service.today_tasks(self.tasks, today)

    def upcoming_tasks(self, today: Optional[datetime.date] = None) -> List[Task]:
        return filter_service.upcoming_tasks(self.tasks, today)

    def overdue_tasks(self, today: Optional[datetime.date] = None) -> List[Task]:
        return filter_service.overdue_tasks(self.tasks, today)

    def search_tasks(self, query: str) -> List[Task]:
        return filter_service.search_tasks(self.tasks, query)

    def productivity_stats(self, now: Optional[datetime.datetime] = None):
        return karma_service.productivity_stats(self.tasks, now)

    def check_daily_goal(self, now: Optional[datetime.datetime] = None) -> bool:
        return karma_service.check_daily_goal(self.karma, self.productivity_stats(now))

    def check_weekly_goal(self, now: Optional[datetime.datetime] = None) -> bool:
        return karma_service.check_weekly_goal(self.karma, self.productivity_stats(now))

    def level_progress(self) -> dict:
        return karma_service.level_progress(self.karma)
