"""
Repository Pattern Implementation.

Architecture Decision: Why Repository Pattern?
The repositories are the backend API of the application. The store only ever
calls these methods, so the data source can change (local SQLite, a remote
PostgreSQL, a cloud API) without touching business logic. It also makes it
easy to inject a test session.

Every committed write is published on the change feed (app.infra.changes).
"""

from collections import defaultdict
from typing import List, Optional, Dict, Iterable, Tuple

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.errors import NotFoundError
from app.domain.models import (
    Task, Project, Section, Label, Filter, Reminder, Subtask, Comment,
    KarmaProfile, KarmaEvent,
)
from app.infra import changes
from app.infra.db import (
    ProjectModel, SectionModel, LabelModel, TaskModel, TaskLabelModel,
    SubtaskModel, CommentModel, ReminderModel, FilterModel,
    KarmaProfileModel, KarmaEventModel, get_engine,
)


class BaseRepository:
    """Session handling shared by all repositories"""

    def __init__(self, session: Optional[AsyncSession] = None):
        self.session = session

    async def _get_session(self) -> AsyncSession:
        """Get session - either injected or create new one"""
        if self.session:
            return self.session
        engine = get_engine()
        return engine.get_session()


class ProjectRepository(BaseRepository):
    """
    Handles Project and Section persistence.
    """

    async def get_all(self, user_id: str) -> List[Project]:
        """Get all projects of a user, ordered, with their sections"""
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(ProjectModel)
                .where(ProjectModel.user_id == user_id)
                .order_by(ProjectModel.order)
            )
            projects = [Project.model_validate(m) for m in result.scalars().all()]
            if not projects:
                return []

            result = await session.execute(
                select(SectionModel)
                .where(SectionModel.project_id.in_([p.id for p in projects]))
                .order_by(SectionModel.order)
            )
            sections_by_project: Dict[str, List[Section]] = defaultdict(list)
            for m in result.scalars().all():
                sections_by_project[m.project_id].append(Section.model_validate(m))

            return [
                p.model_copy(update={"sections": sections_by_project.get(p.id, [])})
                for p in projects
            ]

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(ProjectModel).where(ProjectModel.id == project_id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            sections = await self._load_sections(session, project_id)
            return Project.model_validate(model).model_copy(update={"sections": sections})

    async def create(self, project: Project, user_id: str) -> Project:
        """Create a new project"""
        session = await self._get_session()
        async with session:
            model = ProjectModel(
                id=project.id,
                user_id=user_id,
                name=project.name,
                color=project.color,
                parent_id=project.parent_id,
                view_style=project.view_style,
                is_favorite=project.is_favorite,
                is_archived=project.is_archived,
                order=project.order,
                created_at=project.created_at
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            created = Project.model_validate(model)
        changes.publish("projects", changes.INSERT, project.id, user_id)
        return created

    async def update(self, project: Project) -> Project:
        """Update an existing project (sections are handled separately)"""
        session = await self._get_session()
        async with session:
            result = await session.execute(
                update(ProjectModel)
                .where(ProjectModel.id == project.id)
                .values(
                    name=project.name,
                    color=project.color,
                    parent_id=project.parent_id,
                    view_style=project.view_style,
                    is_favorite=project.is_favorite,
                    is_archived=project.is_archived,
                    order=project.order
                )
            )
            if result.rowcount == 0:
                await session.rollback()
                raise NotFoundError("Project", project.id)
            await session.commit()
        changes.publish("projects", changes.UPDATE, project.id)
        return project

    async def delete(self, project_id: str) -> None:
        """Delete a project together with its sections and tasks"""
        session = await self._get_session()
        async with session:
            task_ids = select(TaskModel.id).where(TaskModel.project_id == project_id)
            await _delete_task_children(session, task_ids)
            await session.execute(delete(TaskModel).where(TaskModel.project_id == project_id))
            await session.execute(delete(SectionModel).where(SectionModel.project_id == project_id))
            await session.execute(delete(ProjectModel).where(ProjectModel.id == project_id))
            await session.commit()
        changes.publish("projects", changes.DELETE, project_id)

    async def reorder(self, project_orders: Iterable[Tuple[str, int]]) -> None:
        """Persist a new order. project_orders is a list of (id, order)"""
        session = await self._get_session()
        project_orders = list(project_orders)
        async with session:
            for project_id, order in project_orders:
                await session.execute(
                    update(ProjectModel)
                    .where(ProjectModel.id == project_id)
                    .values(order=order)
                )
            await session.commit()
        for project_id, _ in project_orders:
            changes.publish("projects", changes.UPDATE, project_id)

    async def get_sections(self, project_id: str) -> List[Section]:
        session = await self._get_session()
        async with session:
            return await self._load_sections(session, project_id)

    @staticmethod
    async def _load_sections(session: AsyncSession, project_id: str) -> List[Section]:
        result = await session.execute(
            select(SectionModel)
            .where(SectionModel.project_id == project_id)
            .order_by(SectionModel.order)
        )
        return [Section.model_validate(m) for m in result.scalars().all()]

    async def create_section(self, section: Section) -> Section:
        session = await self._get_session()
        async with session:
            model = SectionModel(
                id=section.id,
                project_id=section.project_id,
                name=section.name,
                order=section.order,
                created_at=section.created_at
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            created = Section.model_validate(model)
        changes.publish("sections", changes.INSERT, section.id)
        return created

    async def update_section(self, section_id: str, name: str) -> None:
        session = await self._get_session()
        async with session:
            result = await session.execute(
                update(SectionModel)
                .where(SectionModel.id == section_id)
                .values(name=name)
            )
            if result.rowcount == 0:
                await session.rollback()
                raise NotFoundError("Section", section_id)
            await session.commit()
        changes.publish("sections", changes.UPDATE, section_id)

    async def delete_section(self, section_id: str) -> None:
        """Delete a section; its tasks move to the project root"""
        session = await self._get_session()
        async with session:
            await session.execute(
                update(TaskModel)
                .where(TaskModel.section_id == section_id)
                .values(section_id=None)
            )
            await session.execute(delete(SectionModel).where(SectionModel.id == section_id))
            await session.commit()
        changes.publish("sections", changes.DELETE, section_id)


class LabelRepository(BaseRepository):
    """
    Handles Label persistence.
    """

    async def get_all(self, user_id: str) -> List[Label]:
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(LabelModel)
                .where(LabelModel.user_id == user_id)
                .order_by(LabelModel.created_at)
            )
            return [Label.model_validate(m) for m in result.scalars().all()]

    async def create(self, label: Label, user_id: str) -> Label:
        session = await self._get_session()
        async with session:
            model = LabelModel(
                id=label.id,
                user_id=user_id,
                name=label.name,
                color=label.color,
                is_favorite=label.is_favorite,
                created_at=label.created_at
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            created = Label.model_validate(model)
        changes.publish("labels", changes.INSERT, label.id, user_id)
        return created

    async def update(self, label: Label) -> Label:
        session = await self._get_session()
        async with session:
            result = await session.execute(
                update(LabelModel)
                .where(LabelModel.id == label.id)
                .values(name=label.name, color=label.color, is_favorite=label.is_favorite)
            )
            if result.rowcount == 0:
                await session.rollback()
                raise NotFoundError("Label", label.id)
            await session.commit()
        changes.publish("labels", changes.UPDATE, label.id)
        return label

    async def delete(self, label_id: str) -> None:
        """Delete a label and detach it from every task"""
        session = await self._get_session()
        async with session:
            await session.execute(delete(TaskLabelModel).where(TaskLabelModel.label_id == label_id))
            await session.execute(delete(LabelModel).where(LabelModel.id == label_id))
            await session.commit()
        changes.publish("labels", changes.DELETE, label_id)


class FilterRepository(BaseRepository):
    """
    Handles saved Filter persistence.
    """

    async def get_all(self, user_id: str) -> List[Filter]:
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(FilterModel)
                .where(FilterModel.user_id == user_id)
                .order_by(FilterModel.created_at)
            )
            return [Filter.model_validate(m) for m in result.scalars().all()]

    async def get_by_id(self, filter_id: str) -> Optional[Filter]:
        session = await self._get_session()
        async with session:
            result = await session.execute(select(FilterModel).where(FilterModel.id == filter_id))
            model = result.scalar_one_or_none()
            return Filter.model_validate(model) if model else None

    async def create(self, saved_filter: Filter, user_id: str) -> Filter:
        session = await self._get_session()
        async with session:
            model = FilterModel(
                id=saved_filter.id,
                user_id=user_id,
                name=saved_filter.name,
                query=saved_filter.query,
                color=saved_filter.color,
                is_favorite=saved_filter.is_favorite,
                order=saved_filter.order,
                created_at=saved_filter.created_at
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            created = Filter.model_validate(model)
        changes.publish("filters", changes.INSERT, saved_filter.id, user_id)
        return created

    async def update(self, saved_filter: Filter) -> Filter:
        session = await self._get_session()
        async with session:
            result = await session.execute(
                update(FilterModel)
                .where(FilterModel.id == saved_filter.id)
                .values(
                    name=saved_filter.name,
                    query=saved_filter.query,
                    color=saved_filter.color,
                    is_favorite=saved_filter.is_favorite,
                    order=saved_filter.order
                )
            )
            if result.rowcount == 0:
                await session.rollback()
                raise NotFoundError("Filter", saved_filter.id)
            await session.commit()
        changes.publish("filters", changes.UPDATE, saved_filter.id)
        return saved_filter

    async def delete(self, filter_id: str) -> None:
        session = await self._get_session()
        async with session:
            await session.execute(delete(FilterModel).where(FilterModel.id == filter_id))
            await session.commit()
        changes.publish("filters", changes.DELETE, filter_id)


async def _delete_task_children(session: AsyncSession, task_ids) -> None:
    """Remove labels, subtasks, comments and reminders of the given tasks"""
    await session.execute(delete(TaskLabelModel).where(TaskLabelModel.task_id.in_(task_ids)))
    await session.execute(delete(SubtaskModel).where(SubtaskModel.task_id.in_(task_ids)))
    await session.execute(delete(CommentModel).where(CommentModel.task_id.in_(task_ids)))
    await session.execute(delete(ReminderModel).where(ReminderModel.task_id.in_(task_ids)))


class TaskRepository(BaseRepository):
    """
    Handles all Task-related database operations.

    Converts between domain models (Pydantic) and ORM models (SQLAlchemy).
    A Task is stored across tasks, task_labels, subtasks, comments and reminders.
    """

    async def get_all(self, user_id: str) -> List[Task]:
        """Get all tasks of a user with their relations"""
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(TaskModel)
                .where(TaskModel.user_id == user_id)
                .order_by(TaskModel.order, TaskModel.created_at)
            )
            task_models = result.scalars().all()
            return await self._with_relations(session, task_models)

    async def get_by_id(self, task_id: str) -> Optional[Task]:
        """Get a specific task by ID"""
        session = await self._get_session()
        async with session:
            result = await session.execute(select(TaskModel).where(TaskModel.id == task_id))
            task_model = result.scalar_one_or_none()
            if task_model is None:
                return None
            tasks = await self._with_relations(session, [task_model])
            return tasks[0]

    async def get_by_project(self, project_id: str, section_id: Optional[str] = None) -> List[Task]:
        session = await self._get_session()
        async with session:
            stmt = select(TaskModel).where(TaskModel.project_id == project_id)
            if section_id is not None:
                stmt = stmt.where(TaskModel.section_id == section_id)
            result = await session.execute(stmt.order_by(TaskModel.order))
            return await self._with_relations(session, result.scalars().all())

    @staticmethod
    async def _with_relations(session: AsyncSession, task_models) -> List[Task]:
        """Load labels, subtasks, comments and reminders in one query each"""
        if not task_models:
            return []
        ids = [m.id for m in task_models]

        label_ids: Dict[str, List[str]] = defaultdict(list)
        result = await session.execute(select(TaskLabelModel).where(TaskLabelModel.task_id.in_(ids)))
        for link in result.scalars().all():
            label_ids[link.task_id].append(link.label_id)

        subtasks: Dict[str, List[Subtask]] = defaultdict(list)
        result = await session.execute(
            select(SubtaskModel).where(SubtaskModel.task_id.in_(ids)).order_by(SubtaskModel.order)
        )
        for m in result.scalars().all():
            subtasks[m.task_id].append(Subtask.model_validate(m))

        comments: Dict[str, List[Comment]] = defaultdict(list)
        result = await session.execute(
            select(CommentModel).where(CommentModel.task_id.in_(ids)).order_by(CommentModel.created_at)
        )
        for m in result.scalars().all():
            comments[m.task_id].append(Comment.model_validate(m))

        reminders: Dict[str, List[Reminder]] = defaultdict(list)
        result = await session.execute(
            select(ReminderModel).where(ReminderModel.task_id.in_(ids)).order_by(ReminderModel.created_at)
        )
        for m in result.scalars().all():
            reminders[m.task_id].append(Reminder.model_validate(m))

        return [
            Task.model_validate(m).model_copy(update={
                "label_ids": label_ids.get(m.id, []),
                "subtasks": subtasks.get(m.id, []),
                "comments": comments.get(m.id, []),
                "reminders": reminders.get(m.id, []),
            })
            for m in task_models
        ]

    @staticmethod
    def _row_values(task: Task) -> dict:
        return dict(
            title=task.title,
            description=task.description,
            project_id=task.project_id,
            section_id=task.section_id,
            status=task.status.value,
            priority=task.priority.value,
            completed=task.completed,
            completed_at=task.completed_at,
            due_date=task.due_date,
            due_time=task.due_time,
            recurrence=task.recurrence.model_dump(mode="json") if task.recurrence else None,
            parent_task_id=task.parent_task_id,
            order=task.order,
            estimated_minutes=task.estimated_minutes,
            updated_at=task.updated_at
        )

    @classmethod
    def _add_task(cls, session: AsyncSession, task: Task, user_id: str) -> None:
        session.add(TaskModel(
            id=task.id,
            user_id=user_id,
            created_at=task.created_at,
            **cls._row_values(task)
        ))
        for label_id in task.label_ids:
            session.add(TaskLabelModel(task_id=task.id, label_id=label_id))
        for subtask in task.subtasks:
            session.add(SubtaskModel(
                id=subtask.id, task_id=task.id, title=subtask.title,
                completed=subtask.completed, order=subtask.order
            ))
        for comment in task.comments:
            session.add(CommentModel(
                id=comment.id, task_id=task.id, content=comment.content,
                created_at=comment.created_at
            ))
        for reminder in task.reminders:
            session.add(cls._reminder_model(reminder))

    @classmethod
    async def _update_task(cls, session: AsyncSession, task: Task) -> None:
        result = await session.execute(
            update(TaskModel)
            .where(TaskModel.id == task.id)
            .values(**cls._row_values(task))
        )
        if result.rowcount == 0:
            await session.rollback()
            raise NotFoundError("Task", task.id)
        await session.execute(delete(TaskLabelModel).where(TaskLabelModel.task_id == task.id))
        for label_id in task.label_ids:
            session.add(TaskLabelModel(task_id=task.id, label_id=label_id))

    async def create(self, task: Task, user_id: str) -> Task:
        """Create a new task, including any relations it already carries"""
        session = await self._get_session()
        async with session:
            self._add_task(session, task, user_id)
            await session.commit()
        changes.publish("tasks", changes.INSERT, task.id, user_id)
        return task

    async def update(self, task: Task) -> Task:
        """Update the task row and replace its label set"""
        session = await self._get_session()
        async with session:
            await self._update_task(session, task)
            await session.commit()
        changes.publish("tasks", changes.UPDATE, task.id)
        return task

    async def save_completion(self, task: Task, user_id: str, next_task: Optional[Task] = None,
                              profile: Optional[KarmaProfile] = None,
                              event: Optional[KarmaEvent] = None) -> None:
        """
        Store a completed (or reopened) task in one transaction.

        The task row, the next occurrence of a recurring task, the karma event
        and the karma profile are committed together. A failure leaves none of
        them written, so the call can be repeated as a whole.

        Raises:
            NotFoundError: If the task or the karma profile does not exist
        """
        session = await self._get_session()
        async with session:
            await self._update_task(session, task)
            if next_task is not None:
                self._add_task(session, next_task, user_id)
            if event is not None:
                _add_karma_event(session, user_id, event)
            if profile is not None:
                await _update_karma_profile(session, user_id, profile)
            await session.commit()

        changes.publish("tasks", changes.UPDATE, task.id, user_id)
        if next_task is not None:
            changes.publish("tasks", changes.INSERT, next_task.id, user_id)
        if profile is not None:
            changes.publish("karma_profiles", changes.UPDATE, user_id, user_id)

    async def delete(self, task_id: str) -> None:
        """Delete a task and its relations"""
        session = await self._get_session()
        async with session:
            await _delete_task_children(session, [task_id])
            await session.execute(delete(TaskModel).where(TaskModel.id == task_id))
            await session.commit()
        changes.publish("tasks", changes.DELETE, task_id)

    # Subtasks

    async def add_subtask(self, task_id: str, subtask: Subtask) -> Subtask:
        session = await self._get_session()
        async with session:
            session.add(SubtaskModel(
                id=subtask.id, task_id=task_id, title=subtask.title,
                completed=subtask.completed, order=subtask.order
            ))
            await session.commit()
        changes.publish("tasks", changes.UPDATE, task_id)
        return subtask

    async def set_subtask_completed(self, task_id: str, subtask_id: str, completed: bool) -> None:
        session = await self._get_session()
        async with session:
            result = await session.execute(
                update(SubtaskModel)
                .where(SubtaskModel.id == subtask_id, SubtaskModel.task_id == task_id)
                .values(completed=completed)
            )
            if result.rowcount == 0:
                await session.rollback()
                raise NotFoundError("Subtask", subtask_id)
            await session.commit()
        changes.publish("tasks", changes.UPDATE, task_id)

    async def delete_subtask(self, task_id: str, subtask_id: str) -> None:
        session = await self._get_session()
        async with session:
            await session.execute(
                delete(SubtaskModel).where(SubtaskModel.id == subtask_id, SubtaskModel.task_id == task_id)
            )
            await session.commit()
        changes.publish("tasks", changes.UPDATE, task_id)

    # Comments

    async def add_comment(self, task_id: str, comment: Comment) -> Comment:
        session = await self._get_session()
        async with session:
            session.add(CommentModel(
                id=comment.id, task_id=task_id, content=comment.content,
                created_at=comment.created_at
            ))
            await session.commit()
        changes.publish("tasks", changes.UPDATE, task_id)
        return comment

    async def delete_comment(self, task_id: str, comment_id: str) -> None:
        session = await self._get_session()
        async with session:
            await session.execute(
                delete(CommentModel).where(CommentModel.id == comment_id, CommentModel.task_id == task_id)
            )
            await session.commit()
        changes.publish("tasks", changes.UPDATE, task_id)

    # Reminders

    @staticmethod
    def _reminder_model(reminder: Reminder) -> ReminderModel:
        return ReminderModel(
            id=reminder.id,
            task_id=reminder.task_id,
            type=reminder.type.value,
            date_time=reminder.date_time,
            relative_minutes=reminder.relative_minutes,
            is_triggered=reminder.is_triggered,
            created_at=reminder.created_at
        )

    async def add_reminder(self, reminder: Reminder) -> Reminder:
        session = await self._get_session()
        async with session:
            session.add(self._reminder_model(reminder))
            await session.commit()
        changes.publish("tasks", changes.UPDATE, reminder.task_id)
        return reminder

    async def mark_reminder_triggered(self, task_id: str, reminder_id: str) -> None:
        session = await self._get_session()
        async with session:
            await session.execute(
                update(ReminderModel)
                .where(ReminderModel.id == reminder_id, ReminderModel.task_id == task_id)
                .values(is_triggered=True)
            )
            await session.commit()
        changes.publish("tasks", changes.UPDATE, task_id)

    async def delete_reminder(self, task_id: str, reminder_id: str) -> None:
        session = await self._get_session()
        async with session:
            await session.execute(
                delete(ReminderModel).where(ReminderModel.id == reminder_id, ReminderModel.task_id == task_id)
            )
            await session.commit()
        changes.publish("tasks", changes.UPDATE, task_id)


def _add_karma_event(session: AsyncSession, user_id: str, event: KarmaEvent) -> KarmaEventModel:
    model = KarmaEventModel(
        user_id=user_id,
        date=event.date,
        points=event.points,
        tasks_completed=event.tasks_completed,
        reason=event.reason
    )
    session.add(model)
    return model


async def _update_karma_profile(session: AsyncSession, user_id: str, profile: KarmaProfile) -> None:
    result = await session.execute(
        update(KarmaProfileModel)
        .where(KarmaProfileModel.user_id == user_id)
        .values(
            total_points=profile.total_points,
            level=profile.level,
            current_streak=profile.current_streak,
            longest_streak=profile.longest_streak,
            daily_goal=profile.daily_goal,
            weekly_goal=profile.weekly_goal,
            last_completion_date=profile.last_completion_date
        )
    )
    if result.rowcount == 0:
        await session.rollback()
        raise NotFoundError("KarmaProfile", user_id)


class KarmaRepository(BaseRepository):
    """
    Handles the karma profile and its event history.
    """

    async def get_profile(self, user_id: str) -> KarmaProfile:
        """Get the karma profile, creating a default one if none exists"""
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(KarmaProfileModel).where(KarmaProfileModel.user_id == user_id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                model = KarmaProfileModel(
                    user_id=user_id,
                    total_points=0,
                    level=1,
                    current_streak=0,
                    longest_streak=0,
                    daily_goal=5,
                    weekly_goal=30
                )
                session.add(model)
                await session.commit()
                await session.refresh(model)
            return KarmaProfile.model_validate(model)

    async def update_profile(self, user_id: str, profile: KarmaProfile) -> KarmaProfile:
        session = await self._get_session()
        async with session:
            await _update_karma_profile(session, user_id, profile)
            await session.commit()
        changes.publish("karma_profiles", changes.UPDATE, user_id, user_id)
        return profile

    async def add_event(self, user_id: str, event: KarmaEvent) -> None:
        session = await self._get_session()
        async with session:
            model = _add_karma_event(session, user_id, event)
            await session.commit()
            event_id = str(model.id)
        changes.publish("karma_events", changes.INSERT, event_id, user_id)

    async def get_events(self, user_id: str, limit: int = 50) -> List[KarmaEvent]:
        """Most recent events first"""
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(KarmaEventModel)
                .where(KarmaEventModel.user_id == user_id)
                .order_by(KarmaEventModel.date.desc())
                .limit(limit)
            )
            return [KarmaEvent.model_validate(m) for m in result.scalars().all()]
