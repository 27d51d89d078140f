"""
Sync Service - Loads the full user state from the backend.

The repositories are the backend; this service bundles them for one user,
loads everything the store mirrors in a single call, forwards change-feed
events and, in offline mode, keeps a JSON copy of the last synced state.
"""

import logging
from typing import Any, Callable, List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import Filter, KarmaProfile, Label, Project, Task
from app.infra import changes
from app.infra.local_storage import LocalStorage, STORAGE_KEYS
from app.infra.repository import (
    FilterRepository, KarmaRepository, LabelRepository, ProjectRepository,
    TaskRepository,
)

logger = logging.getLogger(__name__)


class SyncResult(BaseModel):
    projects: List[Project]
    tasks: List[Task]
    labels: List[Label]
    filters: List[Filter]
    karma: KarmaProfile


def _to_jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [_to_jsonable(item) for item in data]
    return data


class SyncService:
    """
    Backend access for one user.

    Args:
        user_id: Owner of every row read or written
        session: Optional session shared by all repositories (tests)
        storage: Local storage for offline mode
        offline_mode: Mirror synced data into local storage
    """

    def __init__(self, user_id: str, session: Optional[AsyncSession] = None,
                 storage: Optional[LocalStorage] = None, offline_mode: bool = False):
        self.user_id = user_id
        self.projects = ProjectRepository(session)
        self.tasks = TaskRepository(session)
        self.labels = LabelRepository(session)
        self.filters = FilterRepository(session)
        self.karma = KarmaRepository(session)
        self.offline_mode = offline_mode
        self._storage = storage

    @property
    def storage(self) -> LocalStorage:
        if self._storage is None:
            self._storage = LocalStorage()
        return self._storage

    async def sync_all_data(self) -> SyncResult:
        """
        Load projects (with sections), tasks (with relations), labels,
        filters and the karma profile. Projects named "Inbox" are dropped:
        the Inbox is a view over tasks without a project.
        """
        try:
            projects = await self.projects.get_all(self.user_id)
            tasks = await self.tasks.get_all(self.user_id)
            labels = await self.labels.get_all(self.user_id)
            filters = await self.filters.get_all(self.user_id)
            profile = await self.karma.get_profile(self.user_id)
            events = await self.karma.get_events(self.user_id)
        except Exception:
            logger.exception(f"Failed to sync all data for user '{self.user_id}'")
            raise

        projects = [p for p in projects if p.name.lower() != "inbox"]
        profile = profile.model_copy(update={"points_history": list(reversed(events))})

        logger.info(
            f"Synced {len(projects)} projects, {len(tasks)} tasks, "
            f"{len(labels)} labels, {len(filters)} filters"
        )
        return SyncResult(projects=projects, tasks=tasks, labels=labels,
                          filters=filters, karma=profile)

    def subscribe_to_changes(self, on_task_change: Callable[[changes.ChangeEvent], None],
                             on_project_change: Callable[[changes.ChangeEvent], None]) -> Callable[[], None]:
        """
        Forward change-feed events for this user's tasks and projects.

        Returns:
            A function that removes both subscriptions.
        """
        def for_user(callback):
            def handler(event: changes.ChangeEvent):
                if event.user_id in (None, self.user_id):
                    callback(event)
            return handler

        unsubscribers = [
            changes.subscribe("tasks", for_user(on_task_change)),
            changes.subscribe("projects", for_user(on_project_change)),
        ]

        def unsubscribe():
            for unsubscribe_one in unsubscribers:
                unsubscribe_one()

        return unsubscribe

    # ========================================================================
    # OFFLINE MODE
    # ========================================================================

    def save_to_local_storage(self, key: str, data: Any) -> None:
        if not self.offline_mode:
            return
        self.storage.set_item(STORAGE_KEYS.get(key, key), _to_jsonable(data))

    def load_from_local_storage(self, key: str, default: Any = None) -> Any:
        if not self.offline_mode:
            return default
        return self.storage.get_item(STORAGE_KEYS.get(key, key), default)

    def save_snapshot(self, result: SyncResult) -> None:
        """Mirror a full sync result into local storage"""
        self.save_to_local_storage("PROJECTS", result.projects)
        self.save_to_local_storage("TASKS", result.tasks)
        self.save_to_local_storage("LABELS", result.labels)
        self.save_to_local_storage("FILTERS", result.filters)
        self.save_to_local_storage("KARMA", result.karma)

    def load_snapshot(self) -> Optional[SyncResult]:
        """Rebuild the last mirrored state, or None when there is none"""
        if not self.offline_mode:
            return None
        try:
            return SyncResult(
                projects=self.load_from_local_storage("PROJECTS", []),
                tasks=self.load_from_local_storage("TASKS", []),
                labels=self.load_from_local_storage("LABELS", []),
                filters=self.load_from_local_storage("FILTERS", []),
                karma=self.load_from_local_storage("KARMA") or KarmaProfile(),
            )
        except ValueError as e:
            logger.warning(f"Discarding invalid offline snapshot: {e}")
            return None
