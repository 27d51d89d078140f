"""
Local key/value storage for offline mode.

Each key is stored as a JSON file in the data directory, mirroring what the
store last synced so the app can show something while the backend is away.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "TASKS": "taskflow_tasks",
    "PROJECTS": "taskflow_projects",
    "LABELS": "taskflow_labels",
    "FILTERS": "taskflow_filters",
    "KARMA": "taskflow_karma",
    "VIEW_STATE": "taskflow_view_state",
}


class LocalStorage:
    """JSON-file backed key/value storage"""

    def __init__(self, storage_dir: Optional[Path] = None):
        if storage_dir is None:
            from app.infra.config import get_settings
            storage_dir = get_settings().data_dir / "local_storage"
        self.storage_dir = Path(storage_dir)

    def _path(self, key: str) -> Path:
        return self.storage_dir / f"{key}.json"

    def set_item(self, key: str, value: Any) -> None:
        """Serialize value to JSON. Failures are logged, never raised."""
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            with open(self._path(key), 'w', encoding='utf-8') as f:
                json.dump(value, f, indent=2, ensure_ascii=False, default=str)
        except (OSError, TypeError) as e:
            logger.error(f"Failed to save '{key}' to local storage: {e}")

    def get_item(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable local storage entry '{key}': {e}")
            return default

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def clear(self) -> None:
        if not self.storage_dir.exists():
            return
        for file in self.storage_dir.glob("*.json"):
            file.unlink()
