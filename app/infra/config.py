"""
Configuration management using Pydantic Settings.

Architecture Decision: Why pydantic-settings?
- Type-safe configuration with validation
- Environment variables (TASKFLOW_*) override everything, which is how the
  backend (database URL, user id) is pointed elsewhere
- User preferences live in a YAML file the user may edit by hand
"""

import logging
import os
from pathlib import Path
from typing import Optional
import yaml

from pydantic_settings import BaseSettings, SettingsConfigDict
from app.domain.models import UserPreferences

PREFERENCES_FILE = "settings.yaml"
# Checked before the user config dir, so a checkout can carry its own preferences
WORKSPACE_CONFIG_DIR = Path("config")


def _platform_dir(kind: str) -> Path:
    """Base directory for 'config' or 'data' files on this OS"""
    if os.name == 'nt':
        return Path(os.getenv('APPDATA', Path.home()))
    if kind == "config":
        return Path(os.getenv('XDG_CONFIG_HOME', Path.home() / '.config'))
    return Path(os.getenv('XDG_DATA_HOME', Path.home() / '.local' / 'share'))


class Settings(BaseSettings):
    """
    Application settings. Sources, lowest priority first:
    1. Defaults below
    2. settings.yaml (preferences only)
    3. Environment variables / .env
    """
    model_config = SettingsConfigDict(
        env_prefix='TASKFLOW_',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    app_name: str = "TaskFlow"
    config_dir: Optional[Path] = None
    data_dir: Optional[Path] = None

    # Backend: every row is scoped to user_id
    database_url: Optional[str] = None
    user_id: str = "local"

    log_level: str = "INFO"

    preferences: UserPreferences = UserPreferences()

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        folder = self.app_name.lower()
        self.config_dir = self.config_dir or _platform_dir("config") / folder
        self.data_dir = self.data_dir or _platform_dir("data") / folder
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        preferences_file = self.preferences_file()
        if preferences_file is not None:
            self.preferences = self._read_preferences(preferences_file)

    def preferences_file(self) -> Optional[Path]:
        """The YAML file preferences are read from, if any exists"""
        for folder in (WORKSPACE_CONFIG_DIR, self.config_dir):
            candidate = folder / PREFERENCES_FILE
            if candidate.exists():
                return candidate
        return None

    def _read_preferences(self, path: Path) -> UserPreferences:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        return self.preferences.model_copy(update=UserPreferences(**data).model_dump(exclude_unset=True))

    def save_preferences(self):
        """Write the current preferences to the user's settings.yaml"""
        with open(self.config_dir / PREFERENCES_FILE, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.preferences.model_dump(), f, default_flow_style=False)

    def get_db_url(self) -> str:
        """TASKFLOW_DATABASE_URL, or a SQLite file in the data directory"""
        return self.database_url or f"sqlite+aiosqlite:///{self.data_dir / 'taskflow.db'}"


def setup_logging(level: str = "INFO"):
    """Configure root logging once for the whole application"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Re-read environment and preferences file"""
    global _settings
    _settings = Settings()
    return _settings
