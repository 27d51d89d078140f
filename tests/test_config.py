"""
Tests for settings, YAML preferences, language selection and local storage.
"""

import yaml
import pytest

from app.i18n import get_language, resolve_language, set_language, tr
from app.infra import config
from app.infra.config import Settings
from app.infra.local_storage import LocalStorage


@pytest.fixture
def settings_dirs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return {"config_dir": tmp_path / "config_home", "data_dir": tmp_path / "data_home"}


def test_defaults(settings_dirs):
    settings = Settings(**settings_dirs)
    assert settings.user_id == "local"
    assert settings.preferences.max_retries == 3
    assert settings.get_db_url().endswith("data_home/taskflow.db")
    assert settings_dirs["data_dir"].is_dir()


def test_preferences_round_trip_through_yaml(settings_dirs):
    settings = Settings(**settings_dirs)
    settings.preferences = settings.preferences.model_copy(update={"holiday_country": "DE", "max_retries": 5})
    settings.save_preferences()

    saved = yaml.safe_load((settings_dirs["config_dir"] / "settings.yaml").read_text(encoding="utf-8"))
    assert saved["holiday_country"] == "DE"

    reloaded = Settings(**settings_dirs)
    assert reloaded.preferences.max_retries == 5


def test_environment_overrides(settings_dirs, monkeypatch):
    monkeypatch.setenv("TASKFLOW_USER_ID", "alice")
    monkeypatch.setenv("TASKFLOW_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    settings = Settings(**settings_dirs)
    assert settings.user_id == "alice"
    assert settings.get_db_url() == "sqlite+aiosqlite:///:memory:"


class TestLocalStorage:

    def test_set_get_remove(self, storage):
        storage.set_item("key", {"a": [1, 2]})
        assert storage.get_item("key") == {"a": [1, 2]}
        storage.remove_item("key")
        assert storage.get_item("key", "gone") == "gone"

    def test_unreadable_entry_returns_default(self, tmp_path):
        storage = LocalStorage(tmp_path)
        (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
        assert storage.get_item("broken", []) == []

    def test_clear(self, storage):
        storage.set_item("a", 1)
        storage.set_item("b", 2)
        storage.clear()
        assert storage.get_item("a") is None
        assert storage.get_item("b") is None


def test_reload_settings_picks_up_environment(settings_dirs, monkeypatch):
    monkeypatch.setenv("TASKFLOW_CONFIG_DIR", str(settings_dirs["config_dir"]))
    monkeypatch.setenv("TASKFLOW_DATA_DIR", str(settings_dirs["data_dir"]))
    monkeypatch.setenv("TASKFLOW_LOG_LEVEL", "DEBUG")
    monkeypatch.setattr(config, "_settings", None)

    reloaded = config.reload_settings()
    assert reloaded.log_level == "DEBUG"
    assert config.get_settings() is reloaded


class TestLanguage:

    @pytest.mark.parametrize("preference,expected", [("en", "en"), ("de", "de"), ("fr", "en")])
    def test_resolve_language(self, preference, expected):
        assert resolve_language(preference) == expected

    def test_auto_uses_system_language(self, monkeypatch):
        monkeypatch.setattr("app.i18n.detect_system_language", lambda: "de")
        assert resolve_language("auto") == "de"

    def test_tr_falls_back_to_english_then_key(self):
        set_language("de")
        assert tr("date.today") == "Heute"
        assert tr("no.such.key") == "no.such.key"
        set_language("xx")
        assert get_language() == "en"

    def test_tr_formats_placeholders(self):
        assert tr("tray.today", count=3) == "Today (3)"
