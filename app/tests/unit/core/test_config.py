"""Unit tests for i18n_hub.core.config module.

Tests cover:
- Section defaults and environment overrides
- Refresh interval validation
- Settings aggregation
"""

import pytest

from i18n_hub.core.config import (
    CloudSettings,
    LocaleSettings,
    Settings,
    StorageSettings,
    get_settings,
)

pytestmark = pytest.mark.unit


class TestStorageSettings:
    def test_defaults(self):
        storage = StorageSettings()

        assert storage.root == "."
        assert storage.dictionaries_dir == "dictionaries"
        assert storage.preferences_file == "settings.json"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("I18N_STORAGE_ROOT", "/srv/plugin")
        monkeypatch.setenv("I18N_DICTIONARIES_DIR", "dicts")

        storage = StorageSettings()

        assert storage.root == "/srv/plugin"
        assert storage.dictionaries_dir == "dicts"


class TestCloudSettings:
    def test_defaults(self):
        cloud = CloudSettings()

        assert cloud.manifest_url.endswith("/manifest.json")
        assert cloud.raw_prefix.startswith("https://raw.githubusercontent.com/")
        assert cloud.mirror_prefix.startswith("https://cdn.jsdelivr.net/")
        assert cloud.timeout_seconds == 15
        assert cloud.refresh_minutes == 60

    @pytest.mark.parametrize("value,expected", [("30", 30), ("0", 60), ("-5", 60), ("", 60)])
    def test_refresh_minutes_validation(self, monkeypatch, value, expected):
        monkeypatch.setenv("CLOUD_REFRESH_MINUTES", value)
        assert CloudSettings().refresh_minutes == expected


class TestLocaleSettings:
    def test_defaults(self):
        locale = LocaleSettings()

        assert locale.current_locale == ""
        assert locale.debug_mode is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("I18N_CURRENT_LOCALE", "fr")
        monkeypatch.setenv("I18N_DEBUG", "true")

        locale = LocaleSettings()

        assert locale.current_locale == "fr"
        assert locale.debug_mode is True


class TestSettings:
    def test_sections_instantiated(self):
        settings = Settings()

        assert isinstance(settings.storage, StorageSettings)
        assert isinstance(settings.cloud, CloudSettings)
        assert isinstance(settings.locale, LocaleSettings)

    def test_section_override(self):
        cloud = CloudSettings()
        settings = Settings(cloud=cloud)

        assert settings.cloud is cloud

    def test_is_production(self, monkeypatch):
        monkeypatch.setenv("PREFIX", "dev-")
        assert Settings().is_production is False

        monkeypatch.setenv("PREFIX", "")
        assert Settings().is_production is True

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
