"""Tests for i18n_hub.i18n.store module."""

import json
from unittest.mock import MagicMock, patch

import pytest

from i18n_hub.i18n.models import DictionaryKind
from i18n_hub.i18n.registry import LOCALE_CHANGED
from i18n_hub.i18n.store import DictionaryStore, PreferenceStore
from i18n_hub.i18n.theme_extractor import compute_hash
from i18n_hub.storage import FileSystemStorage, MemoryStorage
from tests.factories.i18n import (
    FIXED_TIME_MS,
    make_dictionary,
    make_theme_css,
    make_theme_dictionary,
)

pytestmark = pytest.mark.unit


class TestSaveAndLoad:
    def test_round_trip_refreshes_dict_version(self, store):
        original = make_dictionary("fr", {"hello": "Bonjour", "bye": "Au revoir"})

        store.save("demo", "fr", original)
        loaded = store.load("demo", "fr")

        assert loaded["$meta"]["dictVersion"] == str(FIXED_TIME_MS)
        loaded["$meta"]["dictVersion"] = original["$meta"]["dictVersion"]
        assert loaded == original

    def test_save_does_not_mutate_input(self, store):
        original = make_dictionary("fr")
        store.save("demo", "fr", original)

        assert original["$meta"]["dictVersion"] == "1700000000000"

    def test_save_layout_and_format(self, store, memory_storage):
        store.save("demo", "fr", make_dictionary("fr", {"hello": "Bonjour é"}))

        raw = memory_storage.read("dictionaries/plugins/demo/fr.json")
        assert "Bonjour é" in raw
        assert raw.startswith("{\n  ")

    def test_save_twice_overwrites(self, store):
        store.save("demo", "fr", make_dictionary("fr", {"hello": "Salut"}))
        store.save("demo", "fr", make_dictionary("fr", {"hello": "Bonjour"}))

        assert store.load("demo", "fr")["hello"] == "Bonjour"

    def test_create_keeps_dict_version(self, store):
        store.create("demo", "fr", make_dictionary("fr", dict_version="42"))
        assert store.load("demo", "fr")["$meta"]["dictVersion"] == "42"

    def test_load_missing_returns_none(self, store):
        assert store.load("demo", "xx") is None

    def test_load_unparseable_returns_none(self, store, memory_storage):
        memory_storage.write("dictionaries/plugins/demo/fr.json", "{not json")
        assert store.load("demo", "fr") is None

    def test_delete(self, store):
        store.save("demo", "fr", make_dictionary("fr"))

        assert store.delete("demo", "fr") is True
        assert store.load("demo", "fr") is None
        assert store.delete("demo", "fr") is False

    def test_export_returns_utf8_json(self, store):
        store.save("demo", "fr", make_dictionary("fr", {"hello": "Bonjour"}))

        exported = store.export("demo", "fr")

        assert json.loads(exported.decode("utf-8"))["hello"] == "Bonjour"
        assert store.export("demo", "de") is None

    def test_save_on_filesystem(self, tmp_path, registry):
        fs_store = DictionaryStore(
            FileSystemStorage(tmp_path),
            registry,
            base_path="dictionaries",
            preferred_locale="",
            clock=lambda: FIXED_TIME_MS,
        )

        fs_store.save("demo", "fr", make_dictionary("fr"))

        assert (tmp_path / "dictionaries" / "plugins" / "demo" / "fr.json").exists()
        assert fs_store.load("demo", "fr")["hello"] == "Bonjour"


class TestListing:
    def test_list_all_describes_files(self, store):
        store.create("demo", "fr", make_dictionary("fr", pluginVersion="1.0.0"))
        store.create("demo", "de", make_dictionary("de", {"hello": "Hallo"}))

        infos = {info.locale: info for info in store.list_all()}

        assert set(infos) == {"fr", "de"}
        assert infos["fr"].namespace_id == "demo"
        assert infos["fr"].file_name == "fr.json"
        assert infos["fr"].file_path == "dictionaries/plugins/demo/fr.json"
        assert infos["fr"].dict_version == "1700000000000"
        assert infos["fr"].compatible_version == "1.0.0"

    def test_unreadable_file_listed_with_unknown_version(self, store, memory_storage):
        memory_storage.write("dictionaries/plugins/demo/fr.json", "garbage")

        infos = store.list_all()

        assert len(infos) == 1
        assert infos[0].dict_version is None

    def test_non_json_files_ignored(self, store, memory_storage):
        memory_storage.write("dictionaries/plugins/demo/notes.txt", "x")
        assert store.list_all() == []

    def test_missing_root_returns_empty(self, store):
        assert store.list_all() == []

    def test_numeric_dict_version_listed_as_text(self, store, memory_storage):
        memory_storage.write(
            "dictionaries/plugins/demo/fr.json",
            json.dumps(make_dictionary("fr", dict_version=1700000000000)),
        )

        assert store.list_all()[0].dict_version == "1700000000000"

    def test_list_failure_returns_empty(self, registry):
        storage = MagicMock()
        storage.exists.return_value = True
        storage.list.side_effect = OSError("disk gone")
        failing_store = DictionaryStore(
            storage, registry, preferences=MagicMock(), preferred_locale=""
        )

        assert failing_store.list_all() == []

    def test_list_for_namespace_and_themes(self, store):
        store.create("demo", "fr", make_dictionary("fr"))
        store.create("other", "fr", make_dictionary("fr", plugin_id="other"))
        store.create("Minimal", "fr", make_theme_dictionary(), DictionaryKind.THEMES)

        assert [i.namespace_id for i in store.list_for_namespace("demo")] == ["demo"]
        assert store.list_installed_themes() == ["Minimal"]
        assert store.list_all(DictionaryKind.THEMES)[0].kind is DictionaryKind.THEMES

    def test_ghost_namespace_is_orphan(self, store, registry, demo_translator):
        registry.register("demo", demo_translator)
        store.save("ghost", "fr", make_dictionary("fr", plugin_id="ghost"))
        store.save("demo", "fr", make_dictionary("fr"))

        orphans = store.find_orphans()

        assert [o.namespace_id for o in orphans] == ["ghost"]
        assert store.load("ghost", "fr") is not None

    def test_everything_orphaned_without_registrations(self, store, registry):
        store.save("ghost", "fr", make_dictionary("fr", plugin_id="ghost"))

        assert registry.get_registered_ids() == []
        assert [o.namespace_id for o in store.find_orphans()] == ["ghost"]


class TestLoadForNamespace:
    def test_unregistered_namespace_loads_nothing(self, store):
        store.save("demo", "fr", make_dictionary("fr"))
        assert store.load_for_namespace("demo") == 0

    def test_loads_stored_overlays(self, store, registry, demo_translator):
        store.save("demo", "fr", make_dictionary("fr"))
        store.save("demo", "de", make_dictionary("de", {"hello": "Hallo"}))
        registry.register("demo", demo_translator)

        assert store.load_for_namespace("demo") == 2
        assert set(demo_translator.get_external_locales()) == {"fr", "de"}

    def test_invalid_stored_overlay_not_counted(self, store, registry, demo_translator):
        store.save("demo", "fr", make_dictionary("fr", {"hello": 1}))
        registry.register("demo", demo_translator)

        assert store.load_for_namespace("demo") == 0

    def test_applies_preferred_locale(self, store, registry, demo_translator):
        store.preferred_locale = "fr"
        store.save("demo", "fr", make_dictionary("fr"))
        registry.register("demo", demo_translator)

        store.load_for_namespace("demo")

        assert demo_translator.current_locale == "fr"
        assert demo_translator.resolve("hello") == "Bonjour"

    def test_preferred_locale_not_reapplied_when_equal(self, store, registry):
        translator = MagicMock()
        translator.current_locale = "fr"
        registry.register("demo", translator)
        store.preferred_locale = "fr"

        with patch("i18n_hub.i18n.store.logger") as mock_logger:
            store.load_for_namespace("demo")

        assert translator.current_locale == "fr"
        logged = [c[0][0] for c in mock_logger.info.call_args_list]
        assert "applied_preferred_locale" not in logged

    def test_runs_on_registration_event(self, store, registry, demo_translator):
        store.save("demo", "fr", make_dictionary("fr"))
        registry.on("plugin-registered", store.load_for_namespace)

        registry.register("demo", demo_translator)

        assert "fr" in demo_translator.get_loaded_locales()

    def test_auto_load_all_skips_unregistered(self, store, registry, demo_translator):
        registry.register("demo", demo_translator)
        store.save("demo", "fr", make_dictionary("fr"))
        store.save("ghost", "fr", make_dictionary("fr", plugin_id="ghost"))

        assert store.auto_load_all() == 1

    def test_auto_load_themes_loads_base_first(self, store, registry):
        store.create(
            "Minimal", "fr", make_theme_dictionary(entries={"Colors": "Couleurs"}), DictionaryKind.THEMES
        )
        store.create(
            "Minimal", "en", make_theme_dictionary(locale="en", entries={"Colors": "Colors"}),
            DictionaryKind.THEMES,
        )

        assert store.auto_load_themes() == 2
        assert set(registry.get_loaded_themes()["Minimal"]) == {"en", "fr"}


class TestImport:
    def test_import_valid_file(self, store, registry, demo_translator):
        registry.register("demo", demo_translator)
        payload = json.dumps(make_dictionary("fr")).encode("utf-8")

        result = store.import_from_external_file(payload, "demo")

        assert result.valid
        assert store.load("demo", "fr") is not None
        assert registry.get_global_locale() == "fr"
        assert demo_translator.resolve("hello") == "Bonjour"

    def test_import_parse_error(self, store):
        result = store.import_from_external_file(b"{oops", "demo")

        assert not result.valid
        assert result.errors[0].key == "$parse"
        assert result.errors[0].message.startswith("Failed to parse JSON:")

    def test_import_requires_locale(self, store, registry, demo_translator):
        registry.register("demo", demo_translator)
        payload = json.dumps({"$meta": {"pluginId": "demo"}, "hello": "Bonjour"})

        result = store.import_from_external_file(payload, "demo")

        assert result.errors[0].key == "$meta.locale"
        assert result.errors[0].message == "Dictionary must have $meta.locale field"

    def test_invalid_import_not_persisted(self, store, registry, demo_translator):
        registry.register("demo", demo_translator)
        payload = json.dumps(make_dictionary("fr", {"hello": ["x"]}))

        result = store.import_from_external_file(payload, "demo")

        assert not result.valid
        assert store.load("demo", "fr") is None
        assert registry.get_global_locale() is None

    def test_import_into_unregistered_namespace(self, store):
        result = store.import_from_external_file(json.dumps(make_dictionary("fr")), "ghost")

        assert result.errors[0].key == "$plugin"
        assert store.load("ghost", "fr") is None

    def test_import_theme_file(self, store, registry):
        result = store.import_theme_file(json.dumps(make_theme_dictionary()), "Minimal")

        assert result.valid
        assert store.load("Minimal", "fr", DictionaryKind.THEMES) is not None
        assert registry.get_theme_dictionary("Minimal", "fr") is not None

    @pytest.mark.parametrize("locale", [["fr"], {"code": "fr"}, 7])
    def test_import_rejects_non_string_locale(self, store, registry, demo_translator, locale):
        registry.register("demo", demo_translator)
        loaded_before = demo_translator.get_loaded_locales()
        payload = json.dumps(make_dictionary(locale))

        result = store.import_from_external_file(payload, "demo")
        theme_result = store.import_theme_file(payload, "Minimal")

        assert result.errors[0].key == "$meta.locale"
        assert theme_result.errors[0].key == "$meta.locale"
        assert demo_translator.get_loaded_locales() == loaded_before

    @pytest.mark.parametrize("locale", ["../../../settings", "fr/ca", "fr\\ca", ".."])
    def test_import_rejects_locale_outside_namespace_folder(self, tmp_path, registry, demo_translator, locale):
        storage = FileSystemStorage(tmp_path)
        storage.write("settings.json", '{"currentLocale": "en"}')
        preferences = PreferenceStore(storage, "settings.json")
        disk_store = DictionaryStore(storage, registry, preferences=preferences, preferred_locale="")
        registry.register("demo", demo_translator)

        result = disk_store.import_from_external_file(json.dumps(make_dictionary(locale)), "demo")

        assert not result.valid
        assert result.errors[0].key == "$meta.locale"
        assert storage.read("settings.json") == '{"currentLocale": "en"}'
        assert registry.get_global_locale() is None

    def test_import_reports_failed_write(self, registry, demo_translator):
        storage = MemoryStorage()
        storage.write = MagicMock(side_effect=OSError("read-only"))
        failing_store = DictionaryStore(storage, registry, preferences=MagicMock(), preferred_locale="")
        registry.register("demo", demo_translator)

        result = failing_store.import_from_external_file(json.dumps(make_dictionary("fr")), "demo")

        assert not result.valid
        assert result.errors[0].key == "$storage"
        assert registry.get_global_locale() is None

    def test_theme_import_reports_failed_write(self, registry):
        storage = MemoryStorage()
        storage.write = MagicMock(side_effect=OSError("read-only"))
        failing_store = DictionaryStore(storage, registry, preferences=MagicMock(), preferred_locale="")

        result = failing_store.import_theme_file(json.dumps(make_theme_dictionary()), "Minimal")

        assert result.errors[0].key == "$storage"

    def test_save_refuses_unsafe_segments(self, store, memory_storage):
        assert store.save("demo", "../escape", make_dictionary("fr")) is None
        assert not store.create("../demo", "fr", make_dictionary("fr"))
        assert memory_storage.files == {}


class TestOverlays:
    def test_synthesize_overlay(self, store, registry, demo_translator):
        registry.register("demo", demo_translator)

        overlay = store.synthesize_overlay("demo", "ja")

        assert overlay["$meta"] == {
            "pluginId": "demo",
            "pluginVersion": "0.0.0",
            "dictVersion": "1.0.0",
            "locale": "ja",
            "author": "User",
        }
        assert overlay["hello"] == ""
        assert set(overlay) == {"$meta", "hello", "greeting", "save", "save_menu"}

    def test_synthesize_for_unregistered_returns_none(self, store):
        assert store.synthesize_overlay("ghost", "ja") is None

    def test_create_overlay_persists_and_loads(self, store, registry, demo_translator):
        registry.register("demo", demo_translator)

        result = store.create_overlay("demo", "ja")

        assert result.valid
        assert store.load("demo", "ja")["$meta"]["dictVersion"] == "1.0.0"
        assert "ja" in demo_translator.get_loaded_locales()
        demo_translator.set_locale("ja")
        assert demo_translator.resolve("hello") == "Hello"

    def test_create_overlay_refuses_existing(self, store, registry, demo_translator):
        registry.register("demo", demo_translator)
        store.save("demo", "fr", make_dictionary("fr"))

        assert not store.create_overlay("demo", "fr").valid


class TestThemeBase:
    def test_generates_base_dictionary(self, store, registry):
        css = make_theme_css()

        assert store.ensure_theme_base_dictionary("Minimal", css, theme_version="2.0.0") is True

        base = store.load("Minimal", "en", DictionaryKind.THEMES)
        assert base["$meta"]["sourceHash"] == compute_hash(css)
        assert base["$meta"]["themeName"] == "Minimal"
        assert base["$meta"]["themeVersion"] == "2.0.0"
        assert base["$meta"]["dictVersion"] == str(FIXED_TIME_MS)
        assert base["Accent color"] == "Accent color"
        assert registry.get_theme_dictionary("Minimal", "en") is not None

    def test_unchanged_stylesheet_not_regenerated(self, store):
        css = make_theme_css()
        store.ensure_theme_base_dictionary("Minimal", css)

        assert store.ensure_theme_base_dictionary("Minimal", css) is False
        assert store.is_theme_base_stale("Minimal", css) is False

    def test_changed_stylesheet_is_stale(self, store):
        store.ensure_theme_base_dictionary("Minimal", make_theme_css())
        changed = make_theme_css(name="Minimal Plus")

        assert store.is_theme_base_stale("Minimal", changed) is True
        assert store.ensure_theme_base_dictionary("Minimal", changed) is True
        assert "Minimal Plus" in store.load("Minimal", "en", DictionaryKind.THEMES)

    def test_missing_base_is_stale(self, store):
        assert store.is_theme_base_stale("Minimal", make_theme_css()) is True

    def test_stylesheet_without_settings_writes_nothing(self, store):
        assert store.ensure_theme_base_dictionary("Plain", "body { color: red; }") is False
        assert store.load("Plain", "en", DictionaryKind.THEMES) is None


class TestPreferences:
    def test_remember_locale_persists(self, store, memory_storage):
        store.remember_locale("fr")

        assert store.preferred_locale == "fr"
        assert json.loads(memory_storage.read("settings.json")) == {"currentLocale": "fr"}

    def test_preferred_locale_read_from_preferences(self, memory_storage, registry):
        PreferenceStore(memory_storage, "settings.json").set("currentLocale", "de")

        restored = DictionaryStore(memory_storage, registry, preferences=PreferenceStore(memory_storage, "settings.json"))

        assert restored.preferred_locale == "de"

    def test_locale_changed_updates_preference(self, store, registry):
        registry.on(LOCALE_CHANGED, store.remember_locale)

        registry.set_global_locale("ja")

        assert store.preferred_locale == "ja"
        assert store.preferences.get("currentLocale") == "ja"

    def test_unreadable_preferences_are_empty(self, memory_storage):
        memory_storage.write("settings.json", "[broken")
        assert PreferenceStore(memory_storage, "settings.json").load() == {}
