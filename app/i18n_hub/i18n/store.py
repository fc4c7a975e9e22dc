"""Persistent dictionary store.

Dictionaries live in storage as `<base>/<kind>/<namespace>/<locale>.json`
where kind is `plugins` or `themes`. Read failures are logged and reported
as None or empty results; nothing here raises to callers for I/O problems.

Usage:
    store = DictionaryStore(FileSystemStorage(root), registry)
    registry.on("plugin-registered", store.load_for_namespace)
    store.save("demo", "fr", {"$meta": {...}, "hello": "Bonjour"})
"""

import json
import time
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from i18n_hub.core.config import settings
from i18n_hub.core.errors import StorageError
from i18n_hub.core.logging import get_module_logger
from i18n_hub.i18n.models import (
    META_KEY,
    Dictionary,
    DictionaryFileInfo,
    DictionaryKind,
    DictionaryMeta,
    ValidationResult,
    entry_keys,
    get_meta,
)
from i18n_hub.i18n.registry import THEME_BASE_LOCALE, RegistryProtocol
from i18n_hub.i18n.theme_extractor import compute_hash, extract_settings
from i18n_hub.storage import Storage, base_name, is_safe_segment, join_path

logger = get_module_logger()

PREFERRED_LOCALE_KEY = "currentLocale"
OVERLAY_DICT_VERSION = "1.0.0"
DEFAULT_PLUGIN_VERSION = "0.0.0"

# Errors a storage adapter or a JSON document can produce
_READ_ERRORS = (OSError, ValueError, StorageError)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _to_json(dictionary: Dictionary) -> str:
    return json.dumps(dictionary, indent=2, ensure_ascii=False)


class PreferenceStore:
    """Small JSON document of user preferences kept in storage."""

    def __init__(self, storage: Storage, path: Optional[str] = None):
        self.storage = storage
        self.path = path or settings.storage.preferences_file

    def load(self) -> Dict[str, Any]:
        try:
            if not self.storage.exists(self.path):
                return {}
            data = json.loads(self.storage.read(self.path))
        except _READ_ERRORS as e:
            logger.warning("preferences_unreadable", path=self.path, error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self.load()
        data[key] = value
        try:
            self.storage.write(self.path, json.dumps(data, indent=2, ensure_ascii=False))
        except (OSError, StorageError) as e:
            logger.error("preferences_write_failed", path=self.path, error=str(e))


class DictionaryStore:
    """Maps translator overlays to dictionary files in storage.

    Attributes:
        storage: Storage capability.
        registry: Registry receiving loaded dictionaries.
        base_path: Storage folder holding the kind folders.
        preferences: Preference document, source of preferred_locale.
        preferred_locale: Locale applied to newly registered translators.
    """

    def __init__(
        self,
        storage: Storage,
        registry: RegistryProtocol,
        base_path: Optional[str] = None,
        preferences: Optional[PreferenceStore] = None,
        preferred_locale: Optional[str] = None,
        debug_mode: Optional[bool] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.storage = storage
        self.registry = registry
        self.base_path = join_path(base_path or settings.storage.dictionaries_dir)
        self.preferences = preferences or PreferenceStore(storage)
        self.debug_mode = (
            debug_mode if debug_mode is not None else settings.locale.debug_mode
        )
        self._clock = clock

        if preferred_locale is None:
            preferred_locale = (
                self.preferences.get(PREFERRED_LOCALE_KEY)
                or settings.locale.current_locale
            )
        self.preferred_locale: str = preferred_locale or ""

    # Paths

    def kind_path(self, kind: DictionaryKind = DictionaryKind.PLUGINS) -> str:
        return join_path(self.base_path, kind.value)

    def namespace_path(
        self, namespace_id: str, kind: DictionaryKind = DictionaryKind.PLUGINS
    ) -> str:
        return join_path(self.kind_path(kind), namespace_id)

    def file_path(
        self,
        namespace_id: str,
        locale: str,
        kind: DictionaryKind = DictionaryKind.PLUGINS,
    ) -> str:
        return join_path(self.namespace_path(namespace_id, kind), f"{locale}.json")

    def _ensure_directory(self, path: str) -> None:
        if self.storage.exists(path):
            return
        try:
            self.storage.mkdir(path)
        except FileExistsError:
            pass

    # CRUD

    def save(
        self,
        namespace_id: str,
        locale: str,
        dictionary: Dictionary,
        kind: DictionaryKind = DictionaryKind.PLUGINS,
    ) -> Optional[Dictionary]:
        """Persist a dictionary, stamping `$meta.dictVersion` with the time.

        Args:
            namespace_id: Plugin id or theme name.
            locale: Dictionary locale.
            dictionary: Dictionary document. Not modified.
            kind: Dictionary family.

        Returns:
            The document as written, or None if the write failed.
        """
        stamped = dict(dictionary)
        meta = dict(get_meta(dictionary))
        meta["dictVersion"] = str(self._clock())
        stamped[META_KEY] = meta

        if not self._write(namespace_id, locale, stamped, kind):
            return None
        return stamped

    def create(
        self,
        namespace_id: str,
        locale: str,
        dictionary: Dictionary,
        kind: DictionaryKind = DictionaryKind.PLUGINS,
    ) -> bool:
        """Persist a dictionary as-is, keeping its `$meta.dictVersion`."""
        return self._write(namespace_id, locale, dictionary, kind)

    def _write(
        self,
        namespace_id: str,
        locale: str,
        dictionary: Dictionary,
        kind: DictionaryKind,
    ) -> bool:
        if not (is_safe_segment(namespace_id) and is_safe_segment(locale)):
            logger.error(
                "dictionary_save_rejected",
                namespace=namespace_id,
                locale=locale,
                reason="unsafe path segment",
            )
            return False

        path = self.file_path(namespace_id, locale, kind)
        try:
            self._ensure_directory(self.base_path)
            self._ensure_directory(self.kind_path(kind))
            self._ensure_directory(self.namespace_path(namespace_id, kind))
            self.storage.write(path, _to_json(dictionary))
        except (OSError, StorageError) as e:
            logger.error("dictionary_save_failed", path=path, error=str(e))
            return False
        logger.debug("dictionary_saved", path=path)
        return True

    def load(
        self,
        namespace_id: str,
        locale: str,
        kind: DictionaryKind = DictionaryKind.PLUGINS,
    ) -> Optional[Dictionary]:
        """Read a dictionary; None if it is absent or unparseable."""
        path = self.file_path(namespace_id, locale, kind)
        try:
            if not self.storage.exists(path):
                return None
            dictionary = json.loads(self.storage.read(path))
        except _READ_ERRORS as e:
            logger.error("dictionary_load_failed", path=path, error=str(e))
            return None

        if not isinstance(dictionary, dict):
            logger.error("dictionary_load_failed", path=path, error="not a JSON object")
            return None
        return dictionary

    def delete(
        self,
        namespace_id: str,
        locale: str,
        kind: DictionaryKind = DictionaryKind.PLUGINS,
    ) -> bool:
        path = self.file_path(namespace_id, locale, kind)
        try:
            if self.storage.exists(path):
                self.storage.remove(path)
                logger.info("dictionary_deleted", path=path)
                return True
        except (OSError, StorageError) as e:
            logger.error("dictionary_delete_failed", path=path, error=str(e))
        return False

    # Discovery

    def list_all(
        self, kind: DictionaryKind = DictionaryKind.PLUGINS
    ) -> List[DictionaryFileInfo]:
        """Walk `<kind>/<namespace>/<locale>.json` and describe every file.

        A file whose metadata cannot be read is still listed, with unknown
        versions. A failure listing the folders yields an empty list.
        """
        root = self.kind_path(kind)
        result: List[DictionaryFileInfo] = []

        try:
            if not self.storage.exists(root):
                return []

            listing = self.storage.list(root)
            for folder in listing.folders:
                namespace_id = base_name(folder)
                if not namespace_id:
                    continue

                for file_path in self.storage.list(folder).files:
                    if not file_path.endswith(".json"):
                        continue
                    file_name = base_name(file_path)
                    result.append(
                        self._describe(namespace_id, file_name, file_path, kind)
                    )
        except (OSError, StorageError) as e:
            logger.error("dictionary_scan_failed", path=root, error=str(e))
            return []

        if self.debug_mode:
            logger.info(
                "dictionary_scan_completed",
                kind=kind.value,
                files=[info.file_path for info in result],
            )
        return result

    def _describe(
        self,
        namespace_id: str,
        file_name: str,
        file_path: str,
        kind: DictionaryKind,
    ) -> DictionaryFileInfo:
        info = DictionaryFileInfo(
            namespace_id=namespace_id,
            locale=file_name[: -len(".json")],
            kind=kind,
            file_name=file_name,
            file_path=file_path,
        )
        try:
            meta = get_meta(json.loads(self.storage.read(file_path)))
        except _READ_ERRORS as e:
            logger.warning("skipped_invalid_dictionary_file", path=file_path, error=str(e))
            return info

        dict_version = meta.get("dictVersion")
        info.dict_version = str(dict_version) if dict_version is not None else None
        info.compatible_version = meta.get(kind.version_field)
        if kind is DictionaryKind.THEMES:
            info.theme_id = meta.get("id")
        return info

    def list_for_namespace(
        self, namespace_id: str, kind: DictionaryKind = DictionaryKind.PLUGINS
    ) -> List[DictionaryFileInfo]:
        return [info for info in self.list_all(kind) if info.namespace_id == namespace_id]

    def list_installed_themes(self) -> List[str]:
        """Names of themes with at least one dictionary on disk."""
        names: List[str] = []
        for info in self.list_all(DictionaryKind.THEMES):
            if info.namespace_id not in names:
                names.append(info.namespace_id)
        return names

    def find_orphans(self) -> List[DictionaryFileInfo]:
        """Plugin dictionaries whose namespace is not registered.

        Orphans are reported only. A plugin that failed to load this session
        may come back, so nothing is deleted here.
        """
        registered = set(self.registry.get_registered_ids())
        orphans = [
            info for info in self.list_all(DictionaryKind.PLUGINS)
            if info.namespace_id not in registered
        ]
        if orphans:
            logger.info(
                "orphan_dictionaries_found",
                namespaces=sorted({info.namespace_id for info in orphans}),
            )
        return orphans

    # Loading into the registry

    def load_for_namespace(self, namespace_id: str) -> int:
        """Load every stored overlay of a registered namespace.

        Also points the translator at preferred_locale when it is set and
        differs from the translator's current locale.

        Returns:
            Number of dictionaries loaded.
        """
        translator = self.registry.get_translator(namespace_id)
        if translator is None:
            return 0

        count = 0
        for info in self.list_for_namespace(namespace_id):
            dictionary = self.load(namespace_id, info.locale)
            if dictionary is None:
                continue
            if self.registry.load_dictionary(namespace_id, info.locale, dictionary).valid:
                count += 1

        if count:
            logger.info("loaded_namespace_dictionaries", namespace=namespace_id, count=count)

        if self.preferred_locale and translator.current_locale != self.preferred_locale:
            translator.current_locale = self.preferred_locale
            logger.info(
                "applied_preferred_locale",
                namespace=namespace_id,
                locale=self.preferred_locale,
            )
        return count

    def auto_load_all(self) -> int:
        """Load every stored plugin dictionary of a registered namespace."""
        registered = set(self.registry.get_registered_ids())
        count = 0
        for info in self.list_all(DictionaryKind.PLUGINS):
            if info.namespace_id not in registered:
                continue
            dictionary = self.load(info.namespace_id, info.locale)
            if dictionary is None:
                continue
            if self.registry.load_dictionary(info.namespace_id, info.locale, dictionary).valid:
                count += 1
        logger.info("auto_loaded_dictionaries", count=count)
        return count

    def auto_load_themes(self) -> int:
        """Load every stored theme dictionary, base locale first."""
        infos = sorted(
            self.list_all(DictionaryKind.THEMES),
            key=lambda info: info.locale != THEME_BASE_LOCALE,
        )
        count = 0
        for info in infos:
            dictionary = self.load(info.namespace_id, info.locale, DictionaryKind.THEMES)
            if dictionary is None:
                continue
            result = self.registry.load_theme_dictionary(
                info.namespace_id, info.locale, dictionary
            )
            if result.valid:
                count += 1
        logger.info("auto_loaded_theme_dictionaries", count=count)
        return count

    # Import / export

    def _parse(self, content: Union[bytes, str]) -> Any:
        if isinstance(content, bytes):
            content = content.decode("utf-8")
        return json.loads(content)

    def _read_import(
        self, content: Union[bytes, str], namespace_id: str
    ) -> Tuple[Optional[Dictionary], Optional[str], Optional[ValidationResult]]:
        """Parse an imported file and check where it would be written.

        Returns:
            (dictionary, locale, None) when usable, else (None, None, failure).
        """
        try:
            dictionary = self._parse(content)
        except ValueError as e:
            return None, None, ValidationResult.failure(
                "$parse", f"Failed to parse JSON: {e}"
            )

        locale = get_meta(dictionary).get("locale")
        if not locale:
            return None, None, ValidationResult.failure(
                "$meta.locale", "Dictionary must have $meta.locale field"
            )
        if not is_safe_segment(locale):
            return None, None, ValidationResult.failure(
                "$meta.locale", f"Invalid locale: {locale!r}"
            )
        if not is_safe_segment(namespace_id):
            return None, None, ValidationResult.failure(
                "$plugin", f"Invalid namespace id: {namespace_id!r}"
            )
        return dictionary, locale, None

    def import_from_external_file(
        self, content: Union[bytes, str], namespace_id: str
    ) -> ValidationResult:
        """Import a dictionary file for a plugin and switch to its locale.

        The dictionary is loaded through the registry first and written to
        storage only if it validates. The global locale becomes the imported
        locale once the file is saved.

        Args:
            content: Raw file content.
            namespace_id: Plugin id to import into.

        Returns:
            ValidationResult of the load, or a `$parse`, `$meta.locale`,
            `$plugin` or `$storage` error result.
        """
        dictionary, locale, failure = self._read_import(content, namespace_id)
        if failure is not None:
            return failure

        result = self.registry.load_dictionary(namespace_id, locale, dictionary)
        if not result.valid:
            return result

        if self.save(namespace_id, locale, dictionary) is None:
            return ValidationResult.failure(
                "$storage", f"Failed to save dictionary {namespace_id}/{locale}"
            )
        self.registry.set_global_locale(locale)
        logger.info("dictionary_imported", namespace=namespace_id, locale=locale)
        return result

    def import_theme_file(
        self, content: Union[bytes, str], theme_name: str
    ) -> ValidationResult:
        """Import a dictionary file for a theme."""
        dictionary, locale, failure = self._read_import(content, theme_name)
        if failure is not None:
            return failure

        result = self.registry.load_theme_dictionary(theme_name, locale, dictionary)
        if not result.valid:
            return result

        if self.save(theme_name, locale, dictionary, DictionaryKind.THEMES) is None:
            return ValidationResult.failure(
                "$storage", f"Failed to save theme dictionary {theme_name}/{locale}"
            )
        logger.info("theme_dictionary_imported", theme=theme_name, locale=locale)
        return result

    def export(
        self,
        namespace_id: str,
        locale: str,
        kind: DictionaryKind = DictionaryKind.PLUGINS,
    ) -> Optional[bytes]:
        """Stored dictionary as UTF-8 JSON bytes, None if absent."""
        dictionary = self.load(namespace_id, locale, kind)
        if dictionary is None:
            return None
        return _to_json(dictionary).encode("utf-8")

    # New overlays

    def synthesize_overlay(
        self, namespace_id: str, locale: str, author: str = "User"
    ) -> Optional[Dictionary]:
        """Build an empty overlay from a registered plugin's base dictionary.

        Every base key is present with an empty value, so resolution falls
        back to the base text until the key is translated.

        Returns:
            The new dictionary, or None if the namespace is not registered.
        """
        translator = self.registry.get_translator(namespace_id)
        if translator is None:
            return None

        base = translator.get_dictionary(translator.base_locale) or {}
        base_meta = get_meta(base)

        dictionary: Dictionary = {
            META_KEY: {
                "pluginId": namespace_id,
                "pluginVersion": base_meta.get("pluginVersion") or DEFAULT_PLUGIN_VERSION,
                "dictVersion": OVERLAY_DICT_VERSION,
                "locale": locale,
                "author": author,
            }
        }
        for key in entry_keys(base):
            dictionary[key] = ""
        return dictionary

    def create_overlay(
        self, namespace_id: str, locale: str, author: str = "User"
    ) -> ValidationResult:
        """Synthesize, persist and load a new overlay."""
        if self.load(namespace_id, locale) is not None:
            return ValidationResult.failure(
                "$meta.locale", f'Dictionary "{locale}" already exists for "{namespace_id}"'
            )

        dictionary = self.synthesize_overlay(namespace_id, locale, author)
        if dictionary is None:
            return ValidationResult.failure(
                "$plugin", f'Plugin "{namespace_id}" is not registered'
            )

        self.create(namespace_id, locale, dictionary)
        result = self.registry.load_dictionary(namespace_id, locale, dictionary)
        logger.info("overlay_created", namespace=namespace_id, locale=locale)
        return result

    # Theme base dictionaries

    def is_theme_base_stale(self, theme_name: str, css_text: str) -> bool:
        """True if the theme's `en` dictionary is missing or was generated
        from different stylesheet text."""
        existing = self.load(theme_name, THEME_BASE_LOCALE, DictionaryKind.THEMES)
        if existing is None:
            return True
        return get_meta(existing).get("sourceHash") != compute_hash(css_text)

    def ensure_theme_base_dictionary(
        self,
        theme_name: str,
        css_text: str,
        theme_version: Optional[str] = None,
    ) -> bool:
        """Regenerate a theme's `en` dictionary when its stylesheet changed.

        Args:
            theme_name: Theme folder name.
            css_text: Full stylesheet text.
            theme_version: Installed theme version, stored as themeVersion.

        Returns:
            True if the base dictionary was written.
        """
        extraction = extract_settings(css_text)
        if not extraction.strings:
            return False

        existing = self.load(theme_name, THEME_BASE_LOCALE, DictionaryKind.THEMES)
        existing_meta = get_meta(existing)
        if existing is not None and existing_meta.get("sourceHash") == extraction.hash:
            return False

        meta = DictionaryMeta(
            namespace_id=theme_name,
            locale=THEME_BASE_LOCALE,
            dict_version=str(self._clock()),
            compatible_version=theme_version or existing_meta.get("themeVersion"),
            description=f"Auto-generated base dictionary for {theme_name}",
            source_hash=extraction.hash,
        )
        dictionary: Dictionary = {META_KEY: meta.to_dict(DictionaryKind.THEMES)}
        dictionary.update(extraction.strings)

        if not self.create(theme_name, THEME_BASE_LOCALE, dictionary, DictionaryKind.THEMES):
            return False
        self.registry.load_theme_dictionary(theme_name, THEME_BASE_LOCALE, dictionary)
        logger.info(
            "theme_base_dictionary_generated",
            theme=theme_name,
            string_count=len(extraction.strings),
            hash=extraction.hash,
        )
        return True

    # Preferences

    def remember_locale(self, locale: str) -> None:
        """Persist a locale as the preferred locale (locale-changed hook)."""
        if not isinstance(locale, str) or locale == self.preferred_locale:
            return
        self.preferred_locale = locale
        self.preferences.set(PREFERRED_LOCALE_KEY, locale)
        logger.info("saved_locale_preference", locale=locale)
