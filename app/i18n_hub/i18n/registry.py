"""Registry of translators keyed by namespace.

The registry is constructed explicitly and handed to every component that
needs it. It retargets all translators when the global locale changes and
publishes lifecycle events on its own EventBus.

Events (positional arguments in parentheses):
    plugin-registered (namespace_id)
    plugin-unregistered (namespace_id)
    dictionary-loaded (namespace_id, locale)
    dictionary-unloaded (namespace_id, locale)
    locale-changed (locale)
    theme-dictionary-loaded (theme_name, locale)
    theme-dictionary-unloaded (theme_name, locale)
"""

from threading import RLock
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from i18n_hub.core.logging import get_module_logger
from i18n_hub.events import EventBus, EventCallback
from i18n_hub.i18n.models import Dictionary, ValidationResult
from i18n_hub.i18n.translator import validate_dictionary

logger = get_module_logger()

PLUGIN_REGISTERED = "plugin-registered"
PLUGIN_UNREGISTERED = "plugin-unregistered"
DICTIONARY_LOADED = "dictionary-loaded"
DICTIONARY_UNLOADED = "dictionary-unloaded"
LOCALE_CHANGED = "locale-changed"
THEME_DICTIONARY_LOADED = "theme-dictionary-loaded"
THEME_DICTIONARY_UNLOADED = "theme-dictionary-unloaded"

THEME_BASE_LOCALE = "en"


@runtime_checkable
class TranslatorProtocol(Protocol):
    """What the registry needs from a translator."""

    namespace_id: str

    @property
    def base_locale(self) -> str: ...

    @property
    def current_locale(self) -> str: ...

    @current_locale.setter
    def current_locale(self, locale: str) -> None: ...

    def resolve(self, key: str, params: Optional[Dict[str, Any]] = None) -> str: ...

    def load_dictionary(self, locale: str, dictionary: Any) -> ValidationResult: ...

    def unload_dictionary(self, locale: str) -> None: ...

    def get_loaded_locales(self) -> List[str]: ...

    def get_dictionary(self, locale: str) -> Optional[Dictionary]: ...


class RegistryProtocol(Protocol):
    """Narrow registry interface consumed by the store and the cloud client."""

    def register(self, namespace_id: str, translator: TranslatorProtocol) -> None: ...

    def unregister(self, namespace_id: str) -> None: ...

    def load_dictionary(
        self, namespace_id: str, locale: str, dictionary: Any
    ) -> ValidationResult: ...

    def unload_dictionary(self, namespace_id: str, locale: str) -> None: ...

    def load_theme_dictionary(
        self, theme_name: str, locale: str, dictionary: Any
    ) -> ValidationResult: ...

    def get_registered_ids(self) -> List[str]: ...

    def get_translator(self, namespace_id: str) -> Optional[TranslatorProtocol]: ...

    def set_global_locale(self, locale: str) -> None: ...

    def get_global_locale(self) -> Optional[str]: ...

    def on(self, event: str, callback: EventCallback) -> None: ...

    def off(self, event: str, callback: EventCallback) -> None: ...


class Registry:
    """Directory of translators plus theme dictionaries.

    Attributes:
        events: EventBus carrying the registry lifecycle events.
    """

    def __init__(self, events: Optional[EventBus] = None):
        self._translators: Dict[str, TranslatorProtocol] = {}
        self._themes: Dict[str, Dict[str, Dictionary]] = {}
        self._global_locale: Optional[str] = None
        self._lock = RLock()
        self.events = events or EventBus()

    def register(self, namespace_id: str, translator: TranslatorProtocol) -> None:
        """Register a translator, replacing any previous one for the id."""
        with self._lock:
            if namespace_id in self._translators:
                logger.warning("translator_replaced", namespace=namespace_id)
            self._translators[namespace_id] = translator
        logger.info("translator_registered", namespace=namespace_id)
        self.events.emit(PLUGIN_REGISTERED, namespace_id)

    def unregister(self, namespace_id: str) -> None:
        with self._lock:
            removed = self._translators.pop(namespace_id, None)
        if removed is None:
            return
        logger.info("translator_unregistered", namespace=namespace_id)
        self.events.emit(PLUGIN_UNREGISTERED, namespace_id)

    def load_dictionary(
        self, namespace_id: str, locale: str, dictionary: Any
    ) -> ValidationResult:
        """Load an overlay into a registered translator.

        Args:
            namespace_id: Plugin id.
            locale: Overlay locale.
            dictionary: Dictionary document.

        Returns:
            The translator's ValidationResult, or an invalid result with a
            `$plugin` error when the namespace is not registered.
        """
        translator = self.get_translator(namespace_id)
        if translator is None:
            logger.warning("load_for_unknown_namespace", namespace=namespace_id, locale=locale)
            return ValidationResult.failure(
                "$plugin", f'Plugin "{namespace_id}" is not registered'
            )

        result = translator.load_dictionary(locale, dictionary)
        if result.valid:
            self.events.emit(DICTIONARY_LOADED, namespace_id, locale)
        return result

    def unload_dictionary(self, namespace_id: str, locale: str) -> None:
        translator = self.get_translator(namespace_id)
        if translator is None:
            return
        removable = (
            locale != translator.base_locale
            and locale in translator.get_loaded_locales()
        )
        translator.unload_dictionary(locale)
        if removable:
            self.events.emit(DICTIONARY_UNLOADED, namespace_id, locale)

    def get_registered_ids(self) -> List[str]:
        with self._lock:
            return list(self._translators.keys())

    def get_translator(self, namespace_id: str) -> Optional[TranslatorProtocol]:
        with self._lock:
            return self._translators.get(namespace_id)

    def get_loaded_locales(self, namespace_id: str) -> List[str]:
        translator = self.get_translator(namespace_id)
        return translator.get_loaded_locales() if translator else []

    def set_global_locale(self, locale: str) -> None:
        """Point every translator at a locale, in registration order.

        All translators are updated before `locale-changed` is emitted.
        """
        with self._lock:
            self._global_locale = locale
            translators = list(self._translators.values())
            for translator in translators:
                translator.current_locale = locale
        logger.info("global_locale_changed", locale=locale, translator_count=len(translators))
        self.events.emit(LOCALE_CHANGED, locale)

    def get_global_locale(self) -> Optional[str]:
        return self._global_locale

    # Theme dictionaries

    def load_theme_dictionary(
        self, theme_name: str, locale: str, dictionary: Any
    ) -> ValidationResult:
        """Validate and store a theme dictionary.

        Non-base locales are checked against the theme's `en` dictionary when
        one is loaded.
        """
        base = None
        if locale != THEME_BASE_LOCALE:
            base = self.get_theme_dictionary(theme_name, THEME_BASE_LOCALE)

        result = validate_dictionary(dictionary, base)
        if not result.valid:
            logger.error(
                "theme_dictionary_validation_failed",
                theme=theme_name,
                locale=locale,
                errors=[issue.to_dict() for issue in result.errors],
            )
            return result

        with self._lock:
            self._themes.setdefault(theme_name, {})[locale] = dictionary
        logger.info("loaded_theme_dictionary", theme=theme_name, locale=locale)
        self.events.emit(THEME_DICTIONARY_LOADED, theme_name, locale)
        return result

    def unload_theme_dictionary(self, theme_name: str, locale: str) -> None:
        with self._lock:
            locales = self._themes.get(theme_name)
            if not locales or locale not in locales:
                return
            del locales[locale]
            if not locales:
                del self._themes[theme_name]
        logger.info("unloaded_theme_dictionary", theme=theme_name, locale=locale)
        self.events.emit(THEME_DICTIONARY_UNLOADED, theme_name, locale)

    def get_theme_dictionary(self, theme_name: str, locale: str) -> Optional[Dictionary]:
        with self._lock:
            return self._themes.get(theme_name, {}).get(locale)

    def get_loaded_themes(self) -> Dict[str, List[str]]:
        """Map of theme name to loaded locales."""
        with self._lock:
            return {name: list(locales) for name, locales in self._themes.items()}

    def resolve_theme(self, theme_name: str, text: str) -> str:
        """Translate a theme settings string into the global locale.

        Theme dictionaries are keyed by the source text, so a miss returns
        the text itself.
        """
        locale = self._global_locale
        if locale:
            dictionary = self.get_theme_dictionary(theme_name, locale)
            if dictionary:
                value = dictionary.get(text)
                if isinstance(value, str) and value:
                    return value
        return text

    # Event bus

    def on(self, event: str, callback: EventCallback) -> None:
        self.events.subscribe(event, callback)

    def off(self, event: str, callback: EventCallback) -> None:
        self.events.unsubscribe(event, callback)

    def clear(self) -> None:
        """Drop all translators, theme dictionaries and subscribers."""
        with self._lock:
            self._translators.clear()
            self._themes.clear()
            self._global_locale = None
        self.events.clear()
        logger.info("registry_cleared")
