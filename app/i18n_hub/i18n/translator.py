"""Translation service for retrieving and interpolating translated messages.

One Translator owns one namespace (plugin id): an immutable base dictionary
supplied by the plugin plus any overlay dictionaries loaded at runtime.
"""

import re
from typing import Any, Callable, Dict, List, Optional

from i18n_hub.core.logging import get_module_logger
from i18n_hub.i18n.models import (
    META_KEY,
    Dictionary,
    ValidationIssue,
    ValidationResult,
    entry_keys,
)

logger = get_module_logger()

CONTEXT_PARAM = "context"

# Matches {name} and {{name}}
_PLACEHOLDER_PATTERN = re.compile(r"\{\{?(\w+)\}?\}")


def _is_text(value: Any) -> bool:
    # Empty strings are untranslated entries (e.g. a freshly created overlay)
    return isinstance(value, str) and value != ""


class Translator:
    """Service for translating keys of a single namespace.

    Resolution never raises and never returns an empty string for an unknown
    key: a miss is logged and the key itself is returned.

    Attributes:
        namespace_id: Plugin id this translator belongs to.
        last_successful_locale: Most recent locale whose overlay produced a hit.
    """

    def __init__(
        self,
        namespace_id: str,
        base_locale: str,
        base_dictionary: Dictionary,
        current_locale: Optional[str] = None,
        on_validation_error: Optional[Callable[[ValidationResult], None]] = None,
    ):
        """Initialize Translator.

        Args:
            namespace_id: Plugin id.
            base_locale: Locale of the base dictionary.
            base_dictionary: Default translations shipped with the plugin.
            current_locale: Initial locale (default: base_locale).
            on_validation_error: Called with the result when a dictionary is
                rejected by validation.
        """
        self.namespace_id = namespace_id
        self._base_locale = base_locale
        self._current_locale = current_locale or base_locale
        self._base_dictionary: Dictionary = dict(base_dictionary)
        self._on_validation_error = on_validation_error
        self.overlays: Dict[str, Dictionary] = {base_locale: self._base_dictionary}
        self.last_successful_locale: Optional[str] = None
        self.log = logger.bind(namespace=namespace_id)

    @property
    def base_locale(self) -> str:
        return self._base_locale

    @property
    def current_locale(self) -> str:
        return self._current_locale

    @current_locale.setter
    def current_locale(self, locale: str) -> None:
        self._current_locale = locale

    def set_locale(self, locale: str) -> None:
        """Set the current locale. The locale need not be loaded."""
        self._current_locale = locale

    def get_locale(self) -> str:
        return self._current_locale

    def resolve(self, key: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Resolve a key and interpolate parameters.

        Lookup order, first string hit wins:
        1. "{key}_{context}" in the current-locale overlay
        2. "{key}_{context}" in the base dictionary
        3. key in the current-locale overlay
        4. key in the base dictionary

        Steps 1-2 only apply when params carries a "context" value.

        Args:
            key: Translation key.
            params: Interpolation values for {name} / {{name}} placeholders,
                plus the reserved "context" disambiguation suffix.

        Returns:
            Translated and interpolated text, or the key when nothing matches.
        """
        params = params or {}
        context = params.get(CONTEXT_PARAM)

        lookup_keys = []
        if context:
            lookup_keys.append(f"{key}_{context}")
        lookup_keys.append(key)

        current = self.overlays.get(self._current_locale)
        template: Optional[str] = None

        for lookup_key in lookup_keys:
            if current is not None and _is_text(current.get(lookup_key)):
                template = current[lookup_key]
                self.last_successful_locale = self._current_locale
                break
            if _is_text(self._base_dictionary.get(lookup_key)):
                template = self._base_dictionary[lookup_key]
                break

        if template is None:
            self.log.warning(
                "missing_translation",
                key=key,
                context=context,
                locale=self._current_locale,
            )
            return key

        variables = {k: v for k, v in params.items() if k != CONTEXT_PARAM}
        if variables:
            return self._interpolate(template, variables)
        return template

    t = resolve

    def _interpolate(self, message: str, variables: Dict[str, Any]) -> str:
        """Replace {name} and {{name}} placeholders.

        Placeholders without a matching variable are left verbatim.
        """

        def _replace(match: "re.Match[str]") -> str:
            name = match.group(1)
            if name in variables:
                return str(variables[name])
            return match.group(0)

        return _PLACEHOLDER_PATTERN.sub(_replace, message)

    def has_key(self, key: str, locale: Optional[str] = None) -> bool:
        """Check whether a key has a string value in a locale.

        Args:
            key: Translation key.
            locale: Locale to check (default: current locale).
        """
        dictionary = self.overlays.get(locale or self._current_locale)
        return dictionary is not None and isinstance(dictionary.get(key), str)

    def load_dictionary(self, locale: str, dictionary: Any) -> ValidationResult:
        """Validate and install an overlay dictionary.

        A rejected dictionary leaves the previous overlay for the locale in
        place.

        Args:
            locale: Locale the overlay is for.
            dictionary: Dictionary document.

        Returns:
            ValidationResult of the validation run.
        """
        result = self.validate_dictionary(dictionary)

        if not result.valid:
            if self._on_validation_error:
                self._on_validation_error(result)
            self.log.error(
                "dictionary_validation_failed",
                locale=locale,
                errors=[issue.to_dict() for issue in result.errors],
            )
            return result

        if result.has_warnings:
            self.log.warning(
                "dictionary_loaded_with_warnings",
                locale=locale,
                warning_count=len(result.warnings),
            )

        # An overlay for the base locale shadows the base dictionary in the
        # current-locale tier; the base dictionary itself is never replaced.
        self.overlays[locale] = dictionary
        self.log.info("loaded_dictionary", locale=locale)
        return result

    def unload_dictionary(self, locale: str) -> None:
        """Remove an overlay dictionary.

        The base locale cannot be unloaded. Unloading the current locale
        resets the current locale to the base locale.
        """
        if locale == self._base_locale:
            self.log.warning("cannot_unload_base_dictionary", locale=locale)
            return

        if locale in self.overlays:
            del self.overlays[locale]
            self.log.info("unloaded_dictionary", locale=locale)

            if self._current_locale == locale:
                self._current_locale = self._base_locale
                self.log.info("locale_reset_to_base", locale=self._base_locale)

    def get_loaded_locales(self) -> List[str]:
        """Get builtin and external locales."""
        return list(self.overlays.keys())

    def get_builtin_locales(self) -> List[str]:
        return [self._base_locale]

    def get_external_locales(self) -> List[str]:
        return [locale for locale in self.overlays if locale != self._base_locale]

    def get_dictionary(self, locale: str) -> Optional[Dictionary]:
        """Get the base dictionary or a loaded overlay."""
        if locale == self._base_locale:
            return self._base_dictionary
        return self.overlays.get(locale)

    def validate_dictionary(self, dictionary: Any) -> ValidationResult:
        """Check a dictionary document against the base dictionary."""
        return validate_dictionary(dictionary, self._base_dictionary)


def validate_dictionary(
    dictionary: Any, base_dictionary: Optional[Dictionary] = None
) -> ValidationResult:
    """Check a dictionary document.

    Errors: payload is not an object, `$meta` is not an object, a value is
    not a string. Warnings: missing `$meta.locale` or `$meta.dictVersion`,
    and, when a base dictionary is given, keys unknown to it and base keys
    missing from the payload.

    Args:
        dictionary: Candidate dictionary document.
        base_dictionary: Reference key set, skipped when None.

    Returns:
        ValidationResult; valid when there are no errors.
    """
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    if not isinstance(dictionary, dict):
        errors.append(ValidationIssue("$root", "Dictionary must be an object"))
        return ValidationResult(valid=False, errors=errors)

    if META_KEY in dictionary:
        meta = dictionary[META_KEY]
        if not isinstance(meta, dict):
            errors.append(ValidationIssue(META_KEY, "$meta must be an object"))
        else:
            if not meta.get("locale") or not isinstance(meta.get("locale"), str):
                warnings.append(
                    ValidationIssue("$meta.locale", "Missing or invalid $meta.locale")
                )
            if not meta.get("dictVersion") or not isinstance(meta.get("dictVersion"), str):
                warnings.append(
                    ValidationIssue(
                        "$meta.dictVersion", "Missing or invalid $meta.dictVersion"
                    )
                )

    base_keys = entry_keys(base_dictionary) if base_dictionary is not None else None
    known = set(base_keys or [])
    dict_keys = entry_keys(dictionary)

    for key in dict_keys:
        if base_keys is not None and key not in known:
            warnings.append(
                ValidationIssue(key, f'Unknown key "{key}" not in base dictionary')
            )
        value = dictionary[key]
        if not isinstance(value, str):
            errors.append(
                ValidationIssue(
                    key,
                    f'Value for "{key}" must be a string, got {type(value).__name__}',
                )
            )

    if base_keys is not None:
        present = set(dict_keys)
        for key in base_keys:
            if key not in present:
                warnings.append(ValidationIssue(key, f'Missing translation for "{key}"'))

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def create_translator(
    namespace_id: str,
    base_dictionary: Dictionary,
    base_locale: str = "en",
    current_locale: Optional[str] = None,
    on_validation_error: Optional[Callable[[ValidationResult], None]] = None,
) -> Translator:
    """Create a Translator for a plugin.

    Usage:
        translator = create_translator("demo", {"hello": "Hello"})
        registry.register("demo", translator)
    """
    translator = Translator(
        namespace_id=namespace_id,
        base_locale=base_locale,
        base_dictionary=base_dictionary,
        current_locale=current_locale,
        on_validation_error=on_validation_error,
    )
    logger.info(
        "translator_created",
        namespace=namespace_id,
        base_locale=base_locale,
        key_count=len(entry_keys(base_dictionary)),
    )
    return translator
