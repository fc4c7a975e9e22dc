"""Translation engine, registry, dictionary store and cloud catalog client.

Usage:
    from i18n_hub.i18n import Registry, create_translator

    registry = Registry()
    translator = create_translator("demo", {"hello": "Hello {name}"})
    registry.register("demo", translator)
    translator.t("hello", {"name": "Ada"})
"""

from i18n_hub.i18n.cloud import (
    CloudClient,
    HttpResponse,
    RequestsHttpClient,
    is_newer,
)
from i18n_hub.i18n.locales import (
    LocaleInfo,
    get_locale_info,
    is_valid_locale,
    normalize_locale_code,
    resolve_locale,
)
from i18n_hub.i18n.models import (
    IDS_KEY,
    META_KEY,
    Dictionary,
    DictionaryFileInfo,
    DictionaryKind,
    DictionaryMeta,
    Manifest,
    RemoteDictionaryInfo,
    ValidationIssue,
    ValidationResult,
)
from i18n_hub.i18n.registry import Registry, RegistryProtocol, TranslatorProtocol
from i18n_hub.i18n.store import DictionaryStore, PreferenceStore
from i18n_hub.i18n.theme_extractor import (
    ExtractionResult,
    compute_hash,
    extract_settings,
)
from i18n_hub.i18n.translator import (
    Translator,
    create_translator,
    validate_dictionary,
)

__all__ = [
    "CloudClient",
    "Dictionary",
    "DictionaryFileInfo",
    "DictionaryKind",
    "DictionaryMeta",
    "DictionaryStore",
    "ExtractionResult",
    "HttpResponse",
    "IDS_KEY",
    "LocaleInfo",
    "META_KEY",
    "Manifest",
    "PreferenceStore",
    "Registry",
    "RegistryProtocol",
    "RemoteDictionaryInfo",
    "RequestsHttpClient",
    "Translator",
    "TranslatorProtocol",
    "ValidationIssue",
    "ValidationResult",
    "compute_hash",
    "create_translator",
    "extract_settings",
    "get_locale_info",
    "is_newer",
    "is_valid_locale",
    "normalize_locale_code",
    "resolve_locale",
    "validate_dictionary",
]
