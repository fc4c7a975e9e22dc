"""Dictionary models for the i18n system.

Defines the data structures shared by the translator, registry, store and
cloud client. Dictionaries themselves stay plain dicts (they are read from
and written to JSON as-is); the dataclasses below describe their metadata
and the results of operations on them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

META_KEY = "$meta"
"""Reserved dictionary key holding the DictionaryMeta document."""

IDS_KEY = "@@ids"
"""Reserved theme key listing the settings ids a theme declares (JSON list)."""

Dictionary = Dict[str, Any]


class DictionaryKind(str, Enum):
    """Dictionary families, also the first storage path segment."""

    PLUGINS = "plugins"
    THEMES = "themes"

    @property
    def namespace_field(self) -> str:
        """Name of the `$meta` field identifying the namespace."""
        return "pluginId" if self is DictionaryKind.PLUGINS else "themeName"

    @property
    def version_field(self) -> str:
        """Name of the `$meta` field holding the compatible host version."""
        return "pluginVersion" if self is DictionaryKind.PLUGINS else "themeVersion"


@dataclass
class DictionaryMeta:
    """Metadata carried under `$meta` in every dictionary document.

    Attributes:
        namespace_id: Plugin id or theme name the dictionary belongs to.
        locale: Locale identifier (e.g., "fr", "zh-tw").
        dict_version: Free-form version, commonly a millisecond timestamp.
        compatible_version: Version of the plugin/theme the dictionary targets.
        author: Dictionary author.
        description: Free-form description.
        source_hash: Fingerprint of the stylesheet a theme base dictionary was
            generated from. Only set on machine-generated theme bases.
    """

    namespace_id: str
    locale: str
    dict_version: str = ""
    compatible_version: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    source_hash: Optional[str] = None

    @classmethod
    def from_dict(
        cls,
        meta: Dict[str, Any],
        kind: DictionaryKind = DictionaryKind.PLUGINS,
    ) -> "DictionaryMeta":
        """Read a `$meta` document.

        Theme dictionaries identify their namespace with `themeName`, falling
        back to the legacy `id` field.

        Args:
            meta: The `$meta` mapping of a dictionary document.
            kind: Dictionary family, selects the namespace field.

        Returns:
            DictionaryMeta instance.
        """
        namespace_id = meta.get(kind.namespace_field)
        if not namespace_id and kind is DictionaryKind.THEMES:
            namespace_id = meta.get("id")

        author = meta.get("author")
        if not author and isinstance(meta.get("authors"), list) and meta["authors"]:
            author = str(meta["authors"][0])

        return cls(
            namespace_id=str(namespace_id or ""),
            locale=str(meta.get("locale") or ""),
            dict_version=str(meta.get("dictVersion") or ""),
            compatible_version=meta.get(kind.version_field),
            author=author,
            description=meta.get("description"),
            source_hash=meta.get("sourceHash"),
        )

    def to_dict(self, kind: DictionaryKind = DictionaryKind.PLUGINS) -> Dict[str, Any]:
        """Write the `$meta` document form (camelCase, optional fields omitted)."""
        data: Dict[str, Any] = {
            kind.namespace_field: self.namespace_id,
            "locale": self.locale,
            "dictVersion": self.dict_version,
        }
        if self.compatible_version is not None:
            data[kind.version_field] = self.compatible_version
        if self.author is not None:
            data["author"] = self.author
        if self.description is not None:
            data["description"] = self.description
        if self.source_hash is not None:
            data["sourceHash"] = self.source_hash
        return data


def get_meta(dictionary: Any) -> Dict[str, Any]:
    """Return the `$meta` mapping of a dictionary, or an empty dict."""
    if isinstance(dictionary, dict):
        meta = dictionary.get(META_KEY)
        if isinstance(meta, dict):
            return meta
    return {}


def entry_keys(dictionary: Dictionary) -> List[str]:
    """Return the translation keys of a dictionary (everything but `$meta`)."""
    return [key for key in dictionary if key != META_KEY]


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation error or warning.

    Attributes:
        key: Dictionary key the issue refers to (`$root`, `$meta.locale`, ...).
        message: Human readable description.
    """

    key: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "message": self.message}


@dataclass
class ValidationResult:
    """Outcome of validating (and possibly loading) a dictionary.

    Errors block loading; warnings do not.
    """

    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @classmethod
    def failure(cls, key: str, message: str) -> "ValidationResult":
        """Build an invalid result carrying a single error."""
        return cls(valid=False, errors=[ValidationIssue(key, message)])

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, omitting empty error/warning lists."""
        data: Dict[str, Any] = {"valid": self.valid}
        if self.errors:
            data["errors"] = [issue.to_dict() for issue in self.errors]
        if self.warnings:
            data["warnings"] = [issue.to_dict() for issue in self.warnings]
        return data


@dataclass
class RemoteDictionaryInfo:
    """One row of the remote catalog.

    Attributes:
        namespace_id: Plugin id or theme name.
        locale: Locale of the remote dictionary.
        dict_version: Remote dictionary version.
        download_url: Where to fetch the dictionary document.
        kind: Catalog section the row came from.
        progress: Translation completeness, 0-100.
    """

    namespace_id: str
    locale: str
    dict_version: str
    download_url: str
    kind: DictionaryKind = DictionaryKind.PLUGINS
    progress: Optional[int] = None
    author: Optional[str] = None
    description: Optional[str] = None
    file_size: Optional[int] = None

    @classmethod
    def from_entry(
        cls, entry: Dict[str, Any], kind: DictionaryKind
    ) -> "RemoteDictionaryInfo":
        """Build from a manifest entry.

        Theme rows may carry `pluginId` instead of `themeName`; either is
        accepted.

        Raises:
            ValueError: If the entry has no namespace, locale or URL.
        """
        namespace_id = entry.get(kind.namespace_field) or entry.get("pluginId") or entry.get("themeName")
        if not namespace_id or not entry.get("locale") or not entry.get("downloadUrl"):
            raise ValueError(f"Invalid manifest entry: {entry}")

        return cls(
            namespace_id=str(namespace_id),
            locale=str(entry["locale"]),
            dict_version=str(entry.get("dictVersion") or ""),
            download_url=str(entry["downloadUrl"]),
            kind=kind,
            progress=_to_progress(entry.get("progress")),
            author=entry.get("author"),
            description=entry.get("description"),
            file_size=entry.get("fileSize"),
        )


@dataclass
class Manifest:
    """Remote catalog document."""

    last_updated: str = ""
    contributors: List[str] = field(default_factory=list)
    plugins: List[RemoteDictionaryInfo] = field(default_factory=list)
    themes: List[RemoteDictionaryInfo] = field(default_factory=list)

    @property
    def entries(self) -> List[RemoteDictionaryInfo]:
        """Plugin and theme rows merged, plugins first."""
        return [*self.plugins, *self.themes]

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Manifest":
        """Parse a manifest document.

        Rows missing their namespace, locale or download URL are dropped.

        Args:
            payload: Parsed manifest JSON.

        Returns:
            Manifest instance.

        Raises:
            ValueError: If payload is not a mapping.
        """
        if not isinstance(payload, dict):
            raise ValueError("Manifest must be a JSON object")

        sections: Dict[DictionaryKind, List[RemoteDictionaryInfo]] = {}
        for kind in DictionaryKind:
            rows = []
            for entry in payload.get(kind.value) or []:
                if not isinstance(entry, dict):
                    continue
                try:
                    rows.append(RemoteDictionaryInfo.from_entry(entry, kind))
                except ValueError:
                    continue
            sections[kind] = rows

        return cls(
            last_updated=str(payload.get("lastUpdated") or ""),
            contributors=[str(c) for c in payload.get("contributors") or []],
            plugins=sections[DictionaryKind.PLUGINS],
            themes=sections[DictionaryKind.THEMES],
        )


@dataclass
class DictionaryFileInfo:
    """An installed dictionary file discovered by the store.

    Attributes:
        namespace_id: Directory name under the kind folder.
        locale: File stem.
        kind: Dictionary family.
        file_name: `<locale>.json`.
        file_path: Storage path of the file.
        dict_version: `$meta.dictVersion`, None if unreadable.
        compatible_version: `$meta.pluginVersion` / `$meta.themeVersion`.
        theme_id: Legacy theme `$meta.id`, if present.
    """

    namespace_id: str
    locale: str
    kind: DictionaryKind
    file_name: str
    file_path: str
    dict_version: Optional[str] = None
    compatible_version: Optional[str] = None
    theme_id: Optional[str] = None


def _to_progress(value: Any) -> Optional[int]:
    """Catalog progress as an int; None when missing or not numeric."""
    if isinstance(value, bool):
        return None
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError, OverflowError):
        return None
