"""Storage capability consumed by the dictionary store.

The host owns the filesystem; the store only sees this narrow interface.
Paths are '/'-separated and relative to the storage root.
"""

from dataclasses import dataclass, field
from typing import List, Protocol, runtime_checkable


@dataclass
class ListedEntries:
    """Result of listing a folder.

    Attributes:
        files: Paths of files directly under the folder.
        folders: Paths of sub-folders directly under the folder.
    """

    files: List[str] = field(default_factory=list)
    folders: List[str] = field(default_factory=list)


@runtime_checkable
class Storage(Protocol):
    """Hierarchical file store."""

    def exists(self, path: str) -> bool: ...

    def read(self, path: str) -> str: ...

    def write(self, path: str, data: str) -> None: ...

    def remove(self, path: str) -> None: ...

    def list(self, path: str) -> ListedEntries: ...

    def mkdir(self, path: str) -> None:
        """Create a folder.

        Raises:
            FileExistsError: If the folder already exists.
        """
        ...


def join_path(*parts: str) -> str:
    """Join storage path segments, dropping empty ones."""
    segments = []
    for part in parts:
        segments.extend(s for s in str(part).split("/") if s)
    return "/".join(segments)


def base_name(path: str) -> str:
    """Last segment of a storage path."""
    return path.rstrip("/").rsplit("/", 1)[-1]


def is_safe_segment(name: object) -> bool:
    """Check that a value can be used as a single path segment.

    Rejects non-strings, empty values, separators and `..`.
    """
    if not isinstance(name, str) or not name.strip():
        return False
    if "/" in name or "\\" in name:
        return False
    return ".." not in name
