"""Storage capability and its implementations."""

from i18n_hub.storage.base import (
    ListedEntries,
    Storage,
    base_name,
    is_safe_segment,
    join_path,
)
from i18n_hub.storage.filesystem import FileSystemStorage
from i18n_hub.storage.memory import MemoryStorage

__all__ = [
    "FileSystemStorage",
    "ListedEntries",
    "MemoryStorage",
    "Storage",
    "base_name",
    "is_safe_segment",
    "join_path",
]
