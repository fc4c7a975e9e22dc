"""In-memory Storage implementation, used by tests and embedders."""

from threading import Lock
from typing import Dict, Set

from i18n_hub.storage.base import ListedEntries, join_path


class MemoryStorage:
    """Dict-backed Storage.

    Folders are tracked explicitly; writing a file creates its parents.
    """

    def __init__(self) -> None:
        self.files: Dict[str, str] = {}
        self.folders: Set[str] = set()
        self._lock = Lock()

    def _add_parents(self, path: str) -> None:
        parts = path.split("/")[:-1]
        for i in range(1, len(parts) + 1):
            self.folders.add("/".join(parts[:i]))

    def exists(self, path: str) -> bool:
        path = join_path(path)
        with self._lock:
            return path in self.files or path in self.folders

    def read(self, path: str) -> str:
        path = join_path(path)
        with self._lock:
            if path not in self.files:
                raise FileNotFoundError(path)
            return self.files[path]

    def write(self, path: str, data: str) -> None:
        path = join_path(path)
        with self._lock:
            self._add_parents(path)
            self.files[path] = data

    def remove(self, path: str) -> None:
        path = join_path(path)
        with self._lock:
            if path not in self.files:
                raise FileNotFoundError(path)
            del self.files[path]

    def list(self, path: str) -> ListedEntries:
        path = join_path(path)
        with self._lock:
            if path not in self.folders:
                raise FileNotFoundError(path)
            prefix = f"{path}/"
            entries = ListedEntries()
            for file_path in sorted(self.files):
                if file_path.startswith(prefix) and "/" not in file_path[len(prefix):]:
                    entries.files.append(file_path)
            for folder in sorted(self.folders):
                if folder.startswith(prefix) and "/" not in folder[len(prefix):]:
                    entries.folders.append(folder)
            return entries

    def mkdir(self, path: str) -> None:
        path = join_path(path)
        with self._lock:
            if path in self.folders:
                raise FileExistsError(path)
            self._add_parents(path)
            self.folders.add(path)
