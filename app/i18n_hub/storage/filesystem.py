"""Local filesystem Storage implementation."""

from pathlib import Path
from typing import Union

from i18n_hub.core.errors import StorageError
from i18n_hub.core.logging import get_module_logger
from i18n_hub.storage.base import ListedEntries, join_path

logger = get_module_logger()


class FileSystemStorage:
    """Storage rooted at a local directory.

    Every path is resolved under the root; paths escaping it raise
    StorageError.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            logger.error("storage_path_outside_root", path=path, root=str(self.root))
            raise StorageError(f"Path escapes storage root: {path}")
        return target

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def read(self, path: str) -> str:
        return self._resolve(path).read_text(encoding="utf-8")

    def write(self, path: str, data: str) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(data, encoding="utf-8")

    def remove(self, path: str) -> None:
        self._resolve(path).unlink()

    def list(self, path: str) -> ListedEntries:
        target = self._resolve(path)
        entries = ListedEntries()
        for child in sorted(target.iterdir()):
            child_path = join_path(path, child.name)
            if child.is_dir():
                entries.folders.append(child_path)
            else:
                entries.files.append(child_path)
        return entries

    def mkdir(self, path: str) -> None:
        # Raises FileExistsError when the folder is already there
        self._resolve(path).mkdir(parents=True)
