"""Local filesystem storage drive."""

import os
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, List, Tuple, Union

from ..core.exceptions import StorageIOError, with_error_handling
from ..core.logging_config import get_logger
from ..core.models import DriveEntry
from ..core.protocols import EntryVisitor


class LocalDrive:
    """Stores objects as files below ``root``.

    Uploads write to a temporary sibling and rename it into place, so a
    concurrent reader sees either the old or the new file.
    """

    def __init__(self, root: Union[str, Path] = "."):
        self.root = Path(root).resolve()
        self.logger = get_logger("imgmanager.drives.local")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise StorageIOError(f"path escapes drive root: {path}")
        return target

    @with_error_handling(StorageIOError)
    def upload(self, path: str, reader: BinaryIO, size: int) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            with open(tmp, "wb") as fh:
                shutil.copyfileobj(reader, fh)
            os.replace(tmp, target)
        finally:
            if tmp.exists():
                tmp.unlink()
        self.logger.debug(f"Wrote {path} ({size} bytes)")

    @with_error_handling(StorageIOError)
    def download(self, path: str) -> Tuple[BinaryIO, int]:
        target = self._resolve(path)
        fh = open(target, "rb")
        return fh, os.fstat(fh.fileno()).st_size

    @with_error_handling(StorageIOError)
    def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            target.unlink()
        except FileNotFoundError:
            return

    @with_error_handling(StorageIOError)
    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    @with_error_handling(StorageIOError)
    def list_directory(self, directory: str) -> List[DriveEntry]:
        """Files directly under ``directory``, sorted by name."""
        target = self._resolve(directory)
        if not target.is_dir():
            return []
        entries = []
        with os.scandir(target) as it:
            for entry in it:
                if not entry.is_file() or _is_partial(entry.name):
                    continue
                entries.append(DriveEntry(name=entry.name, size=entry.stat().st_size))
        return sorted(entries, key=lambda e: e.name)

    def enumerate(self, directory: str, visit: EntryVisitor) -> None:
        for entry in self.list_directory(directory):
            if not visit(entry):
                return


def _is_partial(name: str) -> bool:
    return name.startswith(".") and name.endswith(".tmp")
