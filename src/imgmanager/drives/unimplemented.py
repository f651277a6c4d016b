"""Placeholder drive used until a real one is injected."""

from typing import BinaryIO, Tuple

from ..core.exceptions import StorageIOError
from ..core.protocols import EntryVisitor


class UnimplementedDrive:
    """Every operation fails until ``ImageManager.set_drive`` is called."""

    def _fail(self, operation: str) -> StorageIOError:
        return StorageIOError(f"storage drive not configured ({operation})")

    def upload(self, path: str, reader: BinaryIO, size: int) -> None:
        raise self._fail("upload")

    def download(self, path: str) -> Tuple[BinaryIO, int]:
        raise self._fail("download")

    def delete(self, path: str) -> None:
        raise self._fail("delete")

    def exists(self, path: str) -> bool:
        raise self._fail("exists")

    def enumerate(self, directory: str, visit: EntryVisitor) -> None:
        raise self._fail("enumerate")
