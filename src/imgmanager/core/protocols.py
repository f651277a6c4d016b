"""Protocol definitions for dependency injection and testability."""

from typing import Any, BinaryIO, Callable, Protocol, Tuple

from .models import DriveEntry, ImageMetadata

EntryVisitor = Callable[[DriveEntry], bool]


class StorageDrive(Protocol):
    """Byte-level object store the manager reads and writes through.

    Paths are ``/``-separated and relative to the drive's own root.
    Failures are raised as exceptions.
    """

    def upload(self, path: str, reader: BinaryIO, size: int) -> None:
        """Store ``size`` bytes read from ``reader`` at ``path``, overwriting."""
        ...

    def download(self, path: str) -> Tuple[BinaryIO, int]:
        """Open the object at ``path``; the caller closes the stream."""
        ...

    def delete(self, path: str) -> None:
        """Remove the object at ``path``."""
        ...

    def exists(self, path: str) -> bool:
        """Check if an object exists at ``path``."""
        ...

    def enumerate(self, directory: str, visit: EntryVisitor) -> None:
        """Visit the objects directly under ``directory``.

        Stops early once ``visit`` returns False.
        """
        ...


class MetadataExtractor(Protocol):
    """Protocol for capture-time extraction."""

    def extract(self, content: bytes) -> ImageMetadata:
        """Extract capture-time metadata from raw image bytes."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        ...


class ActionHandler(Protocol):
    """Performs the work behind each queued action kind."""

    def upload(self, path: str, content: bytes) -> None:
        ...

    def generate_thumbnail(self, path: str, content: bytes) -> None:
        ...

    def delete(self, path: str) -> None:
        ...
