"""Fake implementations for testing purposes."""

import io
import threading
import time
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, List, Optional, Tuple

from PIL import Image

from ..core.models import DriveEntry, ImageMetadata
from ..core.protocols import EntryVisitor


@dataclass
class StoredObject:
    """Fake stored object for testing."""

    path: str
    body: bytes
    size: int = 0

    def __post_init__(self):
        if self.size == 0:
            self.size = len(self.body)


class FakeDrive:
    """In-memory storage drive for testing.

    Records every operation as ``(operation, path)`` in ``operations`` and
    can be told to fail or slow down, per operation or globally.
    """

    def __init__(self):
        self.objects: Dict[str, StoredObject] = {}
        self.operations: List[Tuple[str, str]] = []
        self.should_fail = False
        self.failing_operations: set = set()
        self.failure_message = "Simulated drive failure"
        self.delay_seconds = 0.0
        self.opened_streams: List[io.BytesIO] = []
        self._lock = threading.Lock()

    def set_failure_mode(
        self,
        should_fail: bool,
        message: str = "Simulated failure",
        operations: Optional[List[str]] = None,
    ) -> None:
        """Configure failure mode for testing error handling."""
        self.should_fail = should_fail and not operations
        self.failing_operations = set(operations or []) if should_fail else set()
        self.failure_message = message

    def set_delay(self, seconds: float) -> None:
        """Set artificial delay for every operation."""
        self.delay_seconds = seconds

    def add_object(self, path: str, body: bytes) -> None:
        with self._lock:
            self.objects[path] = StoredObject(path=path, body=body)

    def get_object(self, path: str) -> Optional[StoredObject]:
        with self._lock:
            return self.objects.get(path)

    def count(self, operation: str, path: Optional[str] = None) -> int:
        with self._lock:
            return sum(
                1
                for op, op_path in self.operations
                if op == operation and (path is None or op_path == path)
            )

    def _begin(self, operation: str, path: str) -> None:
        with self._lock:
            self.operations.append((operation, path))
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)
        if self.should_fail or operation in self.failing_operations:
            raise IOError(self.failure_message)

    def upload(self, path: str, reader: BinaryIO, size: int) -> None:
        self._begin("upload", path)
        body = reader.read()
        if len(body) != size:
            raise IOError(f"short upload for {path}: {len(body)} != {size}")
        self.add_object(path, body)

    def download(self, path: str) -> Tuple[BinaryIO, int]:
        self._begin("download", path)
        obj = self.get_object(path)
        if obj is None:
            raise FileNotFoundError(f"Object {path} not found")
        stream = io.BytesIO(obj.body)
        with self._lock:
            self.opened_streams.append(stream)
        return stream, obj.size

    def delete(self, path: str) -> None:
        self._begin("delete", path)
        with self._lock:
            self.objects.pop(path, None)

    def exists(self, path: str) -> bool:
        self._begin("exists", path)
        return self.get_object(path) is not None

    def enumerate(self, directory: str, visit: EntryVisitor) -> None:
        self._begin("enumerate", directory)
        prefix = directory.rstrip("/") + "/"
        with self._lock:
            entries = [
                DriveEntry(name=p[len(prefix) :], size=obj.size)
                for p, obj in sorted(self.objects.items())
                if p.startswith(prefix) and "/" not in p[len(prefix) :]
            ]
        for entry in entries:
            if not visit(entry):
                return


class FakeMetadataExtractor:
    """Returns canned metadata, or raises ``error`` when set."""

    def __init__(
        self,
        metadata: Optional[ImageMetadata] = None,
        error: Optional[Exception] = None,
    ):
        self.metadata = metadata or ImageMetadata()
        self.error = error
        self.calls = 0

    def extract(self, content: bytes) -> ImageMetadata:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.metadata


class FakeLogger:
    """Fake logger for testing, safe to share between worker threads."""

    def __init__(self, name: str = "test_logger"):
        self.name = name
        self.logs: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        log_entry = {
            "level": level,
            "message": message,
            "timestamp": time.time(),
            **kwargs,
        }
        with self._lock:
            self.logs.append(log_entry)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log("ERROR", message, **kwargs)

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get logged messages, optionally filtered by level."""
        with self._lock:
            if level:
                return [log for log in self.logs if log["level"] == level]
            return list(self.logs)

    def clear_logs(self) -> None:
        """Clear all logged messages."""
        with self._lock:
            self.logs.clear()


def create_test_image(
    width: int = 100,
    height: int = 100,
    format: str = "JPEG",
    mode: str = "RGB",
    exif_datetime: Optional[str] = None,
) -> bytes:
    """Create a test image in memory.

    ``exif_datetime`` is written to the IFD0 DateTime tag.
    """
    color: Any = "red" if mode in ("RGB", "RGBA") else 128
    image = Image.new(mode, (width, height), color=color)

    # Blue blocks so the encoder has some structure to work with
    if mode in ("RGB", "RGBA"):
        blue = (0, 0, 255) if mode == "RGB" else (0, 0, 255, 255)
        for x in range(0, width, 20):
            for y in range(0, height, 20):
                if (x + y) % 40 == 0:
                    image.paste(blue, (x, y, min(x + 10, width), min(y + 10, height)))

    save_kwargs: Dict[str, Any] = {}
    if format == "JPEG":
        save_kwargs["quality"] = 95
    if exif_datetime is not None:
        exif = Image.Exif()
        exif[0x0132] = exif_datetime
        save_kwargs["exif"] = exif

    img_bytes = io.BytesIO()
    image.save(img_bytes, format=format, **save_kwargs)
    return img_bytes.getvalue()
