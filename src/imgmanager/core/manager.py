"""Image manager facade: synchronous and fire-and-forget operations."""

import io
from datetime import date, datetime, timedelta
from typing import BinaryIO, Callable, Iterable, Optional, Union

from ..drives.unimplemented import UnimplementedDrive
from .exceptions import ConfigurationError
from .logging_config import get_logger
from .metadata import PillowMetadataExtractor
from .models import (
    DeleteAction,
    DriveEntry,
    GenerateThumbnailAction,
    Image,
    ImageMetadata,
    ManagerConfig,
    UploadAction,
)
from .paths import build_storage_path, date_directory, resolve_capture_time, thumbnail_path
from .protocols import LoggerProtocol, MetadataExtractor, StorageDrive
from .thumbnails import ThumbnailGenerator
from .workers import WorkerPool

RangeVisitor = Callable[[str, int], bool]


class ImageManager:
    """
    Stores images in a storage drive, filed by capture date, and maintains
    their thumbnails.

    Persistence and thumbnail work can be handed to an internal worker pool
    (the ``*_async`` methods and ``upload_img``); those calls return as soon
    as the work is queued and never report failures, which are only logged.
    Reads run inline on the calling thread.

    Example:
        with ImageManager(drive=LocalDrive("/srv/photos")) as manager:
            path = manager.upload_img(open("IMG_0001.jpg", "rb"), "IMG_0001.jpg")
    """

    def __init__(
        self,
        config: Optional[ManagerConfig] = None,
        drive: Optional[StorageDrive] = None,
        metadata_extractor: Optional[MetadataExtractor] = None,
        logger: Optional[LoggerProtocol] = None,
        autostart: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config or ManagerConfig()
        self.logger = logger or get_logger("imgmanager")
        self._drive: StorageDrive = drive if drive is not None else UnimplementedDrive()
        self._metadata_extractor = metadata_extractor or PillowMetadataExtractor()
        self._clock = clock
        self.thumbnailer = ThumbnailGenerator(self.config, self.logger)
        self.pool = WorkerPool(
            self,
            worker_count=self.config.worker_count,
            poll_interval=self.config.poll_interval,
            logger=self.logger,
        )
        if autostart:
            self.start()

    # Lifecycle

    def start(self) -> None:
        self.pool.start()

    def stop(self, drain: bool = True, timeout: Optional[float] = None) -> None:
        """Stop the workers, first waiting for queued work when ``drain``."""
        if drain and self.pool.running:
            self.pool.join()
        self.pool.stop(timeout)

    def wait(self) -> None:
        """Block until all queued actions have been processed."""
        self.pool.join()

    def __enter__(self) -> "ImageManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # Drive wiring

    @property
    def drive(self) -> StorageDrive:
        return self._drive

    def set_drive(self, drive: StorageDrive) -> None:
        self._drive = drive

    # Work performed by the pool's workers

    def upload(self, path: str, content: bytes) -> None:
        self._drive.upload(path, io.BytesIO(content), len(content))

    def delete(self, path: str) -> None:
        self._drive.delete(path)

    def generate_thumbnail(self, path: str, content: bytes) -> None:
        """Render and store the thumbnail of ``content`` synchronously."""
        self.thumbnailer.generate(self._drive, path, content)

    # Uploads

    def upload_img_async(self, path: str, content: bytes) -> None:
        self.pool.enqueue(UploadAction(path=path, content=bytes(content)))

    def generate_thumbnail_async(self, path: str, content: bytes) -> None:
        self.pool.enqueue(GenerateThumbnailAction(path=path, content=bytes(content)))

    def upload_img(
        self,
        content: Union[bytes, BinaryIO],
        name: str,
        date_hint: Optional[str] = "",
    ) -> str:
        """
        File an image under its capture date and queue the upload.

        The date comes from the image metadata, else ``date_hint``
        (``YYYY:MM:DD HH:MM:SS``), else the current time. An existing
        object at the derived path is overwritten.

        Args:
            content: Image bytes or a binary stream read to the end
            name: Object name, kept as the last path segment
            date_hint: Fallback capture time supplied by the caller

        Returns:
            The storage path the upload was queued for
        """
        if not name:
            raise ValueError("image name must not be empty")
        data = content if isinstance(content, bytes) else content.read()

        metadata = self._read_metadata(data, name)
        when = resolve_capture_time(metadata, date_hint, self._clock)
        path = build_storage_path(when, name)

        self.upload_img_async(path, data)
        self.logger.info(f"Queued upload of {name} to {path} ({len(data)} bytes)")
        return path

    def _read_metadata(self, data: bytes, name: str) -> Optional[ImageMetadata]:
        try:
            metadata = self._metadata_extractor.extract(data)
        except Exception as exc:  # noqa: BLE001
            self.logger.warning(f"Error getting image metadata for {name}: {exc}")
            return None
        self.logger.debug(f"Image metadata for {name}: {metadata!r}")
        return metadata

    # Retrieval

    def get_img(self, path: str) -> Image:
        content, size = self._drive.download(path)
        return Image(path=path, content=content, size=size)

    def get_thumbnail(self, path: str) -> Image:
        """
        Return the thumbnail of the image at ``path``, generating it inline
        when it does not exist yet.

        Concurrent first calls for the same path may each generate it; the
        results are identical so the last write wins harmlessly.
        """
        thumb_path = thumbnail_path(path, self.config.thumbnail_root)
        if not self._drive.exists(thumb_path):
            self.logger.debug(f"No thumbnail for {path}, generating")
            stream, _ = self._drive.download(path)
            try:
                content = stream.read()
            finally:
                stream.close()
            self.thumbnailer.generate(self._drive, path, content)

        stream, size = self._drive.download(thumb_path)
        return Image(path=thumb_path, content=stream, size=size)

    # Deletion

    def delete_single_img(self, path: str) -> None:
        if path:
            self._drive.delete(path)

    def delete_single_img_async(self, path: str) -> None:
        if path:
            self.pool.enqueue(DeleteAction(path=path))

    def delete_img(self, paths: Iterable[str]) -> None:
        for path in paths:
            self.delete_single_img_async(path)

    # Enumeration

    def range_by_date(
        self,
        start: Union[date, datetime],
        visit: RangeVisitor,
        end: Optional[Union[date, datetime]] = None,
    ) -> None:
        """
        Walk the date-partitioned directories one day at a time from
        ``start``, calling ``visit(path, size)`` for every object until it
        returns False.

        Without ``end`` the walk has no bound other than ``visit``'s return
        value; that mode must be allowed by ``config.unbounded_range``.
        """
        day = start.date() if isinstance(start, datetime) else start
        last = end.date() if isinstance(end, datetime) else end
        if last is None and not self.config.unbounded_range:
            raise ConfigurationError(
                "range_by_date needs an end date when unbounded_range is disabled"
            )

        state = {"continue": True}
        while state["continue"]:
            if last is not None and day > last:
                return
            directory = date_directory(day)

            def visit_entry(entry: DriveEntry, directory: str = directory) -> bool:
                state["continue"] = bool(visit(f"{directory}/{entry.name}", entry.size))
                return state["continue"]

            self._drive.enumerate(directory, visit_entry)
            day += timedelta(days=1)
