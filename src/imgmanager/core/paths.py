"""Date-partitioned storage path derivation."""

import posixpath
from datetime import date, datetime
from typing import Callable, Optional

from .models import DEFAULT_THUMBNAIL_ROOT, ImageMetadata

CAPTURE_TIME_FORMAT = "%Y:%m:%d %H:%M:%S"


def parse_capture_time(text: Optional[str]) -> Optional[datetime]:
    """Parse ``YYYY:MM:DD HH:MM:SS``; anything else yields None.

    EXIF strings are NUL padded, so surrounding NULs and whitespace are ignored.
    """
    if not text:
        return None
    text = text.strip().strip("\x00").strip()
    try:
        return datetime.strptime(text, CAPTURE_TIME_FORMAT)
    except ValueError:
        return None


def first_metadata_time(metadata: Optional[ImageMetadata]) -> Optional[datetime]:
    """Parse the first non-empty metadata timestamp.

    Only the highest-priority populated field is considered; if it does not
    parse, lower-priority fields are not tried.
    """
    if metadata is None:
        return None
    for candidate in metadata.candidates():
        if candidate:
            return parse_capture_time(candidate)
    return None


def resolve_capture_time(
    metadata: Optional[ImageMetadata],
    date_hint: Optional[str],
    now: Callable[[], datetime] = datetime.now,
) -> datetime:
    """Pick the timestamp an upload is filed under.

    Precedence: metadata, then the caller's hint, then ``now()``.
    """
    resolved = first_metadata_time(metadata)
    if resolved is None:
        resolved = parse_capture_time(date_hint)
    if resolved is None:
        resolved = now()
    return resolved


def date_directory(day: date) -> str:
    """Directory holding the objects filed under ``day``."""
    return day.strftime("%Y/%m/%d")


def build_storage_path(when: date, name: str) -> str:
    """
    Build the storage path ``YYYY/MM/DD/<name>``.

    Args:
        when: Resolved capture (or fallback) time
        name: Object name supplied by the caller

    Returns:
        Normalised ``/``-separated storage path
    """
    return posixpath.normpath(posixpath.join(date_directory(when), name.lstrip("/")))


def thumbnail_path(path: str, root: str = DEFAULT_THUMBNAIL_ROOT) -> str:
    """Thumbnail location mirroring ``path`` under ``root``.

    The original file name, extension included, is kept as is.
    """
    return posixpath.normpath(posixpath.join(root, path.lstrip("/")))
