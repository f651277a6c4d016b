"""Capture-time metadata extraction with Pillow."""

import io
from typing import Any, Optional

from PIL import Image
from PIL.ExifTags import IFD, Base

from .exceptions import MetadataError, with_error_handling
from .models import ImageMetadata


def _as_text(value: Any) -> Optional[str]:
    """Normalise an EXIF value to a stripped string, or None when empty."""
    if value is None:
        return None
    if isinstance(value, bytes):
        try:
            value = value.decode("utf-8")
        except UnicodeDecodeError:
            return None
    text = str(value).strip().strip("\x00").strip()
    return text or None


class PillowMetadataExtractor:
    """Reads capture-time fields out of EXIF and image text chunks.

    ``datetime`` is IFD0 DateTime, ``date_time_original`` the Exif
    DateTimeOriginal, ``create_date`` the Exif DateTimeDigitized and
    ``modify_date`` a ``ModifyDate`` text chunk (PNG tEXt/iTXt).
    """

    @with_error_handling(MetadataError)
    def extract(self, content: bytes) -> ImageMetadata:
        if not content:
            raise MetadataError("no image data")

        with Image.open(io.BytesIO(content)) as image:
            exif = image.getexif()
            exif_ifd = exif.get_ifd(IFD.Exif)
            info = image.info

            return ImageMetadata(
                datetime=_as_text(exif.get(Base.DateTime)),
                date_time_original=_as_text(exif_ifd.get(Base.DateTimeOriginal)),
                create_date=_as_text(exif_ifd.get(Base.DateTimeDigitized)),
                modify_date=_as_text(info.get("ModifyDate")),
            )
