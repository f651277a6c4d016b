"""Thumbnail generation: decode, bounded resize, re-encode, upload."""

import io
import posixpath
from typing import Dict, Optional

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, StorageIOError, UnsupportedFormatError
from .logging_config import get_logger
from .models import ManagerConfig
from .paths import thumbnail_path
from .protocols import LoggerProtocol, StorageDrive

# Extension -> the only Pillow decoder tried for it.
DECODERS: Dict[str, str] = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
}

THUMBNAIL_FORMAT = "JPEG"


def decoder_for(path: str) -> str:
    """Return the Pillow format name for ``path``'s extension."""
    ext = posixpath.splitext(path)[1].lower()
    try:
        return DECODERS[ext]
    except KeyError:
        raise UnsupportedFormatError(
            f"unsupported image extension {ext or '(none)'!r} for {path}"
        ) from None


def _flatten(img: Image.Image) -> Image.Image:
    """Convert to RGB, compositing transparency onto white."""
    if img.mode == "P":
        img = img.convert("RGBA")
    if img.mode in ("RGBA", "LA"):
        if img.mode == "LA":
            img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


class ThumbnailGenerator:
    """
    Generates bounded JPEG thumbnails and stores them beside the originals.

    Output depends only on the input bytes and the configuration, so
    regenerating the same thumbnail concurrently is a harmless overwrite.
    """

    def __init__(
        self,
        config: Optional[ManagerConfig] = None,
        logger: Optional[LoggerProtocol] = None,
    ):
        self.config = config or ManagerConfig()
        self.logger = logger or get_logger("imgmanager.thumbnails")

    @property
    def max_size(self):
        return (self.config.thumbnail_max_width, self.config.thumbnail_max_height)

    def decode(self, path: str, content: bytes) -> Image.Image:
        """
        Decode ``content`` with the decoder selected by ``path``'s extension.

        Raises:
            UnsupportedFormatError: extension is not in the allow-list
            DecodeError: the bytes are not a valid image of that format
        """
        format_name = decoder_for(path)
        try:
            img = Image.open(io.BytesIO(content), formats=[format_name])
            img.load()
        except (
            UnidentifiedImageError,
            OSError,
            SyntaxError,
            ValueError,
            Image.DecompressionBombError,
        ) as exc:
            raise DecodeError(f"cannot decode {path} as {format_name}: {exc}") from exc
        return img

    def render(self, path: str, content: bytes) -> bytes:
        """Produce the encoded thumbnail bytes without touching storage."""
        img = self.decode(path, content)
        original_size = img.size

        # In place; keeps aspect ratio and never upscales
        img.thumbnail(self.max_size, Image.Resampling.BILINEAR)
        img = _flatten(img)

        output = io.BytesIO()
        img.save(output, format=THUMBNAIL_FORMAT, quality=self.config.thumbnail_quality)
        self.logger.debug(
            f"Rendered thumbnail for {path}: "
            f"{original_size[0]}x{original_size[1]} -> {img.size[0]}x{img.size[1]}"
        )
        return output.getvalue()

    def generate(self, drive: StorageDrive, path: str, content: bytes) -> str:
        """
        Render the thumbnail of ``content`` and upload it.

        Args:
            drive: Storage drive receiving the thumbnail
            path: Storage path of the original image
            content: Original image bytes

        Returns:
            Storage path of the uploaded thumbnail

        Raises:
            UnsupportedFormatError: before any decode or upload
            DecodeError: the bytes do not parse
            StorageIOError: the upload failed
        """
        data = self.render(path, content)
        thumb_path = thumbnail_path(path, self.config.thumbnail_root)
        try:
            drive.upload(thumb_path, io.BytesIO(data), len(data))
        except StorageIOError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise StorageIOError(f"uploading thumbnail {thumb_path}: {exc}") from exc
        self.logger.info(f"Stored thumbnail {thumb_path} ({len(data)} bytes)")
        return thumb_path
