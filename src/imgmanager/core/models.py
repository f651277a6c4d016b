"""Shared data models for the image manager."""

import os
from dataclasses import dataclass
from typing import Any, BinaryIO, List, Optional, Union

from pydantic import BaseModel, ValidationInfo, field_validator

from .exceptions import ConfigurationError

DEFAULT_WORKER_COUNT = 5
DEFAULT_THUMBNAIL_MAX_WIDTH = 500
DEFAULT_THUMBNAIL_MAX_HEIGHT = 500
DEFAULT_THUMBNAIL_QUALITY = 75
DEFAULT_THUMBNAIL_ROOT = ".thumbnail"
MAX_THUMBNAIL_QUALITY = 95

_ENV_FIELDS = {
    "IMGMANAGER_WORKER_COUNT": "worker_count",
    "IMGMANAGER_THUMBNAIL_MAX_WIDTH": "thumbnail_max_width",
    "IMGMANAGER_THUMBNAIL_MAX_HEIGHT": "thumbnail_max_height",
    "IMGMANAGER_THUMBNAIL_QUALITY": "thumbnail_quality",
}


class ManagerConfig(BaseModel):
    """Configuration for the image manager.

    Non-positive numeric values fall back to their defaults instead of
    failing validation.
    """

    worker_count: int = DEFAULT_WORKER_COUNT
    thumbnail_max_width: int = DEFAULT_THUMBNAIL_MAX_WIDTH
    thumbnail_max_height: int = DEFAULT_THUMBNAIL_MAX_HEIGHT
    thumbnail_quality: int = DEFAULT_THUMBNAIL_QUALITY
    poll_interval: float = 0.1
    thumbnail_root: str = DEFAULT_THUMBNAIL_ROOT
    unbounded_range: bool = True

    @field_validator(
        "worker_count",
        "thumbnail_max_width",
        "thumbnail_max_height",
        "thumbnail_quality",
        "poll_interval",
    )
    @classmethod
    def _default_non_positive(cls, value: Union[int, float], info: ValidationInfo) -> Any:
        # Runs after coercion so string inputs such as "0" are caught too
        if value <= 0:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("thumbnail_quality")
    @classmethod
    def _clamp_quality(cls, value: int) -> int:
        return min(value, MAX_THUMBNAIL_QUALITY)

    @field_validator("thumbnail_root")
    @classmethod
    def _strip_root(cls, value: str) -> str:
        value = value.strip("/")
        return value or DEFAULT_THUMBNAIL_ROOT

    @classmethod
    def from_env(cls, **overrides: Any) -> "ManagerConfig":
        """Build a config from ``IMGMANAGER_*`` environment variables."""
        values = {}
        for env_name, field_name in _ENV_FIELDS.items():
            raw = os.getenv(env_name)
            if raw is None or raw == "":
                continue
            try:
                values[field_name] = int(raw)
            except ValueError:
                raise ConfigurationError(
                    f"{env_name} must be an integer, got {raw!r}"
                ) from None
        values.update(overrides)
        return cls(**values)


class ImageMetadata(BaseModel):
    """Capture-time fields recovered from image metadata.

    All values use the EXIF pattern ``YYYY:MM:DD HH:MM:SS``.
    """

    datetime: Optional[str] = None
    date_time_original: Optional[str] = None
    create_date: Optional[str] = None
    modify_date: Optional[str] = None

    def candidates(self) -> List[Optional[str]]:
        """Timestamp fields in priority order."""
        return [
            self.datetime,
            self.date_time_original,
            self.create_date,
            self.modify_date,
        ]


@dataclass(frozen=True)
class DriveEntry:
    """An object found while enumerating a drive directory."""

    name: str
    size: int


@dataclass(frozen=True)
class UploadAction:
    """Store ``content`` at ``path``."""

    path: str
    content: bytes


@dataclass(frozen=True)
class GenerateThumbnailAction:
    """Build and store the thumbnail of ``content``, an image stored at ``path``."""

    path: str
    content: bytes


@dataclass(frozen=True)
class DeleteAction:
    """Remove the object at ``path``."""

    path: str


Action = Union[UploadAction, GenerateThumbnailAction, DeleteAction]


class Image:
    """Handle to a stored image returned to callers.

    The caller owns ``content`` and must close it; the handle is a context
    manager for that purpose.
    """

    def __init__(self, path: str, content: BinaryIO, size: int):
        self.path = path
        self.content = content
        self.size = size

    def read(self) -> bytes:
        return self.content.read()

    def close(self) -> None:
        self.content.close()

    def __enter__(self) -> "Image":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Image(path={self.path!r}, size={self.size})"
