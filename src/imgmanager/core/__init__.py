"""Core components of the image manager."""

from .logging_config import get_logger, set_package_level, setup_logger
from .exceptions import (
    ImgManagerError,
    UnsupportedFormatError,
    DecodeError,
    StorageIOError,
    MetadataError,
    ConfigurationError,
    with_error_handling,
)
from .models import (
    Action,
    DeleteAction,
    DriveEntry,
    GenerateThumbnailAction,
    Image,
    ImageMetadata,
    ManagerConfig,
    UploadAction,
)
from .paths import (
    build_storage_path,
    date_directory,
    parse_capture_time,
    resolve_capture_time,
    thumbnail_path,
)
from .metadata import PillowMetadataExtractor
from .thumbnails import ThumbnailGenerator
from .workers import WorkerPool
from .manager import ImageManager

__all__ = [
    "ImageManager",
    "WorkerPool",
    "ThumbnailGenerator",
    "PillowMetadataExtractor",
    "ManagerConfig",
    "Image",
    "ImageMetadata",
    "DriveEntry",
    "Action",
    "UploadAction",
    "GenerateThumbnailAction",
    "DeleteAction",
    "build_storage_path",
    "date_directory",
    "parse_capture_time",
    "resolve_capture_time",
    "thumbnail_path",
    "setup_logger",
    "get_logger",
    "set_package_level",
    "ImgManagerError",
    "UnsupportedFormatError",
    "DecodeError",
    "StorageIOError",
    "MetadataError",
    "ConfigurationError",
    "with_error_handling",
]
