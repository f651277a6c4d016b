"""Date-partitioned image storage with asynchronously maintained thumbnails."""

from .core import ImageManager, ManagerConfig
from .drives import LocalDrive, S3Drive

__version__ = "0.1.0"

__all__ = ["ImageManager", "ManagerConfig", "LocalDrive", "S3Drive", "__version__"]
