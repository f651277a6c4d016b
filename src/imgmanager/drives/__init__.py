"""Storage drive implementations."""

from .local import LocalDrive
from .s3 import S3Drive
from .unimplemented import UnimplementedDrive

__all__ = [
    "LocalDrive",
    "S3Drive",
    "UnimplementedDrive",
]
