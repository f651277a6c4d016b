"""Testing utilities and fakes for the image manager."""

from .fakes import (
    FakeDrive,
    FakeLogger,
    FakeMetadataExtractor,
    StoredObject,
    create_test_image,
)

__all__ = [
    "FakeDrive",
    "FakeLogger",
    "FakeMetadataExtractor",
    "StoredObject",
    "create_test_image",
]
