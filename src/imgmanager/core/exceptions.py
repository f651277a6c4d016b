"""Custom exceptions and error wrapping for the image manager."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Type, TypeVar

from .logging_config import get_logger


class ImgManagerError(Exception):
    """Base exception for all image manager errors."""


class UnsupportedFormatError(ImgManagerError):
    """The file extension is not in the thumbnail decode allow-list."""


class DecodeError(ImgManagerError):
    """The bytes could not be parsed as the format their extension claims."""


class StorageIOError(ImgManagerError, OSError):
    """A storage drive operation failed."""


class MetadataError(ImgManagerError):
    """Capture-time metadata could not be read from the image bytes."""


class ConfigurationError(ImgManagerError):
    """Error raised for invalid configuration or lifecycle misuse."""


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(error_cls: Type[ImgManagerError]) -> Callable[[F], F]:
    """Wrap a function so foreign exceptions surface as ``error_cls``.

    Errors that are already ``ImgManagerError`` pass through untouched.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:  # type: ignore[override]
            try:
                return func(*args, **kwargs)
            except ImgManagerError:
                raise
            except Exception as exc:  # noqa: BLE001
                get_logger("imgmanager.errors").debug(
                    f"{func.__qualname__} failed: {exc}", exc_info=True
                )
                raise error_cls(f"{func.__name__}: {exc}") from exc

        return wrapper  # type: ignore[return-value]

    return decorator
