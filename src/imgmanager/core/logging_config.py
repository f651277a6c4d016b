"""Centralized logging configuration for the image manager."""

import os
import sys
import logging
from typing import Optional

PACKAGE_LOGGERS = (
    "imgmanager",
    "imgmanager.workers",
    "imgmanager.thumbnails",
    "imgmanager.errors",
    "imgmanager.drives.local",
    "imgmanager.drives.s3",
)


def setup_logger(
    name: str = "imgmanager",
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Setup centralized logging with environment variable configuration.

    Args:
        name: Logger name (defaults to "imgmanager")
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured" or "simple")

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type ("structured" or "simple")
    """
    logger = logging.getLogger(name)

    if level:
        log_level = getattr(logging, level.upper(), logging.INFO)
    else:
        env_level = os.getenv("LOG_LEVEL", "INFO").upper()
        log_level = getattr(logging, env_level, logging.INFO)

    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)

        env_format = os.getenv("LOG_FORMAT", format_type).lower()

        if env_format == "structured":
            # Worker threads log concurrently, so the thread name is part of the line
            formatter = logging.Formatter(
                "%(asctime)s | %(name)s | %(levelname)-8s | "
                "%(threadName)s | %(funcName)s() | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )

        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = "imgmanager") -> logging.Logger:
    """
    Get a logger instance with consistent configuration.

    A logger that already has its handler is returned unchanged, so a level
    set through ``set_package_level`` survives later lookups.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    return setup_logger(name)


def set_package_level(level: str) -> None:
    """Apply ``level`` to every logger the package writes to."""
    for name in PACKAGE_LOGGERS:
        setup_logger(name, level=level)
