# src/imgmanager/core/error_handling.py

import threading
from collections import Counter
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from .logging_config import get_logger
from .models import Action
from .protocols import LoggerProtocol

ACTION_NAMES = {
    "UploadAction": "upload",
    "GenerateThumbnailAction": "generate_thumbnail",
    "DeleteAction": "delete",
}


def action_name(action: Action) -> str:
    """Short name of an action kind, used in log lines and counters."""
    return ACTION_NAMES.get(type(action).__name__, type(action).__name__)


class ActionErrorHandler:
    """
    Implements the workers' "log and drop" failure policy.

    Errors raised while performing an action are logged and swallowed so
    the worker keeps running; nothing is retried. Dropped actions are
    counted per kind.
    """

    def __init__(self, logger: Optional[LoggerProtocol] = None):
        self.logger = logger or get_logger("imgmanager.workers")
        self._dropped: Counter = Counter()
        self._lock = threading.Lock()

    @contextmanager
    def guard(self, action: Action) -> Iterator[None]:
        try:
            yield
        except Exception as exc:  # noqa: BLE001
            name = action_name(action)
            with self._lock:
                self._dropped[name] += 1
            self.logger.error(
                f"Error performing {name} action for '{action.path}', dropping it: "
                f"{type(exc).__name__}: {exc}"
            )

    @property
    def dropped(self) -> Dict[str, int]:
        """Number of dropped actions per kind."""
        with self._lock:
            return dict(self._dropped)
