"""In-memory action queue drained by a fixed pool of worker threads."""

import queue
import threading
from typing import List, Optional

from typing_extensions import assert_never

from .error_handling import ActionErrorHandler, action_name
from .exceptions import ConfigurationError
from .logging_config import get_logger
from .models import (
    DEFAULT_WORKER_COUNT,
    Action,
    DeleteAction,
    GenerateThumbnailAction,
    UploadAction,
)
from .protocols import ActionHandler, LoggerProtocol


class WorkerPool:
    """
    FIFO queue of pending actions consumed by ``worker_count`` threads.

    Actions are fire-and-forget: ``enqueue`` returns immediately and
    failures are only logged. With several workers pulling concurrently,
    two actions for the same path have no guaranteed completion order.
    Nothing is persisted, so pending actions are lost when the process
    exits.
    """

    def __init__(
        self,
        handler: ActionHandler,
        worker_count: int = DEFAULT_WORKER_COUNT,
        poll_interval: float = 0.1,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._handler = handler
        self.worker_count = worker_count if worker_count > 0 else DEFAULT_WORKER_COUNT
        self.poll_interval = poll_interval
        self.logger = logger or get_logger("imgmanager.workers")
        self.errors = ActionErrorHandler(self.logger)

        self._queue: "queue.Queue[Action]" = queue.Queue()
        self._threads: List[threading.Thread] = []
        self._stop_event = threading.Event()
        self._lifecycle_lock = threading.Lock()
        self._stopped = False

    @property
    def running(self) -> bool:
        return bool(self._threads) and not self._stop_event.is_set()

    @property
    def pending(self) -> int:
        """Approximate number of queued, not yet started actions."""
        return self._queue.qsize()

    def start(self) -> None:
        """Spawn the worker threads. Calling it again is a no-op."""
        with self._lifecycle_lock:
            if self._stopped:
                raise ConfigurationError("worker pool was stopped and cannot restart")
            if self._threads:
                return
            for i in range(self.worker_count):
                thread = threading.Thread(
                    target=self._run_worker,
                    name=f"imgmanager-worker-{i}",
                    daemon=True,
                )
                thread.start()
                self._threads.append(thread)
        self.logger.debug(f"Started {self.worker_count} workers")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the workers to exit and wait for them.

        Each worker finishes the action it is running; queued actions that
        were not started are discarded.
        """
        with self._lifecycle_lock:
            self._stopped = True
            self._stop_event.set()
            threads, self._threads = self._threads, []
        for thread in threads:
            thread.join(timeout)
        discarded = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
            self._queue.task_done()
            discarded += 1
        if discarded:
            self.logger.warning(f"Discarded {discarded} pending actions on stop")

    def join(self) -> None:
        """Block until every action enqueued so far has been processed."""
        self._queue.join()

    def enqueue(self, action: Action) -> None:
        """Append ``action`` to the queue without waiting for it to run."""
        # Checked under the lock so nothing lands in the queue after stop drains it
        with self._lifecycle_lock:
            if self._stopped:
                raise ConfigurationError(
                    f"cannot enqueue {action_name(action)} for '{action.path}': pool stopped"
                )
            self._queue.put(action)

    def __enter__(self) -> "WorkerPool":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def _run_worker(self) -> None:
        while not self._stop_event.is_set():
            try:
                action = self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            except Exception as exc:  # noqa: BLE001
                self.logger.error(f"Error getting action from queue: {exc}")
                continue
            try:
                with self.errors.guard(action):
                    self._dispatch(action)
            finally:
                self._queue.task_done()

    def _dispatch(self, action: Action) -> None:
        if isinstance(action, UploadAction):
            self._handler.upload(action.path, action.content)
        elif isinstance(action, GenerateThumbnailAction):
            self._handler.generate_thumbnail(action.path, action.content)
        elif isinstance(action, DeleteAction):
            self._handler.delete(action.path)
        else:
            assert_never(action)
