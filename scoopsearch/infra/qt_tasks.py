from typing import Callable

from logly import logger
from PySide6.QtCore import QRunnable, QThreadPool


class TaskRunnable(QRunnable):
    """Runs a Python callable on a `QThreadPool` worker thread.

    Results are expected to leave the task via Qt signals emitted by the callable
    itself. Exceptions that escape it are logged and dropped so a worker thread
    never dies with an unhandled error.
    """

    def __init__(self, fn: Callable[[], None], label: str = "task") -> None:
        super().__init__()
        self._fn = fn
        self._label = label
        self.setAutoDelete(True)

    def run(self) -> None:
        try:
            logger.debug(f"Background task started label={self._label}")
            self._fn()
            logger.debug(f"Background task finished label={self._label}")
        except Exception:
            logger.exception(f"Background task failed label={self._label}")


class BackgroundRunner:
    """Dispatches callables to a thread pool (the global one by default)."""

    def __init__(self, pool: QThreadPool | None = None) -> None:
        self._pool = pool

    def __call__(self, fn: Callable[[], None], label: str = "task") -> None:
        pool = self._pool or QThreadPool.globalInstance()
        pool.start(TaskRunnable(fn, label))
