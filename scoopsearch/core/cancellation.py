import threading

from .errors import OperationCancelled


class CancellationToken:
    """Cooperative cancellation flag shared between a controller and its task.

    Tasks call `raise_if_cancelled()` at each suspension point. Cancelling never
    interrupts running work; it only makes the next check fail.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled()

    def wait(self, timeout_sec: float) -> None:
        """Sleeps up to `timeout_sec`, waking early and raising on cancellation."""
        if timeout_sec > 0:
            self._event.wait(timeout_sec)
        self.raise_if_cancelled()


def check(token: CancellationToken | None) -> None:
    """Raises `OperationCancelled` if `token` is set; `None` means not cancellable."""
    if token is not None:
        token.raise_if_cancelled()
