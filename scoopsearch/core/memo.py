import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Memoized(Generic[T]):
    """Fetch-once value with explicit invalidation.

    The loader runs at most once at a time; callers arriving while it runs wait
    on the lock and then see the stored value. A loader error is propagated and
    nothing is stored, so the next `get()` tries again.
    """

    def __init__(self, loader: Callable[[], T]) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._value: T | None = None
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self) -> T:
        with self._lock:
            if not self._loaded:
                self._value = self._loader()
                self._loaded = True
            return self._value  # type: ignore[return-value]

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value
            self._loaded = True

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._loaded = False
