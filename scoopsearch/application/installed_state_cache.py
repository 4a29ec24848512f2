import threading
import time
from concurrent.futures import Future, wait
from typing import Callable, Protocol

from logly import logger

from scoopsearch.core.scoop_export_parser import snapshot_from_export
from scoopsearch.core.scoop_types import InstalledStateSnapshot, ScoopApp, ScoopBucket
from scoopsearch.infra.scoop_cli import CommandResult


class ExportCommand(Protocol):
    def export(self, timeout_sec: int = 60) -> CommandResult: ...


class InstalledStateCache:
    """Read-through cache of `scoop export` output.

    Reads return the current snapshot while it is younger than `max_age_sec`;
    otherwise they fetch a new one. At most one fetch runs at a time: callers that
    arrive while a fetch is in flight wait for its result instead of starting a
    second `scoop export` process. Forced reads never reuse a fetch that started
    before they were made.
    """

    def __init__(
        self,
        cli: ExportCommand,
        max_age_sec: float = 120.0,
        timeout_sec: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cli = cli
        self._max_age_sec = max_age_sec
        self._timeout_sec = timeout_sec
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: InstalledStateSnapshot | None = None
        self._pending: Future[InstalledStateSnapshot] | None = None
        self._pending_seq = 0
        self._started = 0

    @property
    def snapshot(self) -> InstalledStateSnapshot | None:
        """The current snapshot, stale or not, without triggering a fetch."""
        return self._snapshot

    def get_installed_state(self, skip_cache: bool = False) -> InstalledStateSnapshot:
        """Returns a fresh snapshot, fetching one if needed.

        With `skip_cache=True` the snapshot always comes from a fetch that started
        after this call. A fetch already in flight is waited out, not reused.

        Raises:
            ExternalCommandFailed: If `scoop export` fails.
            MalformedExportError: If its output lacks `buckets`/`apps`.
        """
        with self._lock:
            min_seq = self._started + 1 if skip_cache else 0

        while True:
            with self._lock:
                snapshot = self._snapshot
                if (
                    not skip_cache
                    and snapshot is not None
                    and not snapshot.is_stale(self._clock(), self._max_age_sec)
                ):
                    return snapshot
                earlier = self._pending if self._pending_seq < min_seq else None
                if earlier is None:
                    future, owner = self._join_or_start_fetch()

            if earlier is not None:
                # Started before this request; its output may predate the change.
                wait([earlier])
                continue
            if owner:
                self._fetch_into(future)
            return future.result()

    def get_buckets(self, skip_cache: bool = False) -> tuple[ScoopBucket, ...]:
        return self.get_installed_state(skip_cache).buckets

    def get_installed_apps(self, skip_cache: bool = False) -> tuple[ScoopApp, ...]:
        return self.get_installed_state(skip_cache).apps

    def refresh(self) -> InstalledStateSnapshot:
        """Fetches a new snapshot regardless of the current one's age."""
        return self.get_installed_state(skip_cache=True)

    def _join_or_start_fetch(self) -> tuple[Future, bool]:
        # Caller holds self._lock.
        if self._pending is not None:
            return self._pending, False
        future: Future[InstalledStateSnapshot] = Future()
        self._started += 1
        self._pending = future
        self._pending_seq = self._started
        return future, True

    def _fetch_into(self, future: Future) -> None:
        try:
            result = self._cli.export(timeout_sec=self._timeout_sec)
            snapshot = snapshot_from_export(result.json, captured_at=self._clock())
        except Exception as e:
            logger.error(f"Failed to load installed state: {e}")
            with self._lock:
                self._pending = None
            future.set_exception(e)
            return

        with self._lock:
            self._snapshot = snapshot
            self._pending = None
        logger.info(
            f"Installed state loaded buckets={len(snapshot.buckets)} apps={len(snapshot.apps)}"
        )
        future.set_result(snapshot)
