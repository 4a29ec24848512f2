import threading
from typing import Callable, Protocol

from logly import logger
from PySide6.QtCore import QObject, Signal

from scoopsearch.application.bucket_resolver import BucketResolver
from scoopsearch.core.cancellation import CancellationToken
from scoopsearch.core.errors import InvalidRepositoryUrl, OperationCancelled
from scoopsearch.core.result_items import ResultItem, build_result_item
from scoopsearch.core.scoop_types import SearchResult
from scoopsearch.infra.qt_tasks import BackgroundRunner


class SearchBackend(Protocol):
    def search(
        self, query: str, token: CancellationToken | None = None
    ) -> list[SearchResult]: ...


class SearchSessionController(QObject):
    """Runs searches as the query text changes and publishes rendered results.

    Each query change cancels the previous search. A search only publishes if its
    token is still the current one when it commits, so a slow, superseded search
    can never overwrite the results of a newer query.
    """

    results_changed = Signal(object)  # list[ResultItem]
    loading_changed = Signal(bool)
    error = Signal(str)

    def __init__(
        self,
        client: SearchBackend,
        resolver: BucketResolver,
        dispatch: Callable[[Callable[[], None], str], None] | None = None,
        debounce_ms: int = 250,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._client = client
        self._resolver = resolver
        self._dispatch = dispatch or BackgroundRunner()
        self._debounce_sec = max(0, debounce_ms) / 1000
        # Re-entrant so directly connected slots may read results while a commit emits.
        self._lock = threading.RLock()
        self._query = ""
        self._results: list[ResultItem] = []
        self._token: CancellationToken | None = None

    @property
    def query(self) -> str:
        return self._query

    @property
    def searching(self) -> bool:
        return self._token is not None

    def results(self) -> list[ResultItem]:
        with self._lock:
            return list(self._results)

    def on_query_changed(self, old_text: str, new_text: str) -> None:
        if old_text == new_text:
            return

        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._query = new_text

            if not new_text:
                self._token = None
                self._results = []
                self.loading_changed.emit(False)
                self.results_changed.emit([])
                return

            token = CancellationToken()
            self._token = token
            self.loading_changed.emit(True)

        self._dispatch(lambda: self._search(new_text, token), f"search {new_text!r}")

    def cancel(self) -> None:
        """Cancels the in-flight search, if any, without touching the results."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()
                self._token = None
                self.loading_changed.emit(False)

    def _search(self, query: str, token: CancellationToken) -> None:
        try:
            token.wait(self._debounce_sec)
            results = self._client.search(query, token)
            items: list[ResultItem] = []
            for result in results:
                token.raise_if_cancelled()
                items.append(build_result_item(result, self._bucket_tag(result)))
            token.raise_if_cancelled()
        except OperationCancelled:
            logger.debug(f"Scoop search cancelled for: {query!r}")
            return
        except Exception as e:
            logger.error(f"Error searching Scoop: {e}")
            with self._lock:
                if self._commit(token, []):
                    self.error.emit(f"Error searching Scoop: {e}")
            return

        with self._lock:
            self._commit(token, items)

    def _bucket_tag(self, result: SearchResult) -> str | None:
        if not result.metadata.official_repository:
            return None
        try:
            return self._resolver.resolve_bucket_name(result.metadata.repository)
        except InvalidRepositoryUrl as e:
            logger.warning(f"No bucket name for {result.name}: {e}")
            return None

    def _commit(self, token: CancellationToken, items: list[ResultItem]) -> bool:
        # Caller holds self._lock.
        if token is not self._token or token.cancelled:
            return False
        self._token = None
        self._results = items
        self.loading_changed.emit(False)
        self.results_changed.emit(list(items))
        return True
