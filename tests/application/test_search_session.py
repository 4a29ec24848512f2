from typing import Callable

import pytest

from fakes import OFFICIAL_REGISTRY, FakeClock, FakeScoopCli
from scoopsearch.application.bucket_resolver import BucketResolver
from scoopsearch.application.installed_state_cache import InstalledStateCache
from scoopsearch.application.search_session import SearchSessionController
from scoopsearch.core.cancellation import CancellationToken
from scoopsearch.core.errors import SearchTransportError
from scoopsearch.core.scoop_types import SearchResult, SearchResultMetadata


class _ManualDispatch:
    """Holds dispatched jobs so tests decide when (and in which order) they run."""

    def __init__(self) -> None:
        self.jobs: list[Callable[[], None]] = []

    def __call__(self, fn: Callable[[], None], label: str = "") -> None:
        self.jobs.append(fn)


class _FakeClient:
    def __init__(self) -> None:
        self.queries: list[str] = []
        self.hook: Callable[[str], None] | None = None
        self.error: Exception | None = None

    def search(self, query: str, token: CancellationToken | None = None) -> list[SearchResult]:
        self.queries.append(query)
        if self.hook is not None:
            self.hook(query)
        if self.error is not None:
            raise self.error
        return [
            SearchResult(
                name=f"{query}-app",
                version="1.0",
                metadata=SearchResultMetadata(
                    repository=OFFICIAL_REGISTRY["main"], official_repository=True
                ),
            ),
            SearchResult(
                name=f"{query}-tool",
                version="2.0",
                metadata=SearchResultMetadata(repository="https://github.com/Foo/Bar"),
            ),
        ]


def _session(client=None, dispatch=None):
    cache = InstalledStateCache(FakeScoopCli(), clock=FakeClock())
    resolver = BucketResolver(lambda: dict(OFFICIAL_REGISTRY), cache)
    session = SearchSessionController(
        client or _FakeClient(), resolver, dispatch=dispatch or _ManualDispatch(), debounce_ms=0
    )
    published: list[list] = []
    errors: list[str] = []
    session.results_changed.connect(lambda items: published.append(items))
    session.error.connect(lambda text: errors.append(text))
    return session, published, errors


def test_search_publishes_rendered_items_in_order() -> None:
    dispatch = _ManualDispatch()
    session, published, _ = _session(dispatch=dispatch)

    session.on_query_changed("", "curl")
    dispatch.jobs[0]()

    assert len(published) == 1
    items = published[0]
    assert [i.title for i in items] == ["curl-app", "curl-tool"]
    assert [t.text for t in items[0].tags] == ["main", "1.0"]
    assert [t.text for t in items[1].tags] == ["2.0"]
    assert session.results() == items
    assert not session.searching


def test_unchanged_text_is_a_no_op() -> None:
    dispatch = _ManualDispatch()
    session, published, _ = _session(dispatch=dispatch)

    session.on_query_changed("curl", "curl")

    assert dispatch.jobs == []
    assert published == []


@pytest.mark.parametrize("order", [(0, 1), (1, 0)])
def test_superseded_search_never_publishes(order: tuple[int, int]) -> None:
    dispatch = _ManualDispatch()
    client = _FakeClient()
    session, published, _ = _session(client, dispatch)

    session.on_query_changed("", "cu")
    session.on_query_changed("cu", "curl")
    for index in order:
        dispatch.jobs[index]()

    assert len(published) == 1
    assert [i.title for i in published[0]] == ["curl-app", "curl-tool"]
    assert [i.title for i in session.results()] == ["curl-app", "curl-tool"]


def test_search_cancelled_while_in_flight_discards_its_batch() -> None:
    dispatch = _ManualDispatch()
    client = _FakeClient()
    session, published, _ = _session(client, dispatch)

    def type_more(query: str) -> None:
        if query == "cu":
            session.on_query_changed("cu", "curl")

    client.hook = type_more
    session.on_query_changed("", "cu")
    dispatch.jobs[0]()

    assert published == []
    dispatch.jobs[1]()
    assert [i.title for i in published[0]] == ["curl-app", "curl-tool"]


def test_empty_text_clears_results_and_cancels() -> None:
    dispatch = _ManualDispatch()
    client = _FakeClient()
    session, published, _ = _session(client, dispatch)

    session.on_query_changed("", "curl")
    session.on_query_changed("curl", "")
    dispatch.jobs[0]()

    assert published == [[]]
    assert len(dispatch.jobs) == 1
    assert client.queries == []
    assert session.results() == []
    assert not session.searching


def test_failed_search_degrades_to_empty_results_and_error() -> None:
    dispatch = _ManualDispatch()
    client = _FakeClient()
    client.error = SearchTransportError(503)
    session, published, errors = _session(client, dispatch)

    session.on_query_changed("", "curl")
    dispatch.jobs[0]()

    assert published == [[]]
    assert len(errors) == 1
    assert "503" in errors[0]


def test_failed_superseded_search_is_silent() -> None:
    dispatch = _ManualDispatch()
    client = _FakeClient()
    session, published, errors = _session(client, dispatch)

    session.on_query_changed("", "cu")

    def fail_after_superseded(query: str) -> None:
        session.on_query_changed("cu", "curl")
        client.hook = None
        raise SearchTransportError(500)

    client.hook = fail_after_superseded
    dispatch.jobs[0]()

    assert published == []
    assert errors == []


def test_loading_flag_follows_search_lifecycle() -> None:
    dispatch = _ManualDispatch()
    session, _, _ = _session(dispatch=dispatch)
    loading: list[bool] = []
    session.loading_changed.connect(lambda value: loading.append(value))

    session.on_query_changed("", "curl")
    dispatch.jobs[0]()

    assert loading == [True, False]
