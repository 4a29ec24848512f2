import requests
from logly import logger

from scoopsearch.config import AppConfig
from scoopsearch.core.cancellation import CancellationToken, check
from scoopsearch.core.errors import SearchTransportError
from scoopsearch.core.memo import Memoized
from scoopsearch.core.scoop_search_parser import (
    build_search_payload,
    parse_api_key,
    parse_search_response,
)
from scoopsearch.core.scoop_types import SearchResult


class ScoopSearchClient:
    """Queries the scoop.sh search index.

    The API key is published in the scoop.sh site's `.env` file; it is downloaded on
    first use and kept for the lifetime of the client.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        session: requests.Session | None = None,
        api_key: Memoized[str] | None = None,
    ) -> None:
        self._config = config or AppConfig()
        self._session = session or requests.Session()
        self._api_key = api_key or Memoized(self._fetch_api_key)

    @property
    def api_key(self) -> Memoized[str]:
        return self._api_key

    def close(self) -> None:
        self._session.close()

    def _fetch_api_key(self) -> str:
        logger.info(f"Fetching search api key from {self._config.credential_url}")
        try:
            response = self._session.get(
                self._config.credential_url, timeout=self._config.http_timeout_sec
            )
        except requests.RequestException as e:
            raise SearchTransportError(None, f"credential request failed: {e}") from e
        if not response.ok:
            raise SearchTransportError(
                response.status_code,
                f"credential request failed (status={response.status_code})",
            )
        return parse_api_key(response.text)

    def search(
        self, query: str, token: CancellationToken | None = None
    ) -> list[SearchResult]:
        """Runs one search request.

        Raises:
            OperationCancelled: If `token` is cancelled at a suspension point.
            CredentialUnavailable: If the API key cannot be extracted.
            SearchTransportError: On connection errors or non-success responses.
        """
        check(token)
        api_key = self._api_key.get()
        check(token)

        logger.info(f"Searching scoop index query={query!r}")
        try:
            response = self._session.post(
                self._config.search_url,
                json=build_search_payload(query, top=self._config.search_top),
                headers={"api-key": api_key},
                timeout=self._config.http_timeout_sec,
            )
        except requests.RequestException as e:
            raise SearchTransportError(None, f"search request failed: {e}") from e
        check(token)

        if not response.ok:
            raise SearchTransportError(response.status_code)
        if not response.content:
            return []
        try:
            data = response.json()
        except ValueError:
            logger.warning("Search response body is not JSON")
            return []

        results = parse_search_response(data)
        logger.info(f"Search query={query!r} returned {len(results)} results")
        return results


class BucketRegistrySource:
    """Downloads the official bucket registry (`buckets.json`)."""

    def __init__(
        self, config: AppConfig | None = None, session: requests.Session | None = None
    ) -> None:
        self._config = config or AppConfig()
        self._session = session or requests.Session()

    def fetch(self) -> dict[str, str]:
        """Returns a mapping of official bucket name to source URL.

        Raises:
            SearchTransportError: On connection errors or non-success responses.
        """
        logger.info(f"Fetching official bucket registry from {self._config.registry_url}")
        try:
            response = self._session.get(
                self._config.registry_url, timeout=self._config.http_timeout_sec
            )
        except requests.RequestException as e:
            raise SearchTransportError(None, f"registry request failed: {e}") from e
        if not response.ok:
            raise SearchTransportError(
                response.status_code,
                f"registry request failed (status={response.status_code})",
            )
        try:
            data = response.json()
        except ValueError as e:
            raise SearchTransportError(
                response.status_code, "registry response is not JSON"
            ) from e
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}
