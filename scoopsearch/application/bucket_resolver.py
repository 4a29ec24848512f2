from typing import Callable

from scoopsearch.application.installed_state_cache import InstalledStateCache
from scoopsearch.config import RegistryPolicy
from scoopsearch.core.bucket_names import (
    find_bucket_by_source,
    resolve_bucket_name,
)
from scoopsearch.core.memo import Memoized
from scoopsearch.core.scoop_types import ScoopBucket


class BucketResolver:
    """Maps repository URLs to bucket names and installed buckets.

    Args:
        fetch_registry: Loads the official bucket registry (name -> source URL).
        cache: Installed-state cache used for installed bucket lookups.
        policy: `PROCESS` downloads the registry once; `PER_CALL` on every lookup.
    """

    def __init__(
        self,
        fetch_registry: Callable[[], dict[str, str]],
        cache: InstalledStateCache,
        policy: RegistryPolicy = RegistryPolicy.PROCESS,
    ) -> None:
        self._registry = Memoized(fetch_registry)
        self._cache = cache
        self._policy = policy

    def registry(self) -> dict[str, str]:
        if self._policy is RegistryPolicy.PER_CALL:
            self._registry.invalidate()
        return self._registry.get()

    def invalidate_registry(self) -> None:
        self._registry.invalidate()

    def resolve_bucket_name(self, repository_url: str) -> str:
        """Returns the official short name or a synthesized `owner_repo` name.

        Raises:
            InvalidRepositoryUrl: If the URL is not official and has no `owner/repo` path.
        """
        return resolve_bucket_name(repository_url, self.registry())

    def is_official_bucket(self, name: str) -> bool:
        return name in self.registry()

    def find_installed_bucket_by_source(
        self, repository_url: str, skip_cache: bool = False
    ) -> ScoopBucket | None:
        return find_bucket_by_source(
            self._cache.get_buckets(skip_cache=skip_cache), repository_url
        )
