from collections.abc import Iterable, Mapping
from urllib.parse import urlparse

from .errors import InvalidRepositoryUrl
from .scoop_types import ScoopBucket


def _normalize_url(url: str) -> str:
    return url.strip().casefold()


def match_official_bucket(repository_url: str, registry: Mapping[str, str]) -> str | None:
    """Returns the registry key whose source URL equals `repository_url`.

    Comparison is case-insensitive and ignores surrounding whitespace on both sides.
    """
    wanted = _normalize_url(repository_url)
    for name, source in registry.items():
        if _normalize_url(str(source)) == wanted:
            return name
    return None


def synthesize_bucket_name(repository_url: str) -> str:
    """Derives `"{owner}_{repo}"` from the first two URL path segments.

    Raises:
        InvalidRepositoryUrl: If the URL has fewer than two path segments.
    """
    parsed = urlparse(repository_url.strip())
    segments = [s for s in parsed.path.split("/") if s]
    if not parsed.netloc or len(segments) < 2:
        raise InvalidRepositoryUrl(
            f"cannot derive a bucket name from repository url {repository_url!r}"
        )
    return f"{segments[0]}_{segments[1]}"


def resolve_bucket_name(repository_url: str, registry: Mapping[str, str]) -> str:
    """Maps a repository URL to a bucket name.

    Official buckets resolve to their canonical short name; anything else gets a
    synthesized `owner_repo` name.
    """
    official = match_official_bucket(repository_url, registry)
    if official is not None:
        return official
    return synthesize_bucket_name(repository_url)


def find_bucket_by_source(
    buckets: Iterable[ScoopBucket], repository_url: str
) -> ScoopBucket | None:
    """Returns the first bucket whose source equals `repository_url` (case-insensitive)."""
    wanted = _normalize_url(repository_url)
    for bucket in buckets:
        if _normalize_url(bucket.source) == wanted:
            return bucket
    return None
