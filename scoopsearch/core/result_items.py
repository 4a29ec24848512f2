from dataclasses import dataclass
from typing import Final

from .scoop_types import SearchResult

SCOOP_HOMEPAGE_URL: Final[str] = "https://scoop.sh/"


@dataclass(frozen=True, slots=True)
class Tag:
    text: str
    tooltip: str = ""
    official: bool = False


@dataclass(frozen=True, slots=True)
class DetailsLink:
    """A labelled detail row; `url` is None for plain text."""

    key: str
    text: str
    url: str | None = None


@dataclass(frozen=True, slots=True)
class Details:
    title: str
    body: str = ""
    metadata: tuple[DetailsLink, ...] = ()


@dataclass(frozen=True, slots=True)
class ResultItem:
    """A renderable search result.

    Attributes:
        title: Package name.
        subtitle: Package description.
        tags: Bucket tag (official results only) followed by the version tag.
        details: Detail pane content.
        result: The search result this item was built from.
    """

    title: str
    subtitle: str
    tags: tuple[Tag, ...]
    details: Details
    result: SearchResult


class HomeEntry:
    """Entries listed while the query is empty."""

    MANAGE_BUCKETS: Final[str] = "Manage buckets"
    MANAGE_APPS: Final[str] = "Manage apps"
    OPEN_HOMEPAGE: Final[str] = "Open Scoop homepage"

    ALL: Final[tuple[str, ...]] = (MANAGE_BUCKETS, MANAGE_APPS, OPEN_HOMEPAGE)


def license_url(license_text: str) -> str | None:
    """Returns the SPDX page for a single license, or None for multi-license text."""
    text = license_text.strip()
    if not text or "," in text:
        return None
    return f"https://spdx.org/licenses/{text}.html"


def manifest_url(result: SearchResult) -> str:
    meta = result.metadata
    return f"{meta.repository.rstrip('/')}/blob/{meta.sha}/{meta.file_path}"


def build_result_item(result: SearchResult, bucket_name: str | None = None) -> ResultItem:
    """Builds the rendering record for a search result.

    Args:
        result: Search result.
        bucket_name: Resolved bucket name for official repositories. When given, it
            becomes the first tag and the repository link text.
    """
    tags: list[Tag] = []
    if bucket_name:
        tags.append(Tag(text=bucket_name, tooltip="Official bucket", official=True))
    tags.append(Tag(text=result.version, tooltip="Version"))

    meta = result.metadata
    links = [
        DetailsLink("Repository", bucket_name or meta.repository, meta.repository or None),
        DetailsLink("File path", meta.file_path, manifest_url(result) if meta.repository else None),
        DetailsLink("Homepage", result.homepage, result.homepage or None),
    ]
    if result.license:
        links.append(DetailsLink("License", result.license, license_url(result.license)))

    return ResultItem(
        title=result.name,
        subtitle=result.description,
        tags=tuple(tags),
        details=Details(title=result.name, body=result.notes, metadata=tuple(links)),
        result=result,
    )
