from typing import Any, Final

from .errors import CredentialUnavailable
from .scoop_types import SearchResult, SearchResultMetadata

API_KEY_NAME: Final[str] = "VITE_APP_AZURESEARCH_KEY"

_SELECT_FIELDS: Final[str] = (
    "Id,Name,NamePartial,NameSuffix,Description,Notes,Homepage,License,Version,"
    "Metadata/Repository,Metadata/FilePath,Metadata/OfficialRepository,"
    "Metadata/RepositoryStars,Metadata/Committed,Metadata/Sha"
)
_HIGHLIGHT_FIELDS: Final[str] = (
    "Name,NamePartial,NameSuffix,Description,Version,License,Metadata/Repository"
)


def build_search_payload(query: str, top: int = 20) -> dict[str, Any]:
    """Builds the JSON body for a search index query."""
    return {
        "count": True,
        "search": query,
        "searchMode": "all",
        "filter": "Metadata/DuplicateOf eq null",
        "orderby": (
            "search.score() desc, Metadata/OfficialRepositoryNumber desc,"
            "NameSortable asc"
        ),
        "skip": 0,
        "top": top,
        "select": _SELECT_FIELDS,
        "highlight": _HIGHLIGHT_FIELDS,
        "highlightPreTag": "<mark>",
        "highlightPostTag": "</mark>",
    }


def parse_api_key(text: str, key_name: str = API_KEY_NAME) -> str:
    """Extracts the API key from a dotenv-style document.

    Example line: `VITE_APP_AZURESEARCH_KEY = "abcdef123456"`. The first matching
    line wins.

    Raises:
        CredentialUnavailable: If no line defines a non-empty value for `key_name`.
    """
    for line in text.splitlines():
        s = line.strip()
        if not s.startswith(key_name):
            continue
        _, sep, value = s.partition("=")
        if not sep:
            continue
        value = value.strip().strip("\"'").strip()
        if value:
            return value
        break
    raise CredentialUnavailable(f"{key_name} not found in credential source")


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return ", ".join(t for t in (_text(v) for v in value) if t)
    return str(value).strip()


def _int(value: object) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def _parse_metadata(value: object) -> SearchResultMetadata:
    if not isinstance(value, dict):
        return SearchResultMetadata()
    return SearchResultMetadata(
        repository=_text(value.get("Repository")),
        file_path=_text(value.get("FilePath")),
        official_repository=bool(value.get("OfficialRepository")),
        sha=_text(value.get("Sha")),
        repository_stars=_int(value.get("RepositoryStars")),
        committed=_text(value.get("Committed")),
    )


def parse_search_response(data: Any) -> list[SearchResult]:
    """Parses a search index response body into results.

    A missing body or `value` array yields an empty list. Entries without a name
    are skipped.
    """
    if not isinstance(data, dict):
        return []
    items = data.get("value")
    if not isinstance(items, list):
        return []

    results: list[SearchResult] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = _text(item.get("Name"))
        if not name:
            continue
        results.append(
            SearchResult(
                name=name,
                homepage=_text(item.get("Homepage")),
                description=_text(item.get("Description")),
                version=_text(item.get("Version")),
                notes=_text(item.get("Notes")),
                license=_text(item.get("License")),
                metadata=_parse_metadata(item.get("Metadata")),
            )
        )
    return results
