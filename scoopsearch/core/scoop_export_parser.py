import json
from typing import Any

from .errors import MalformedExportError
from .scoop_types import InstalledStateSnapshot, ScoopApp, ScoopBucket


def extract_first_json_value(text: str) -> Any | None:
    """Extracts the first JSON value from a noisy text stream.

    This is tolerant to non-JSON prefixes (e.g. banner/log lines). It attempts to decode
    JSON starting at each '{' or '[' occurrence.

    Args:
        text: Text that may contain a JSON value.

    Returns:
        The parsed JSON value, or None if no valid JSON value is found.
    """
    decoder = json.JSONDecoder()
    for i, ch in enumerate(text):
        if ch not in "{[":
            continue
        try:
            value, _ = decoder.raw_decode(text, i)
            return value
        except json.JSONDecodeError:
            continue
    return None


def _format_updated_timestamp(value: str) -> str:
    """Formats Scoop timestamp strings for display.

    Args:
        value: Timestamp string (usually ISO 8601) from Scoop output.

    Returns:
        A display-friendly timestamp string.
    """
    if len(value) >= 19:
        return value[:19].replace("T", " ")
    return value


def _parse_apps(items: list) -> list[ScoopApp]:
    apps: list[ScoopApp] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        apps.append(
            ScoopApp(
                name=str(item.get("Name", "")),
                version=str(item.get("Version", "")),
                source=str(item.get("Source", "")),
                updated=_format_updated_timestamp(str(item.get("Updated", ""))),
                info=str(item.get("Info", "")),
            )
        )
    return apps


def _parse_buckets(items: list) -> list[ScoopBucket]:
    """Parses bucket entries, keeping only the first bucket per source URL."""
    buckets: list[ScoopBucket] = []
    seen_sources: set[str] = set()
    for item in items:
        if not isinstance(item, dict):
            continue
        name = str(item.get("Name", "")).strip()
        if not name:
            continue
        source = str(item.get("Source", "")).strip()
        key = source.casefold()
        if key and key in seen_sources:
            continue
        if key:
            seen_sources.add(key)
        buckets.append(ScoopBucket(name=name, source=source))
    return buckets


def parse_scoop_export(text: str, captured_at: float = 0.0) -> InstalledStateSnapshot:
    """Parses `scoop export` JSON output into an installed-state snapshot.

    Args:
        text: `scoop export` stdout text (may contain extra non-JSON lines).
        captured_at: Clock value to stamp the snapshot with.

    Returns:
        The installed buckets and apps.

    Raises:
        MalformedExportError: If the JSON cannot be found or lacks `buckets`/`apps` arrays.
    """
    return snapshot_from_export(extract_first_json_value(text), captured_at)


def snapshot_from_export(data: Any, captured_at: float = 0.0) -> InstalledStateSnapshot:
    """Builds a snapshot from an already decoded `scoop export` document."""
    if not isinstance(data, dict):
        raise MalformedExportError("scoop export did not produce a JSON object")
    if not isinstance(data.get("buckets"), list):
        raise MalformedExportError("scoop export json has no 'buckets' array")
    if not isinstance(data.get("apps"), list):
        raise MalformedExportError("scoop export json has no 'apps' array")

    return InstalledStateSnapshot(
        buckets=tuple(_parse_buckets(data["buckets"])),
        apps=tuple(_parse_apps(data["apps"])),
        captured_at=captured_at,
    )
