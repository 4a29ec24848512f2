from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True, slots=True)
class ScoopApp:
    """Represents an installed Scoop app.

    Attributes:
        name: App name.
        version: Installed version string.
        source: Bucket name (e.g. "main").
        updated: Timestamp string (best-effort).
        info: Additional info (best-effort).
    """

    name: str
    version: str
    source: str = ""
    updated: str = ""
    info: str = ""


@dataclass(frozen=True, slots=True)
class ScoopBucket:
    """Represents a registered Scoop bucket.

    Attributes:
        name: Local bucket name (e.g. "extras").
        source: Origin URL the bucket was added from.
    """

    name: str
    source: str = ""


@dataclass(frozen=True, slots=True)
class InstalledStateSnapshot:
    """Buckets and apps captured from a single `scoop export` call."""

    buckets: tuple[ScoopBucket, ...]
    apps: tuple[ScoopApp, ...]
    captured_at: float = 0.0

    def is_stale(self, now: float, max_age_sec: float) -> bool:
        return now - self.captured_at >= max_age_sec


@dataclass(frozen=True, slots=True)
class SearchResultMetadata:
    """Repository metadata attached to a search index entry."""

    repository: str = ""
    file_path: str = ""
    official_repository: bool = False
    sha: str = ""
    repository_stars: int = 0
    committed: str = ""


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Represents a package returned by the remote search index."""

    name: str
    homepage: str = ""
    description: str = ""
    version: str = ""
    notes: str = ""
    license: str = ""
    metadata: SearchResultMetadata = field(default_factory=SearchResultMetadata)


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class StatusMessage:
    """A transient status update shown while long-running commands execute.

    Attributes:
        text: Message text.
        severity: Info, success or error.
        progress: Percent complete, or None when no progress applies.
        indeterminate: True when the step has no measurable progress.
    """

    text: str
    severity: Severity = Severity.INFO
    progress: int | None = None
    indeterminate: bool = False


@dataclass(frozen=True, slots=True)
class BucketConfirmation:
    """A pending "add this bucket, then install" action awaiting the user."""

    package: str
    bucket_name: str
    repository: str
    official: bool = False

    @property
    def title(self) -> str:
        return f'Bucket "{self.bucket_name}" is not installed.'

    @property
    def description(self) -> str:
        return f'Do you want to install it from the repository "{self.repository}"?'

    @property
    def install_target(self) -> str:
        return f"{self.bucket_name}/{self.package}"
