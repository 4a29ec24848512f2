class ScoopSearchError(Exception):
    """Base class for errors raised by this application."""


class OperationCancelled(ScoopSearchError):
    """Raised at a suspension point once the operation's token is cancelled."""


class CredentialUnavailable(ScoopSearchError):
    """The search API key could not be extracted from the credential source."""


class SearchTransportError(ScoopSearchError):
    """The search request failed or returned a non-success status."""

    def __init__(self, status: int | None, message: str = "") -> None:
        self.status = status
        super().__init__(message or f"search request failed (status={status})")


class MalformedExportError(ScoopSearchError):
    """`scoop export` output lacks the expected `buckets`/`apps` arrays."""


class ExternalCommandFailed(ScoopSearchError):
    """An external `scoop` invocation exited with a non-zero code."""

    def __init__(self, exit_code: int, stderr: str = "") -> None:
        self.exit_code = exit_code
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        message = f"scoop failed (code={exit_code})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidRepositoryUrl(ScoopSearchError):
    """A repository URL does not have an `owner/repo` path."""
