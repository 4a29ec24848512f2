import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Final

SEARCH_URL: Final[str] = (
    "https://scoopsearch.search.windows.net/indexes/apps/docs/search"
    "?api-version=2020-06-30"
)
CREDENTIAL_URL: Final[str] = (
    "https://raw.githubusercontent.com/ScoopInstaller/scoopinstaller.github.io/main/.env"
)
BUCKET_REGISTRY_URL: Final[str] = (
    "https://raw.githubusercontent.com/ScoopInstaller/Scoop/master/buckets.json"
)

ENV_PREFIX: Final[str] = "SCOOPSEARCH_"


class RegistryPolicy(str, Enum):
    """How often the official bucket registry is downloaded."""

    PROCESS = "process"
    PER_CALL = "per_call"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Runtime settings.

    Attributes:
        search_url: Search index endpoint.
        credential_url: Document holding the search API key.
        registry_url: JSON document mapping official bucket names to URLs.
        registry_policy: Whether the registry is cached for the process lifetime.
        http_timeout_sec: Timeout for each HTTP request.
        cache_duration_sec: Lifetime of an installed-state snapshot.
        search_debounce_ms: Delay before a typed query is sent.
        search_top: Number of results requested per query.
        export_timeout_sec: Timeout for `scoop export`.
        update_timeout_sec: Timeout for `scoop update`.
        install_timeout_sec: Timeout for `scoop install` and `scoop bucket add`.
    """

    search_url: str = SEARCH_URL
    credential_url: str = CREDENTIAL_URL
    registry_url: str = BUCKET_REGISTRY_URL
    registry_policy: RegistryPolicy = RegistryPolicy.PROCESS
    http_timeout_sec: float = 10.0
    cache_duration_sec: float = 120.0
    search_debounce_ms: int = 250
    search_top: int = 20
    export_timeout_sec: int = 60
    update_timeout_sec: int = 300
    install_timeout_sec: int = 900

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Builds a config, overriding defaults from `SCOOPSEARCH_*` variables.

        Raises:
            ValueError: If a variable holds an unparsable value.
        """
        env = os.environ if environ is None else environ
        config = cls()
        overrides: dict[str, object] = {}

        if value := env.get(f"{ENV_PREFIX}CACHE_SECONDS"):
            overrides["cache_duration_sec"] = _positive_float("CACHE_SECONDS", value)
        if value := env.get(f"{ENV_PREFIX}HTTP_TIMEOUT"):
            overrides["http_timeout_sec"] = _positive_float("HTTP_TIMEOUT", value)
        if value := env.get(f"{ENV_PREFIX}DEBOUNCE_MS"):
            try:
                debounce = int(value)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}DEBOUNCE_MS must be an integer") from None
            if debounce < 0:
                raise ValueError(f"{ENV_PREFIX}DEBOUNCE_MS must not be negative")
            overrides["search_debounce_ms"] = debounce
        if value := env.get(f"{ENV_PREFIX}REGISTRY_POLICY"):
            try:
                overrides["registry_policy"] = RegistryPolicy(value.strip().lower())
            except ValueError:
                raise ValueError(
                    f"{ENV_PREFIX}REGISTRY_POLICY must be one of "
                    f"{', '.join(p.value for p in RegistryPolicy)}"
                ) from None

        return replace(config, **overrides) if overrides else config


def _positive_float(name: str, value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number") from None
    if number <= 0:
        raise ValueError(f"{ENV_PREFIX}{name} must be positive")
    return number
