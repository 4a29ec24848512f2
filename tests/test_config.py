import pytest

from scoopsearch.config import AppConfig, RegistryPolicy


def test_defaults() -> None:
    config = AppConfig()

    assert config.cache_duration_sec == 120.0
    assert config.registry_policy is RegistryPolicy.PROCESS
    assert config.search_top == 20
    assert config.search_url.startswith("https://scoopsearch.search.windows.net/")


def test_from_env_overrides_selected_fields() -> None:
    config = AppConfig.from_env(
        {
            "SCOOPSEARCH_CACHE_SECONDS": "30",
            "SCOOPSEARCH_DEBOUNCE_MS": "0",
            "SCOOPSEARCH_REGISTRY_POLICY": "PER_CALL",
            "SCOOPSEARCH_HTTP_TIMEOUT": "2.5",
            "UNRELATED": "x",
        }
    )

    assert config.cache_duration_sec == 30.0
    assert config.search_debounce_ms == 0
    assert config.registry_policy is RegistryPolicy.PER_CALL
    assert config.http_timeout_sec == 2.5


def test_from_env_without_variables_returns_defaults() -> None:
    assert AppConfig.from_env({}) == AppConfig()


@pytest.mark.parametrize(
    "env",
    [
        {"SCOOPSEARCH_CACHE_SECONDS": "soon"},
        {"SCOOPSEARCH_CACHE_SECONDS": "-1"},
        {"SCOOPSEARCH_DEBOUNCE_MS": "-5"},
        {"SCOOPSEARCH_REGISTRY_POLICY": "weekly"},
    ],
)
def test_from_env_rejects_invalid_values(env: dict[str, str]) -> None:
    with pytest.raises(ValueError):
        AppConfig.from_env(env)
