import pytest

from fakes import OFFICIAL_REGISTRY, FakeClock, FakeScoopCli
from scoopsearch.application.bucket_resolver import BucketResolver
from scoopsearch.application.installed_state_cache import InstalledStateCache
from scoopsearch.config import RegistryPolicy
from scoopsearch.core.errors import InvalidRepositoryUrl


class _CountingRegistry:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> dict[str, str]:
        self.calls += 1
        return dict(OFFICIAL_REGISTRY)


def _resolver(cli=None, policy=RegistryPolicy.PROCESS, registry=None):
    cache = InstalledStateCache(cli or FakeScoopCli(), clock=FakeClock())
    return BucketResolver(registry or _CountingRegistry(), cache, policy)


def test_resolve_bucket_name_uses_registry_then_synthesizes() -> None:
    resolver = _resolver()

    assert resolver.resolve_bucket_name("https://github.com/ScoopInstaller/Extras ") == "extras"
    assert resolver.resolve_bucket_name("https://github.com/Foo/Bar") == "Foo_Bar"
    with pytest.raises(InvalidRepositoryUrl):
        resolver.resolve_bucket_name("https://example.com/")


def test_process_policy_fetches_registry_once() -> None:
    registry = _CountingRegistry()
    resolver = _resolver(registry=registry)

    resolver.resolve_bucket_name("https://github.com/Foo/Bar")
    resolver.resolve_bucket_name("https://github.com/Foo/Bar")
    resolver.is_official_bucket("main")

    assert registry.calls == 1


def test_per_call_policy_refetches_registry() -> None:
    registry = _CountingRegistry()
    resolver = _resolver(policy=RegistryPolicy.PER_CALL, registry=registry)

    resolver.resolve_bucket_name("https://github.com/Foo/Bar")
    resolver.resolve_bucket_name("https://github.com/Foo/Bar")

    assert registry.calls == 2


def test_is_official_bucket() -> None:
    resolver = _resolver()

    assert resolver.is_official_bucket("main")
    assert not resolver.is_official_bucket("Foo_Bar")


def test_find_installed_bucket_by_source_is_case_insensitive() -> None:
    cli = FakeScoopCli(buckets=[("xy", "HTTPS://X/Y")])
    resolver = _resolver(cli)

    bucket = resolver.find_installed_bucket_by_source("https://x/y")

    assert bucket is not None
    assert bucket.name == "xy"
    assert resolver.find_installed_bucket_by_source("https://x/z") is None
    assert cli.export_calls == 1
