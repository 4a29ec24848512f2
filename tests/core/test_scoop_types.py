from dataclasses import FrozenInstanceError

import pytest

from scoopsearch.core.scoop_types import (
    BucketConfirmation,
    InstalledStateSnapshot,
    ScoopApp,
    SearchResult,
)


def test_scoop_app_default_fields_are_empty_strings() -> None:
    item = ScoopApp(name="alpha-tool", version="1.0.0")

    assert item.name == "alpha-tool"
    assert item.version == "1.0.0"
    assert item.source == ""
    assert item.updated == ""
    assert item.info == ""


def test_search_result_defaults_to_empty_metadata() -> None:
    result = SearchResult(name="beta-item")

    assert result.metadata.repository == ""
    assert result.metadata.official_repository is False


def test_scoop_types_are_frozen_dataclasses() -> None:
    result = SearchResult(name="gamma-item")

    with pytest.raises(FrozenInstanceError):
        result.name = "changed"  # type: ignore[misc]


def test_snapshot_is_stale_once_max_age_reached() -> None:
    snapshot = InstalledStateSnapshot(buckets=(), apps=(), captured_at=100.0)

    assert not snapshot.is_stale(now=219.9, max_age_sec=120)
    assert snapshot.is_stale(now=220.0, max_age_sec=120)


def test_bucket_confirmation_texts() -> None:
    pending = BucketConfirmation(
        package="foo", bucket_name="Foo_Bar", repository="https://github.com/Foo/Bar"
    )

    assert pending.title == 'Bucket "Foo_Bar" is not installed.'
    assert pending.description == (
        'Do you want to install it from the repository "https://github.com/Foo/Bar"?'
    )
    assert pending.install_target == "Foo_Bar/foo"
