from PySide6.QtCore import Qt

from scoopsearch.core.result_items import build_result_item
from scoopsearch.core.scoop_types import ScoopApp, ScoopBucket, SearchResult
from scoopsearch.presentation.main_window import details_html
from scoopsearch.presentation.table_models import (
    BucketTableModel,
    InstalledTableModel,
    ResultTableModel,
)


def test_result_table_model_exposes_item_columns() -> None:
    model = ResultTableModel()
    item = build_result_item(
        SearchResult(name="curl", version="8.5.0", description="Transfer data"),
        bucket_name="main",
    )

    model.set_rows([item])

    assert model.rowCount() == 1
    assert model.columnCount() == 4
    assert [model.data(model.index(0, c)) for c in range(4)] == [
        "curl",
        "8.5.0",
        "main",
        "Transfer data",
    ]
    assert model.headerData(2, Qt.Orientation.Horizontal) == "Bucket"
    assert model.item_at(0) is item
    assert model.item_at(5) is None


def test_installed_table_model_sorts_by_source_then_name() -> None:
    model = InstalledTableModel()

    model.set_apps(
        [
            ScoopApp(name="vlc", version="3", source="extras"),
            ScoopApp(name="git", version="2", source="main"),
            ScoopApp(name="7zip", version="23", source="main"),
        ]
    )

    assert [model.data(model.index(r, 0)) for r in range(3)] == ["vlc", "7zip", "git"]


def test_bucket_table_model_columns() -> None:
    model = BucketTableModel()
    model.set_rows([ScoopBucket(name="main", source="https://github.com/ScoopInstaller/Main")])

    assert model.data(model.index(0, 1)) == "https://github.com/ScoopInstaller/Main"
    assert model.data(model.index(0, 0), Qt.ItemDataRole.ToolTipRole) is None


def test_details_html_escapes_text_and_links_urls() -> None:
    item = build_result_item(
        SearchResult(name="a<b>", homepage="https://example.com/?a=1&b=2")
    )

    html = details_html(item)

    assert "a&lt;b&gt;" in html
    assert 'href="https://example.com/?a=1&amp;b=2"' in html
