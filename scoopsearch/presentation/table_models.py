from PySide6.QtCore import QAbstractTableModel, QModelIndex, QPersistentModelIndex, Qt

from scoopsearch.core.result_items import ResultItem
from scoopsearch.core.scoop_types import ScoopApp, ScoopBucket


class _RowTableModel(QAbstractTableModel):
    """Read-only table model over a list of rows with fixed headers."""

    _HEADERS: tuple[str, ...] = ()

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._rows: list = []

    def rowCount(
        self,
        /,
        parent: QModelIndex | QPersistentModelIndex = QModelIndex(),
    ) -> int:
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(
        self,
        /,
        parent: QModelIndex | QPersistentModelIndex = QModelIndex(),
    ) -> int:
        if parent.isValid():
            return 0
        return len(self._HEADERS)

    def data(
        self,
        index: QModelIndex | QPersistentModelIndex,
        /,
        role: int = Qt.ItemDataRole.DisplayRole,
    ) -> object | None:
        if not index.isValid():
            return None
        if role not in (Qt.ItemDataRole.DisplayRole, Qt.ItemDataRole.EditRole):
            return None
        return self._cell(self._rows[index.row()], index.column())

    def headerData(
        self,
        section: int,
        orientation: Qt.Orientation,
        role: int = Qt.ItemDataRole.DisplayRole,
    ):
        if role != Qt.ItemDataRole.DisplayRole:
            return None
        if orientation != Qt.Orientation.Horizontal:
            return None
        if 0 <= section < len(self._HEADERS):
            return self._HEADERS[section]
        return None

    def set_rows(self, rows: list) -> None:
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()

    def row_at(self, row: int):
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    def _cell(self, row, column: int) -> object | None:
        raise NotImplementedError


class ResultTableModel(_RowTableModel):
    """Search results in the order the index ranked them."""

    _HEADERS = ("Name", "Version", "Bucket", "Description")

    def _cell(self, row: ResultItem, column: int) -> object | None:
        if column == 0:
            return row.title
        if column == 1:
            return row.result.version
        if column == 2:
            official = [tag.text for tag in row.tags if tag.official]
            return official[0] if official else ""
        if column == 3:
            return row.subtitle
        return None

    def item_at(self, row: int) -> ResultItem | None:
        return self.row_at(row)


class InstalledTableModel(_RowTableModel):
    """Installed apps, sorted by source bucket then name."""

    _HEADERS = ("Name", "Version", "Source", "Updated", "Info")

    def set_apps(self, apps: list[ScoopApp]) -> None:
        self.set_rows(
            sorted(apps, key=lambda a: (a.source.casefold(), a.name.casefold()))
        )

    def _cell(self, row: ScoopApp, column: int) -> object | None:
        if column == 0:
            return row.name
        if column == 1:
            return row.version
        if column == 2:
            return row.source
        if column == 3:
            return row.updated
        if column == 4:
            return row.info
        return None


class BucketTableModel(_RowTableModel):
    _HEADERS = ("Name", "Source")

    def _cell(self, row: ScoopBucket, column: int) -> object | None:
        if column == 0:
            return row.name
        if column == 1:
            return row.source
        return None
