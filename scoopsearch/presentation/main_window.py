from html import escape

from PySide6.QtCore import Qt, QTimer, QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHeaderView,
    QLabel,
    QLineEdit,
    QListWidget,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QSplitter,
    QStackedWidget,
    QTableView,
    QTabWidget,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from scoopsearch.application.scoop_controller import ScoopController
from scoopsearch.application.search_session import SearchSessionController
from scoopsearch.core.result_items import SCOOP_HOMEPAGE_URL, HomeEntry, ResultItem
from scoopsearch.core.scoop_types import (
    BucketConfirmation,
    InstalledStateSnapshot,
    Severity,
    StatusMessage,
)
from scoopsearch.presentation.table_models import (
    BucketTableModel,
    InstalledTableModel,
    ResultTableModel,
)

_STATUS_TIMEOUT_MS = {Severity.INFO: 0, Severity.SUCCESS: 4000, Severity.ERROR: 8000}
_SEARCHING_MESSAGE = "Searching..."


def _polish_table(tv: QTableView) -> None:
    """Applies the shared look of the list tables."""
    tv.verticalHeader().setVisible(False)

    hh = tv.horizontalHeader()
    hh.setStretchLastSection(True)
    hh.setSectionResizeMode(0, QHeaderView.ResizeMode.Interactive)

    tv.setWordWrap(False)
    tv.setAlternatingRowColors(True)
    tv.setShowGrid(False)
    tv.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
    tv.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
    tv.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)


def details_html(item: ResultItem) -> str:
    """Renders the details pane of a result as rich text."""
    parts = [f"<h3>{escape(item.details.title)}</h3>"]
    if item.subtitle:
        parts.append(f"<p>{escape(item.subtitle)}</p>")
    rows = []
    for link in item.details.metadata:
        text = escape(link.text) or "-"
        if link.url:
            text = f'<a href="{escape(link.url, quote=True)}">{text}</a>'
        rows.append(f"<tr><td><b>{escape(link.key)}</b></td><td>{text}</td></tr>")
    parts.append(f"<table cellspacing='4'>{''.join(rows)}</table>")
    if item.details.body:
        parts.append(f"<p>{escape(item.details.body)}</p>")
    return "".join(parts)


class MainWindow(QMainWindow):
    """Main application window: search, installed apps and buckets."""

    def __init__(
        self,
        session: SearchSessionController,
        scoop: ScoopController,
    ) -> None:
        super().__init__()
        self.session = session
        self.scoop = scoop
        self._last_query = ""

        self.setWindowTitle("Scoop Search")
        self.resize(960, 640)

        self.tabs = QTabWidget(self)
        self.setCentralWidget(self.tabs)

        # ---- Search tab
        search_tab = QWidget()
        layout = QVBoxLayout(search_tab)
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search Scoop packages")
        self.search_edit.setClearButtonEnabled(True)
        layout.addWidget(self.search_edit)

        self.home_list = QListWidget()
        self.home_list.addItems(list(HomeEntry.ALL))
        self.home_list.itemActivated.connect(
            lambda item: self.on_home_entry_activated(item.text())
        )

        self.results_model = ResultTableModel(self)
        self.results_view = QTableView()
        self.results_view.setModel(self.results_model)
        _polish_table(self.results_view)
        self.results_view.doubleClicked.connect(lambda _idx: self.on_install_clicked())

        self.details = QTextBrowser()
        self.details.setOpenExternalLinks(True)

        self.install_button = QPushButton("Install")
        self.install_button.setEnabled(False)
        self.install_button.clicked.connect(self.on_install_clicked)

        details_pane = QWidget()
        details_layout = QVBoxLayout(details_pane)
        details_layout.setContentsMargins(0, 0, 0, 0)
        details_layout.addWidget(self.details)
        details_layout.addWidget(self.install_button)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.results_view)
        splitter.addWidget(details_pane)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)

        self.empty_label = QLabel()
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.stack = QStackedWidget()
        self.stack.addWidget(self.home_list)
        self.stack.addWidget(splitter)
        self.stack.addWidget(self.empty_label)
        layout.addWidget(self.stack)
        self.tabs.addTab(search_tab, "Search")

        # ---- Installed tab
        self.installed_model = InstalledTableModel(self)
        self.installed_view = QTableView()
        self.installed_view.setModel(self.installed_model)
        _polish_table(self.installed_view)
        self.tabs.addTab(self.installed_view, HomeEntry.MANAGE_APPS)

        # ---- Buckets tab
        self.bucket_model = BucketTableModel(self)
        self.bucket_view = QTableView()
        self.bucket_view.setModel(self.bucket_model)
        _polish_table(self.bucket_view)
        self.tabs.addTab(self.bucket_view, HomeEntry.MANAGE_BUCKETS)

        self.progress = QProgressBar()
        self.progress.setMaximumWidth(160)
        self.progress.setVisible(False)
        self.statusBar().addPermanentWidget(self.progress)

        # ---- Wiring
        self.search_edit.textChanged.connect(self._on_text_changed)
        self.results_view.selectionModel().currentChanged.connect(
            lambda current, _previous: self._show_details(current.row())
        )
        self.session.results_changed.connect(self.on_results_changed)
        self.session.loading_changed.connect(self.on_loading_changed)
        self.session.error.connect(self.on_search_error)
        self.scoop.status.connect(self.on_status)
        self.scoop.confirmation_requested.connect(self.on_confirmation_requested)
        self.scoop.loaded.connect(self.on_installed_state_loaded)
        self.scoop.busy_changed.connect(self.on_busy_changed)
        self.scoop.install_finished.connect(self.on_install_finished)
        self.tabs.currentChanged.connect(self.on_tab_changed)

        self.stack.setCurrentWidget(self.home_list)
        QTimer.singleShot(0, self.scoop.refresh_installed_state)

    # ---- Search
    def _on_text_changed(self, text: str) -> None:
        old, self._last_query = self._last_query, text
        self.session.on_query_changed(old, text)

    def on_loading_changed(self, loading: bool) -> None:
        # Install progress owns the status bar; only touch it when idle or ours.
        bar = self.statusBar()
        if loading:
            if not bar.currentMessage():
                bar.showMessage(_SEARCHING_MESSAGE)
        elif bar.currentMessage() == _SEARCHING_MESSAGE:
            bar.clearMessage()

    def on_search_error(self, text: str) -> None:
        self.on_status(StatusMessage(text, Severity.ERROR))

    def on_busy_changed(self, _busy: bool) -> None:
        self._sync_install_button()

    def on_results_changed(self, items: object) -> None:
        rows = [i for i in items if isinstance(i, ResultItem)] if isinstance(items, list) else []
        self.results_model.set_rows(rows)
        self.details.clear()

        if not self.session.query:
            self.stack.setCurrentWidget(self.home_list)
        elif not rows:
            self.empty_label.setText(f'No results found for "{self.session.query}".')
            self.stack.setCurrentWidget(self.empty_label)
        else:
            self.stack.setCurrentIndex(1)
            self.results_view.setCurrentIndex(self.results_model.index(0, 0))
            self.results_view.resizeColumnToContents(0)
        self._sync_install_button()

    def _show_details(self, row: int) -> None:
        item = self.results_model.item_at(row)
        if item is None:
            self.details.clear()
        else:
            self.details.setHtml(details_html(item))
        self._sync_install_button()

    def _selected_item(self) -> ResultItem | None:
        current = self.results_view.currentIndex()
        if not current.isValid():
            return None
        return self.results_model.item_at(current.row())

    def _sync_install_button(self) -> None:
        self.install_button.setEnabled(
            self._selected_item() is not None and not self.scoop.is_busy()
        )

    def on_home_entry_activated(self, text: str) -> None:
        if text == HomeEntry.MANAGE_BUCKETS:
            self.tabs.setCurrentWidget(self.bucket_view)
        elif text == HomeEntry.MANAGE_APPS:
            self.tabs.setCurrentWidget(self.installed_view)
        elif text == HomeEntry.OPEN_HOMEPAGE:
            QDesktopServices.openUrl(QUrl(SCOOP_HOMEPAGE_URL))

    # ---- Install
    def on_install_clicked(self) -> None:
        item = self._selected_item()
        if item is None:
            return
        self.scoop.install(item.result)
        self._sync_install_button()

    def on_confirmation_requested(self, pending: object) -> None:
        if not isinstance(pending, BucketConfirmation):
            return
        answer = QMessageBox.question(
            self,
            pending.title,
            pending.description,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if answer == QMessageBox.StandardButton.Yes:
            self.scoop.accept(pending)
        else:
            self.scoop.decline(pending)
            self.progress.setVisible(False)

    def on_install_finished(self, package: str, succeeded: bool) -> None:
        if not succeeded:
            self.progress.setVisible(False)
        self._sync_install_button()

    def on_status(self, message: object) -> None:
        if not isinstance(message, StatusMessage):
            return
        self.statusBar().showMessage(message.text, _STATUS_TIMEOUT_MS[message.severity])
        if message.indeterminate:
            self.progress.setRange(0, 0)
            self.progress.setVisible(True)
        elif message.progress is not None:
            self.progress.setRange(0, 100)
            self.progress.setValue(message.progress)
            self.progress.setVisible(message.progress < 100)
        elif message.severity is Severity.ERROR:
            self.progress.setVisible(False)

    # ---- Installed state
    def on_tab_changed(self, _index: int) -> None:
        if self.tabs.currentWidget() is not self.search_edit.parentWidget():
            self.scoop.refresh_installed_state()

    def on_installed_state_loaded(self, snapshot: object) -> None:
        if not isinstance(snapshot, InstalledStateSnapshot):
            return
        self.installed_model.set_apps(list(snapshot.apps))
        self.bucket_model.set_rows(list(snapshot.buckets))
        self.installed_view.resizeColumnToContents(0)
        self.bucket_view.resizeColumnToContents(0)
