from typing import Callable

from logly import logger
from PySide6.QtCore import QObject, Signal

from scoopsearch.application.install_orchestrator import InstallOrchestrator, InstallState
from scoopsearch.application.installed_state_cache import InstalledStateCache
from scoopsearch.core.scoop_types import (
    BucketConfirmation,
    SearchResult,
    Severity,
    StatusMessage,
)
from scoopsearch.infra.qt_tasks import BackgroundRunner


class ScoopController(QObject):
    """Runs install and installed-state jobs in the background and exposes results via Qt signals."""

    status = Signal(object)  # StatusMessage
    confirmation_requested = Signal(object)  # BucketConfirmation
    install_finished = Signal(str, bool)  # package, succeeded
    loaded = Signal(object)  # InstalledStateSnapshot
    busy_changed = Signal(bool)

    def __init__(
        self,
        orchestrator_factory: Callable[[Callable[[StatusMessage], None]], InstallOrchestrator],
        cache: InstalledStateCache,
        dispatch: Callable[[Callable[[], None], str], None] | None = None,
        parent: QObject | None = None,
    ):
        """Initializes the controller.

        Args:
            orchestrator_factory: Builds the orchestrator given the status callback.
            cache: Installed-state cache backing the management views.
            dispatch: Runs a callable off the GUI thread.
            parent: Optional Qt parent object.
        """
        super().__init__(parent)
        self._orchestrator = orchestrator_factory(self.status.emit)
        self._cache = cache
        self._dispatch = dispatch or BackgroundRunner()
        self._job_queued = False

    @property
    def orchestrator(self) -> InstallOrchestrator:
        return self._orchestrator

    def is_busy(self) -> bool:
        return self._job_queued or self._orchestrator.busy

    def install(self, result: SearchResult) -> None:
        """Starts the install flow for a search result."""
        if self.is_busy():
            self.status.emit(StatusMessage("Another installation is already running."))
            return

        def job() -> None:
            self.busy_changed.emit(True)
            try:
                pending = self._orchestrator.begin(result)
            finally:
                self._job_queued = False
                self.busy_changed.emit(False)
            if pending is not None:
                self.confirmation_requested.emit(pending)
            else:
                self._finish(result.name)

        self._job_queued = True
        self._dispatch(job, f"install {result.name}")

    def accept(self, pending: BucketConfirmation) -> None:
        """Adds the confirmed bucket, then installs the package."""
        if self._job_queued:
            logger.warning(f"Confirmation for {pending.bucket_name} ignored; a job is queued")
            return

        def job() -> None:
            self.busy_changed.emit(True)
            try:
                self._orchestrator.confirm(pending)
            finally:
                self._job_queued = False
                self.busy_changed.emit(False)
            self._finish(pending.package)

        self._job_queued = True
        self._dispatch(job, f"bucket add {pending.bucket_name}")

    def decline(self, pending: BucketConfirmation) -> None:
        logger.info(f"Bucket {pending.bucket_name} not added; install of {pending.package} skipped")
        self._orchestrator.decline()

    def refresh_installed_state(self, skip_cache: bool = False) -> None:
        """Loads installed buckets and apps via the cache in the background."""

        def job() -> None:
            try:
                snapshot = self._cache.get_installed_state(skip_cache=skip_cache)
            except Exception as e:
                logger.error(f"Error fetching installed state: {e}")
                self.status.emit(
                    StatusMessage(f"Error fetching installed state: {e}", Severity.ERROR)
                )
                return
            self.loaded.emit(snapshot)

        self._dispatch(job, "scoop export")

    def _finish(self, package: str) -> None:
        succeeded = self._orchestrator.state is InstallState.SUCCEEDED
        self.install_finished.emit(package, succeeded)
        if succeeded and self._cache.snapshot is not None:
            self.loaded.emit(self._cache.snapshot)
