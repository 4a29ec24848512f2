import threading
from enum import Enum
from typing import Callable, Protocol

from logly import logger

from scoopsearch.application.bucket_resolver import BucketResolver
from scoopsearch.application.installed_state_cache import InstalledStateCache
from scoopsearch.core.scoop_types import (
    BucketConfirmation,
    SearchResult,
    Severity,
    StatusMessage,
)
from scoopsearch.infra.scoop_cli import CommandResult


class ScoopCommands(Protocol):
    def update(self, timeout_sec: int = 300) -> CommandResult: ...

    def bucket_add(
        self, name: str, repository: str | None = None, timeout_sec: int = 900
    ) -> CommandResult: ...

    def install(self, target: str, timeout_sec: int = 900) -> CommandResult: ...


class InstallState(str, Enum):
    IDLE = "idle"
    CHECKING_BUCKET = "checking_bucket"
    BUCKET_KNOWN = "bucket_known"
    AWAITING_BUCKET_CONFIRMATION = "awaiting_bucket_confirmation"
    INSTALLING = "installing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_BUSY_STATES = frozenset(
    {InstallState.CHECKING_BUCKET, InstallState.BUCKET_KNOWN, InstallState.INSTALLING}
)


class InstallOrchestrator:
    """Drives the check-bucket, confirm, add-bucket, install sequence.

    Every step blocks on an external `scoop` process, so call `begin()` and
    `confirm()` from a background thread. Progress is reported through `report`.

    The `scoop update` step runs after the installed-bucket lookup and is awaited
    before continuing; a failure there is reported but does not stop the install.
    """

    def __init__(
        self,
        cli: ScoopCommands,
        resolver: BucketResolver,
        cache: InstalledStateCache,
        report: Callable[[StatusMessage], None] | None = None,
        update_timeout_sec: int = 300,
        install_timeout_sec: int = 900,
    ) -> None:
        self._cli = cli
        self._resolver = resolver
        self._cache = cache
        self._report = report or (lambda _message: None)
        self._update_timeout_sec = update_timeout_sec
        self._install_timeout_sec = install_timeout_sec
        self._lock = threading.Lock()
        self._state = InstallState.IDLE
        self._pending: BucketConfirmation | None = None

    @property
    def state(self) -> InstallState:
        return self._state

    @property
    def pending(self) -> BucketConfirmation | None:
        return self._pending

    @property
    def busy(self) -> bool:
        return self._state in _BUSY_STATES

    def begin(self, result: SearchResult) -> BucketConfirmation | None:
        """Starts installing `result`.

        Returns:
            A confirmation to show the user when the package's bucket is not
            installed yet, otherwise None (the install already ran or failed).
        """
        with self._lock:
            if self._state in _BUSY_STATES:
                logger.info(f"Install of {result.name} ignored; another install is running")
                self._emit("Another installation is already running.")
                return None
            self._state = InstallState.CHECKING_BUCKET
            self._pending = None

        package = result.name
        repository = result.metadata.repository
        logger.info(f"Install requested package={package} repository={repository}")
        self._emit("Checking bucket before installation...", progress=10)

        try:
            bucket = self._resolver.find_installed_bucket_by_source(repository)
            self._emit("Updating Scoop...", progress=25)
            self._update()
            self._emit("Update finished.", progress=50)

            if bucket is not None:
                with self._lock:
                    self._state = InstallState.BUCKET_KNOWN
                self._install(f"{bucket.name}/{package}")
                return None

            bucket_name = self._resolver.resolve_bucket_name(repository)
            pending = BucketConfirmation(
                package=package,
                bucket_name=bucket_name,
                repository=repository,
                official=self._resolver.is_official_bucket(bucket_name),
            )
        except Exception as e:
            self._fail(str(e))
            return None

        with self._lock:
            self._pending = pending
            self._state = InstallState.AWAITING_BUCKET_CONFIRMATION
        logger.info(f"Awaiting confirmation to add bucket {pending.bucket_name}")
        return pending

    def confirm(self, pending: BucketConfirmation) -> bool:
        """Adds the pending bucket and installs the package.

        Returns:
            True if the package was installed.
        """
        with self._lock:
            if (
                self._state is not InstallState.AWAITING_BUCKET_CONFIRMATION
                or self._pending != pending
            ):
                logger.warning(f"Ignoring stale bucket confirmation for {pending.bucket_name}")
                return False
            self._pending = None
            self._state = InstallState.INSTALLING

        self._emit(
            f'Installing bucket "{pending.bucket_name}" from repository '
            f'"{pending.repository}"...',
            progress=50,
        )
        try:
            if pending.official:
                self._cli.bucket_add(pending.bucket_name, timeout_sec=self._install_timeout_sec)
            else:
                self._cli.bucket_add(
                    pending.bucket_name,
                    pending.repository,
                    timeout_sec=self._install_timeout_sec,
                )
        except Exception as e:
            self._fail(str(e))
            return False

        self._emit(f'Bucket "{pending.bucket_name}" added.', progress=75)
        return self._install(pending.install_target, bucket_added=True)

    def decline(self) -> None:
        with self._lock:
            if self._state is not InstallState.AWAITING_BUCKET_CONFIRMATION:
                return
            if self._pending is not None:
                logger.info(f"Bucket confirmation declined for {self._pending.bucket_name}")
            self._pending = None
            self._state = InstallState.IDLE

    def _update(self) -> None:
        try:
            self._cli.update(timeout_sec=self._update_timeout_sec)
        except Exception as e:
            logger.warning(f"scoop update failed, continuing: {e}")
            self._emit(f"Error updating Scoop: {e}", severity=Severity.ERROR)

    def _install(self, target: str, bucket_added: bool = False) -> bool:
        with self._lock:
            self._state = InstallState.INSTALLING
        self._emit(f'Installing package "{target}"...', indeterminate=True)
        try:
            self._cli.install(target, timeout_sec=self._install_timeout_sec)
        except Exception as e:
            logger.error(f"Install of {target} failed: {e}")
            with self._lock:
                self._state = InstallState.FAILED
            self._emit(
                f'Error installing package "{target}": {e}', severity=Severity.ERROR
            )
            if bucket_added:
                self._refresh_cache()
            return False

        self._refresh_cache()
        with self._lock:
            self._state = InstallState.SUCCEEDED
        logger.success(f"Installed {target}")
        self._emit(
            f'Package "{target}" installed successfully.',
            severity=Severity.SUCCESS,
            progress=100,
        )
        return True

    def _refresh_cache(self) -> None:
        try:
            self._cache.refresh()
        except Exception as e:
            logger.warning(f"Installed state refresh failed: {e}")

    def _fail(self, message: str) -> None:
        logger.error(f"Install failed: {message}")
        with self._lock:
            self._pending = None
            self._state = InstallState.FAILED
        self._emit(message, severity=Severity.ERROR)

    def _emit(
        self,
        text: str,
        severity: Severity = Severity.INFO,
        progress: int | None = None,
        indeterminate: bool = False,
    ) -> None:
        self._report(
            StatusMessage(
                text=text,
                severity=severity,
                progress=progress,
                indeterminate=indeterminate,
            )
        )
