import os
import sys

import requests
from PySide6.QtWidgets import QApplication

from scoopsearch.application.bucket_resolver import BucketResolver
from scoopsearch.application.install_orchestrator import InstallOrchestrator
from scoopsearch.application.installed_state_cache import InstalledStateCache
from scoopsearch.application.scoop_controller import ScoopController
from scoopsearch.application.search_session import SearchSessionController
from scoopsearch.config import AppConfig
from scoopsearch.infra.scoop_cli import ScoopCli
from scoopsearch.infra.scoop_search_client import BucketRegistrySource, ScoopSearchClient
from scoopsearch.logging import init_logger
from scoopsearch.presentation.main_window import MainWindow


def main() -> int:
    logger = init_logger(level=os.environ.get("SCOOPSEARCH_LOG_LEVEL", "INFO"))
    config = AppConfig.from_env()
    logger.info(f"Starting with {config}")

    app = QApplication(sys.argv)

    http = requests.Session()
    cli = ScoopCli()
    cache = InstalledStateCache(
        cli,
        max_age_sec=config.cache_duration_sec,
        timeout_sec=config.export_timeout_sec,
    )
    resolver = BucketResolver(
        BucketRegistrySource(config, http).fetch, cache, config.registry_policy
    )
    client = ScoopSearchClient(config, http)

    session = SearchSessionController(
        client, resolver, debounce_ms=config.search_debounce_ms
    )
    scoop = ScoopController(
        lambda report: InstallOrchestrator(
            cli,
            resolver,
            cache,
            report,
            update_timeout_sec=config.update_timeout_sec,
            install_timeout_sec=config.install_timeout_sec,
        ),
        cache,
    )

    window = MainWindow(session, scoop)
    window.show()
    try:
        return app.exec()
    finally:
        session.cancel()
        client.close()


if __name__ == "__main__":
    sys.exit(main())
