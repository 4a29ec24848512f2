from pathlib import Path
from typing import Final

from logly import _LoggerProxy, logger

LOG_DIR_PATH: Final[Path] = Path(__file__).parent.parent / "logs"


def init_logger(level: str = "INFO", log_dir: Path = LOG_DIR_PATH) -> _LoggerProxy:
    """Initialize the logger.

    Configures console output and a size-limited file sink under `log_dir`.

    Args:
        level: Minimum level to emit.
        log_dir: Directory receiving `app.log`.
    """
    logger.configure(
        level=level,
        color=True,
        console=True,
        auto_sink=True,
    )

    logger.add(f"{log_dir}/app.log", size_limit="10MB", retention=3)

    logger.success("logger initialized!")

    return logger
