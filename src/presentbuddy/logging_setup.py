"""Log file setup for PresentBuddy.

Two size-rotated files under the data directory: ``presentbuddy.log`` with
everything from INFO up and ``errors.log`` with errors only. A console
handler is added when DEBUG is on.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import config

MAX_LOG_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(log_dir: Path | None = None, debug: bool | None = None) -> Path:
    """Install the rotating file handlers on the root logger.

    Safe to call more than once; later calls are no-ops.

    Returns:
        Directory holding the log files
    """
    global _configured

    log_dir = Path(log_dir) if log_dir is not None else config.LOG_DIR
    if _configured:
        return log_dir

    debug = config.DEBUG if debug is None else debug
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    app_handler = RotatingFileHandler(
        log_dir / "presentbuddy.log", maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    app_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    app_handler.setFormatter(formatter)

    error_handler = RotatingFileHandler(
        log_dir / "errors.log", maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    root.addHandler(app_handler)
    root.addHandler(error_handler)

    if debug:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    _configured = True
    return log_dir
