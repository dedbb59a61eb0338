"""Debug logging setup.

The TUI owns the terminal, so log records never go to a stream handler: they
are written to ``debug.log`` in the config directory when debugging is
enabled (``--debug`` or ``SQLI_DEBUG=1``) and dropped otherwise.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILE_NAME = "debug.log"


def debug_enabled_from_env() -> bool:
    return os.environ.get("SQLI_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}


def setup_logging(debug: bool, log_dir: Path | None = None) -> Path | None:
    """Configure the ``sqli`` logger.

    Returns the log file path when file logging was enabled, otherwise None.
    Safe to call more than once; previous handlers are replaced.
    """
    logger = logging.getLogger("sqli")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    if not (debug or debug_enabled_from_env()):
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.WARNING)
        return None

    if log_dir is None:
        from sqli.shared.core.store import CONFIG_DIR

        log_dir = CONFIG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    file_handler = TimedRotatingFileHandler(
        filename=str(log_file),
        when="midnight",
        interval=1,
        backupCount=7,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.setLevel(logging.DEBUG)
    logger.addHandler(file_handler)
    logger.info("sqli debug session started (file=%s)", os.fspath(log_file))
    return log_file
