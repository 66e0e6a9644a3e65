"""Application-wide logging to a rotating file in the app-support dir."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from .settings import APP_SUPPORT_DIR

LOGGER_NAME = "pomodo"
LOG_DIR = APP_SUPPORT_DIR / "logs"
LOG_FILE = "pomodo.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

_logger: logging.Logger | None = None


def configure_logging(
    level: int = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """Attach the file handler to the ``pomodo`` logger, once."""
    global _logger
    if _logger is not None:
        return _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if not logger.handlers:
        log_dir = log_dir or LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_dir / LOG_FILE,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        logger.addHandler(handler)
    logger.propagate = False

    _logger = logger
    return _logger
