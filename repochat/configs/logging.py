"""
RepoChat Logging

All components log under the "repochat" logger namespace via get_logger().
setup_logging() is called once by the server entry point.

Environment:
    REPOCHAT_DEBUG: "true"/"1"/"yes" enables DEBUG level
    REPOCHAT_LOG_FILE: Log file path; empty string logs to stderr only
                       (default: $REPOCHAT_DATA_PATH/server.log)
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from repochat.configs.paths import get_data_path

ROOT_LOGGER = "repochat"
LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# server.log rotation
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def _debug_from_env() -> bool:
    return os.environ.get("REPOCHAT_DEBUG", "").strip().lower() in ("true", "1", "yes")


def resolve_log_file(log_file: Optional[str] = None) -> Optional[Path]:
    """
    Decide where the log file goes.

    An explicit argument wins over REPOCHAT_LOG_FILE; either set to "" turns
    file logging off. With neither set, logs go to the data directory.
    """
    if log_file is None:
        log_file = os.environ.get("REPOCHAT_LOG_FILE")
    if log_file is None:
        return get_data_path() / "server.log"
    return Path(log_file).expanduser() if log_file else None


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler.setLevel(level)
    return handler


def setup_logging(
    debug: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the repochat logger. Safe to call again; handlers are replaced.

    When a log file is in use stderr only carries warnings, so the console
    stays quiet while the file gets the full stream.

    Returns:
        The "repochat" logger
    """
    level = logging.DEBUG if (_debug_from_env() if debug is None else debug) else logging.INFO
    path = resolve_log_file(log_file)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    logger.addHandler(_handler(logging.StreamHandler(sys.stderr), logging.WARNING if path else level))

    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        logger.addHandler(_handler(file_handler, level))
        logger.info(f"Logging to file: {path}")

    return logger


def get_logger(component: str) -> logging.Logger:
    """Logger for a component, e.g. get_logger("sync.engine") -> repochat.sync.engine."""
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")
