"""Logging setup shared by the CLI and embedding applications.

Library modules only create loggers with ``logging.getLogger(__name__)``;
handlers are attached here, once, by whoever owns the process.
"""

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7
LOG_LEVEL_ENV = "POCKETLEDGER_LOG_LEVEL"

# Loggers that are too chatty below WARNING
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
]


def resolve_level(level: Optional[int | str] = None) -> int:
    """Turn a level name or number into a logging level.

    Falls back to POCKETLEDGER_LOG_LEVEL, then WARNING.

    Raises:
        ValueError: If the level name is unknown
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}'")
    return resolved


def remove_handlers() -> None:
    """Detach the handlers installed by setup_logging, leaving others alone."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_pocketledger", False):
            root_logger.removeHandler(handler)
            handler.close()


def setup_logging(level: Optional[int | str] = None, log_file: Optional[str | Path] = None) -> logging.Logger:
    """Configure the root logger for pocketledger.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Level for the handlers (name or number); defaults to the
            POCKETLEDGER_LOG_LEVEL environment variable, then WARNING
        log_file: Optional file that also receives the log, rotated daily

    Returns:
        The configured root logger
    """
    console_level = resolve_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(console_level)
    remove_handlers()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # stderr keeps command output on stdout clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    console_handler._pocketledger = True
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=log_path,
            when="midnight",
            interval=1,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(console_level)
        file_handler.setFormatter(formatter)
        file_handler._pocketledger = True
        root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.debug("Logging initialized at %s", logging.getLevelName(console_level))
    return root_logger
