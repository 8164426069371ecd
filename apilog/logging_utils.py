# --------------------------------------------------
# logging_utils.py
# --------------------------------------------------
# Sets up application-wide structured logging.
#
#   ✔ Every sink uses LogFormat (one JSON record each)
#   ✔ Console sink on stdout
#   ✔ Size-limited rolling file sink (optional)
#   ✔ Minimum level + per-source overrides
#   ✔ logging_scope(): setup on entry, flush + close
#     on every exit path
#
# --------------------------------------------------

import logging
import os
import sys
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from typing import Iterator, List

from .config import SimpleSettings, parse_overrides
from .log_format import LogFormat
from .log_settings import APP_LOGGER_NAME, to_log_level


def setup_logging(settings: SimpleSettings) -> List[logging.Handler]:
    """
    Configure the root logger and return the installed handlers.
    Ensures:
      - No duplicate handlers (root handlers are replaced)
      - One record format for every sink
      - Level names are valid, otherwise ValueError
    """
    level = to_log_level(settings.LOG_LEVEL)
    overrides = parse_overrides(settings.LOG_LEVEL_OVERRIDES)

    formatter = LogFormat()
    handlers: List[logging.Handler] = []

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    handlers.append(console)

    if settings.LOG_FILE_PATH:
        os.makedirs(settings.LOG_FILE_PATH, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(settings.LOG_FILE_PATH, settings.LOG_FILE_NAME),
            maxBytes=settings.LOG_FILE_SIZE_LIMIT_MB * 1024 * 1024,
            backupCount=settings.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers = []
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

    for name, override in overrides.items():
        logging.getLogger(name).setLevel(override)

    return handlers


def close_logging(handlers: List[logging.Handler]) -> None:
    """Flush, close and detach handlers installed by setup_logging()."""
    root = logging.getLogger()
    for handler in handlers:
        try:
            handler.flush()
        finally:
            handler.close()
            root.removeHandler(handler)


@contextmanager
def logging_scope(settings: SimpleSettings) -> Iterator[logging.Logger]:
    """
    Logging lifecycle for one process run.

        with logging_scope(settings) as logger:
            ...

    Yields the application logger; handlers are flushed and
    closed however the block exits.
    """
    handlers = setup_logging(settings)
    try:
        yield logging.getLogger(APP_LOGGER_NAME)
    finally:
        close_logging(handlers)
