"""Logging for **BinranSearch**.

Every module logs through a child of the ``BinranSearch`` logger::

    from binran_search.logger import get_logger
    logger = get_logger("crawler")   # -> "BinranSearch.crawler"

At import time the project logger writes to stdout only. The CLI calls
:func:`configure` again with the level, format and optional log file the
user asked for; the file handler rotates at 5 MiB.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

LOGGER_NAME: Final[str] = "BinranSearch"
_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_LevelT = Union[int, str]


def _with_format(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the project logger and apply *level*.

    *log_file* adds a rotating file handler next to the stdout one.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for old in list(lg.handlers):
        lg.removeHandler(old)
        old.close()
    lg.addHandler(_with_format(logging.StreamHandler(sys.stdout), log_format))
    if log_file is not None:
        file_handler = RotatingFileHandler(
            str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        lg.addHandler(_with_format(file_handler, log_format))
    lg.propagate = False
    return lg


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the project logger, or its child ``BinranSearch.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


logger: logging.Logger = configure()

__all__ = ["logger", "configure", "get_logger", "LOGGER_NAME"]
