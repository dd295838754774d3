"""Logging for **EdgeESI**.

The package logs through one named logger, :data:`logger`::

    from edge_esi.logger import logger

The CLI calls :func:`init_logging` to pick level, format and an optional
rotating logfile. Failed includes are reported in one shape by
:func:`log_include_failure`, so every failure line carries the fragment URL,
the HTTP status (``-`` when the fetch itself raised) and the reason.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, Union

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "EdgeESI"
_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _formatted(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the EdgeESI logger.

    Output always goes to stdout; *log_file* adds a rotating file
    (5 MiB, three backups).
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level)
    lg.handlers.clear()
    lg.addHandler(_formatted(logging.StreamHandler(sys.stdout), log_format))
    if log_file is not None:
        file_handler = RotatingFileHandler(
            filename=str(log_file), maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8"
        )
        lg.addHandler(_formatted(file_handler, log_format))
    lg.propagate = False
    return lg


def log_include_failure(url: str, reason: str, status: Optional[int] = None) -> None:
    """Warn about a fragment that could not be included."""
    logger.warning(
        "Include failed: url=%s status=%s reason=%s",
        url, "-" if status is None else status, reason,
    )


logger: logging.Logger = init_logging()

__all__ = ["logger", "init_logging", "log_include_failure"]
