"""
Logging setup for the ``dabootstrap`` CLI.

``main.py`` calls ``setup_logging`` once; modules just use
``logging.getLogger(__name__)``. Operator-facing progress does not go
through logging (see ``ui/cli/reporter.py``), so the console handler
stays quiet at the default WARNING level.

Level precedence: ``-v`` / ``-q`` / ``--debug``  >  ``DAB_LOG_LEVEL``  >  WARNING.
``DAB_LOG_FILE`` adds a file handler at ``DAB_LOG_FILE_LEVEL`` (default:
the console level).
"""

from __future__ import annotations

import logging
import sys

_FILE_FORMAT = ("%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s", "%Y-%m-%d %H:%M:%S")

# (max level, format, datefmt): first row whose level >= the console level wins
_CONSOLE_FORMATS = [
    (logging.DEBUG, "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(name)s: %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(levelname)s: %(message)s", None),
]


def _level(name: str | None, default: int = logging.WARNING) -> int:
    """Numeric level for ``name``; unknown or empty names give ``default``."""
    if not name:
        return default
    value = logging.getLevelName(name.strip().upper())
    return value if isinstance(value, int) else default


def _console_formatter(level: int) -> logging.Formatter:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_CONSOLE_FORMATS[-1][1])


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with a stderr handler (and a file one).

    Args:
        level: Console level name.
        log_file: Also log to this file.
        log_file_level: Level for the file handler; defaults to ``level``.
    """
    console_level = _level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _level(log_file_level, default=console_level)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(*_FILE_FORMAT))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False
