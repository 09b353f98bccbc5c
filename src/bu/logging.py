"""Console logging for bu.

Messages are written as ``[YYYY-mm-dd HH:MM:SS] Info: ...`` lines, coloured
when the stream is a terminal. Info and debug go to stdout, warnings and
errors to stderr.

Verbose levels:
    -1  nothing
     0  errors and info
     1  errors, warnings and info (default)
     2  everything including debug
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

# ANSI escape codes for colored text
RED_BOLD = "\033[1;31m"
YELLOW = "\033[0;33m"
CYAN = "\033[0;36m"
MAGENTA = "\033[0;35m"
GREEN = "\033[0;32m"
RESET = "\033[0m"

LEVEL_LABELS = {
    logging.DEBUG: ("Debug", MAGENTA),
    logging.INFO: ("Info", CYAN),
    logging.WARNING: ("Warning", YELLOW),
    logging.ERROR: ("Error", RED_BOLD),
    logging.CRITICAL: ("Error", RED_BOLD),
}

# Module-level state
_handlers: list[logging.Handler] = []


class BuFormatter(logging.Formatter):
    """Formatter producing the timestamped ``Label: message`` lines."""

    def __init__(self, color: bool = False):
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        label, color = LEVEL_LABELS.get(record.levelno, (record.levelname.title(), ""))
        line = f"[{self.formatTime(record, self.datefmt)}] {label}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        if self.color and color:
            return f"{color}{line}{RESET}"
        return line


class VerbosityFilter(logging.Filter):
    """Pass records allowed by a bu verbose level."""

    def __init__(self, verbose_level: int):
        super().__init__()
        self.verbose_level = verbose_level

    def filter(self, record: logging.LogRecord) -> bool:
        level = self.verbose_level
        if record.levelno >= logging.ERROR:
            return level > -1
        if record.levelno >= logging.WARNING:
            return level >= 1
        if record.levelno >= logging.INFO:
            return level >= 0
        return level >= 2


class _StreamSplitFilter(logging.Filter):
    def __init__(self, errors: bool):
        super().__init__()
        self.errors = errors

    def filter(self, record: logging.LogRecord) -> bool:
        return (record.levelno >= logging.WARNING) == self.errors


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(
    verbose_level: int = 1,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> logging.Logger:
    """Install console handlers on the ``bu`` logger.

    Calling again replaces the previously installed handlers.

    Args:
        verbose_level: bu verbose level (-1..2)
        stdout: Stream for info/debug (default sys.stdout)
        stderr: Stream for warnings/errors (default sys.stderr)

    Returns:
        The configured ``bu`` logger
    """
    close_logging()

    bu_logger = logging.getLogger("bu")
    bu_logger.setLevel(logging.DEBUG)
    bu_logger.propagate = False

    for stream, errors in ((stdout or sys.stdout, False), (stderr or sys.stderr, True)):
        handler = logging.StreamHandler(stream)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(BuFormatter(color=_is_tty(stream)))
        handler.addFilter(VerbosityFilter(verbose_level))
        handler.addFilter(_StreamSplitFilter(errors))
        bu_logger.addHandler(handler)
        _handlers.append(handler)

    return bu_logger


def close_logging() -> None:
    """Remove the handlers installed by configure_logging."""
    bu_logger = logging.getLogger("bu")
    bu_logger.propagate = True
    while _handlers:
        handler = _handlers.pop()
        bu_logger.removeHandler(handler)
        handler.close()
