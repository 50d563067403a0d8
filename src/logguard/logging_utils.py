"""
Logging setup for the logguard package logger.

Modules log through logging.getLogger(__name__); this module only decides
where those records go. Handlers are attached to the "logguard" logger,
never to the root logger, so embedding applications keep control.
"""

import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "logguard"

# ANSI color codes
COLOR_RESET = "\033[0m"
COLORS = {
    logging.DEBUG: "\033[36m",    # Cyan
    logging.INFO: "\033[32m",     # Green
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",    # Red
    logging.CRITICAL: "\033[41m", # Red background
}

_STREAM_FORMAT = "%(name)s [%(levelname)s]: %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def map_level(level: Union[int, str, None], default: int = logging.WARNING) -> int:
    """
    "debug" / "DEBUG" / 10 -> logging.DEBUG.
    Unknown names fall back to default.
    """
    if isinstance(level, int):
        return level
    if not level:
        return default
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else default


class ColorFormatter(logging.Formatter):
    """Colors the level name only."""

    def format(self, record: logging.LogRecord) -> str:
        color = COLORS.get(record.levelno, COLOR_RESET)
        original = record.levelname
        record.levelname = f"{color}{original}{COLOR_RESET}"
        try:
            return logging.Formatter(_STREAM_FORMAT, _DATE_FORMAT).format(record)
        finally:
            # Other handlers see the same record.
            record.levelname = original


def build_stream_handler(level: int, color: bool = True) -> logging.Handler:
    h = logging.StreamHandler(sys.stderr)
    h.setLevel(level)
    h.setFormatter(ColorFormatter() if color else logging.Formatter(_STREAM_FORMAT, _DATE_FORMAT))
    return h


def build_file_handler(log_file: str, level: int) -> logging.Handler:
    h = logging.FileHandler(log_file, encoding="utf-8")
    h.setLevel(level)
    h.setFormatter(logging.Formatter(_FILE_FORMAT, _DATE_FORMAT))
    return h


def configure_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[str] = None,
    color: Optional[bool] = None,
) -> logging.Logger:
    """
    Route the package logger to stderr (and log_file, if given).

    Calling it again replaces the handlers instead of adding more.
    """
    resolved = map_level(level)
    if color is None:
        color = sys.stderr.isatty()

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolved)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(build_stream_handler(resolved, color=color))
    if log_file is not None:
        logger.addHandler(build_file_handler(log_file, resolved))
    return logger
