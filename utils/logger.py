"""
utils/logger.py
---------------
Centralized logging configuration.
All modules should use `get_logger(__name__)` to obtain a logger instance.
`attach_daily_log()` additionally routes records into the day-file log.
"""

import logging
import sys
from typing import Optional

from config import LOG_LEVEL
from utils.daily_log import DailyFileHandler, DailyLog

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_initialized = False


def _init_logging() -> None:
    """Configure the root logger once: stdout, level from LOG_LEVEL."""
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    _init_logging()
    return logging.getLogger(name)


def attach_daily_log(
    daily_log: Optional[DailyLog] = None,
    level: int = logging.ERROR,
    logger: Optional[logging.Logger] = None,
) -> DailyFileHandler:
    """
    Send records at `level` and above into the day-file log.

    Args:
        daily_log: Target log; defaults to ``DailyLog()`` under LOG_DIR.
        level: Lowest level that reaches the file.
        logger: Logger to attach to; defaults to the root logger.

    Returns:
        The attached handler, so callers can remove it again.
    """
    _init_logging()
    handler = DailyFileHandler(daily_log or DailyLog(), level)
    handler.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
    (logger or logging.getLogger()).addHandler(handler)
    return handler
