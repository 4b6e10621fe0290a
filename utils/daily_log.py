"""
utils/daily_log.py
------------------
Plain-text exception log, one file per calendar day.

Files live in ``<root>/<directory>/<YYYY-MM-DD>.txt``. Every entry is
``Time : HH:MM:SS\\r\\n<message>\\r\\n``; later entries of the same day
are written in front of the older ones, separated by a blank line.
"""

import logging
import os
from datetime import datetime, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from config import APP_ROOT, LOG_DIR, LOG_TIMEZONE

_NEWLINE = "\r\n"


class DailyLog:
    """Writes messages into the log file of the current day."""

    def __init__(
        self,
        root: Optional[str] = None,
        directory: str = LOG_DIR,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.path = os.path.join(root or APP_ROOT, directory)
        if tz is None and LOG_TIMEZONE:
            tz = ZoneInfo(LOG_TIMEZONE)
        self.tz = tz
        self._clock = clock or (lambda: datetime.now(self.tz))

    def file_for(self, when: datetime) -> str:
        """Path of the log file that holds entries written at `when`."""
        return os.path.join(self.path, when.strftime("%Y-%m-%d") + ".txt")

    def write(self, message: str) -> None:
        """
        Persist `message` into today's log file.

        Creates the log directory and the day file when missing.

        Raises:
            OSError: If the directory or the file cannot be written.
        """
        now = self._clock()
        if not os.path.isdir(self.path):
            os.makedirs(self.path, mode=0o777, exist_ok=True)

        log_file = self.file_for(now)
        if not os.path.exists(log_file):
            with open(log_file, "a+", encoding="utf-8", newline="") as fh:
                fh.write(self._entry(now, message))
        else:
            self._prepend(log_file, now, message)

    def _prepend(self, log_file: str, now: datetime, message: str) -> None:
        with open(log_file, "r", encoding="utf-8", newline="") as fh:
            existing = fh.read()
        with open(log_file, "w", encoding="utf-8", newline="") as fh:
            fh.write(self._entry(now, message) + _NEWLINE + existing)

    @staticmethod
    def _entry(now: datetime, message: str) -> str:
        return f"Time : {now.strftime('%H:%M:%S')}{_NEWLINE}{message}{_NEWLINE}"


class DailyFileHandler(logging.Handler):
    """logging.Handler that forwards formatted records to a DailyLog."""

    def __init__(self, daily_log: DailyLog, level: int = logging.ERROR):
        super().__init__(level)
        self.daily_log = daily_log

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.daily_log.write(self.format(record))
        except OSError:
            self.handleError(record)
