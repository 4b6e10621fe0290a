"""
db/errors.py
------------
Errors raised by the database accessor after the failure has been logged.
"""

from typing import Optional


class DatabaseError(Exception):
    """Base class for every failure reported by `Database`."""

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(
            f"Unhandled Exception. {message} You can find the error back in the log."
        )
        self.message = message
        self.sql = sql


class ConnectionFailed(DatabaseError):
    """The connection could not be opened."""


class StatementFailed(DatabaseError):
    """A statement or transaction command failed on the server."""
