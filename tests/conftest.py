import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg2
import pytest

# Ensure project root on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


class FakeCursor:
    """Stands in for a psycopg2 cursor; records what was executed."""

    def __init__(self, rows=None, rowcount=-1, error=None, description=("id", "name"), returns_rows=True):
        self.rows = list(rows or [])
        self.rowcount = rowcount
        self.error = error
        self.columns = description
        self.description = [(c,) for c in description] if returns_rows else None
        self.executed = []
        self.closed = False
        self.cursor_factory = None

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.error is not None:
            raise self.error

    def _row(self, values):
        if self.cursor_factory is not None:
            return dict(zip(self.columns, values))
        return tuple(values)

    def _require_result_set(self):
        if self.description is None:
            raise psycopg2.ProgrammingError("no results to fetch")

    def fetchall(self):
        self._require_result_set()
        rows, self.rows = self.rows, []
        return [self._row(r) for r in rows]

    def fetchone(self):
        self._require_result_set()
        if not self.rows:
            return None
        return self._row(self.rows.pop(0))

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture(autouse=True)
def _no_default_daily_log(monkeypatch):
    # Keep failure tests from writing day files into the project root
    monkeypatch.setattr("db.database.LOG_EXCEPTIONS", False)


@pytest.fixture
def cursors():
    """Queue of cursors the fake connection hands out, in order."""
    return []


@pytest.fixture
def fake_conn(cursors):
    conn = MagicMock()
    conn.autocommit = False
    conn.opened = []

    def _cursor(cursor_factory=None):
        cur = cursors.pop(0) if cursors else FakeCursor()
        cur.cursor_factory = cursor_factory
        conn.opened.append(cur)
        return cur

    conn.cursor.side_effect = _cursor
    return conn


@pytest.fixture
def connect_mock(fake_conn):
    with patch("db.database.psycopg2.connect", return_value=fake_conn) as mock:
        yield mock


@pytest.fixture
def settings():
    return {"host": "db.local", "dbname": "shop", "user": "app", "password": "secret", "port": "5432"}


@pytest.fixture
def db(connect_mock, settings):
    from db.database import Database
    return Database(settings=settings, exit_on_error=False)
