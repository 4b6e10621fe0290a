"""
db/database.py
--------------
Single-connection PostgreSQL accessor.
Prepares and executes parameterized SQL through psycopg2 and shapes the
result as a full result set, a row, a column or a single value.

Placeholders use psycopg2's named style: ``WHERE id = %(id)s``.
"""

import sys
from enum import Enum
from typing import Any, Callable, Mapping, NoReturn, Optional, Union

import psycopg2
from psycopg2 import errors, extras

from config import DB_EXIT_ON_ERROR, LOG_EXCEPTIONS, load_settings
from db.errors import ConnectionFailed, DatabaseError, StatementFailed
from db.params import Params
from utils.daily_log import DailyLog
from utils.logger import get_logger

logger = get_logger(__name__)

ParamsArg = Optional[Union[Mapping[str, Any], Params]]

_RESULT_SET_STATEMENTS = ("select", "show")
_ROW_COUNT_STATEMENTS = ("insert", "update", "delete")

_DEFAULT_LOG = object()


class FetchMode(Enum):
    """Shape of a fetched row."""
    ASSOC = "assoc"  # dict keyed by column name
    NUM = "num"      # positional tuple


def statement_keyword(sql: str) -> str:
    """Lower-cased first keyword of `sql`, or an empty string."""
    words = sql.replace("\r", " ").split()
    return words[0].lower() if words else ""


class Database:
    """
    Owns one connection, one open statement and the pending parameters.

    Every failure is logged, and written to `exception_log`, before a
    `DatabaseError` is raised. Unless told otherwise the exception log is
    the day file under `LOG_DIR`; pass `exception_log=None` to skip it.
    With `exit_on_error` the process exits instead.
    """

    def __init__(
        self,
        settings: Optional[Mapping[str, str]] = None,
        exception_log: Union[DailyLog, None, object] = _DEFAULT_LOG,
        exit_on_error: Optional[bool] = None,
        connect: bool = True,
    ):
        self._settings_override = dict(settings) if settings is not None else None
        self.settings: dict[str, str] = {}
        if exception_log is _DEFAULT_LOG:
            exception_log = DailyLog() if LOG_EXCEPTIONS else None
        self.exception_log = exception_log
        self.exit_on_error = DB_EXIT_ON_ERROR if exit_on_error is None else exit_on_error
        self.params = Params()
        self.connected = False
        self._conn = None
        self._statement = None
        if connect:
            self.connect()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close_connection()

    # ── Connection ────────────────────────────────────────

    def connect(self) -> None:
        """
        Open the connection with the current settings, closing any
        connection already held.

        Raises:
            ConnectionFailed: If the server cannot be reached or refuses the login.
        """
        if self._settings_override is not None:
            self.settings = dict(self._settings_override)
        else:
            self.settings = load_settings()
        if self._conn is not None:
            self.close_connection()

        conn = None
        try:
            conn = psycopg2.connect(
                host=self.settings.get("host"),
                dbname=self.settings.get("dbname"),
                user=self.settings.get("user"),
                password=self.settings.get("password"),
                port=self.settings.get("port"),
                client_encoding="UTF8",
            )
            conn.autocommit = True
        except psycopg2.Error as e:
            if conn is not None:
                conn.close()
            self._fail(ConnectionFailed, str(e).strip())
        self._conn = conn
        self.connected = True
        logger.info(
            f"Connected to {self.settings.get('dbname')} on {self.settings.get('host')}."
        )

    def close_connection(self) -> None:
        """Drop the connection; the next statement reconnects."""
        self._close_statement()
        if self._conn is not None:
            self._conn.close()
            logger.info("Database connection closed.")
        self._conn = None
        self.connected = False

    def _connection(self):
        if not self.connected or self._conn is None:
            self.connect()
        return self._conn

    # ── Parameters ────────────────────────────────────────

    def bind(self, name: str, value: Any) -> None:
        """Add a parameter to the pending batch."""
        self.params.bind(name, value)

    def bind_more(self, values: ParamsArg) -> None:
        """Add parameters to the pending batch unless it already has some."""
        self.params.bind_more(values)

    # ── Execution ─────────────────────────────────────────

    def _init(self, sql: str, params: ParamsArg = None, fetch_mode: FetchMode = FetchMode.ASSOC):
        """Execute `sql` with the pending parameters and return its cursor."""
        try:
            conn = self._connection()
            self.params.bind_more(params)
            self._close_statement()
            cursor_factory = extras.RealDictCursor if fetch_mode is FetchMode.ASSOC else None
            self._statement = conn.cursor(cursor_factory=cursor_factory)
            self._statement.execute(sql, self.params.as_dict() or None)
        except psycopg2.Error as e:
            self._fail(StatementFailed, str(e).strip(), sql)
        finally:
            self.params.clear()
        return self._statement

    def _fetch(self, sql: str, fetch: Callable[[], Any]) -> Any:
        try:
            return fetch()
        except psycopg2.Error as e:
            self._fail(StatementFailed, str(e).strip(), sql)

    def _close_statement(self) -> None:
        if self._statement is not None and not self._statement.closed:
            self._statement.close()
        self._statement = None

    def query(self, sql: str, params: ParamsArg = None, fetch_mode: FetchMode = FetchMode.ASSOC):
        """
        Run any statement.

        Returns:
            A list of rows for SELECT/SHOW, the affected-row count for
            INSERT/UPDATE/DELETE, None for anything else.
        """
        sql = sql.replace("\r", " ").strip()
        cursor = self._init(sql, params, fetch_mode)
        keyword = statement_keyword(sql)

        if keyword in _RESULT_SET_STATEMENTS:
            rows = self._fetch(sql, cursor.fetchall)
            return [_shape(r, fetch_mode) for r in rows]
        if keyword in _ROW_COUNT_STATEMENTS:
            return cursor.rowcount
        return None

    def _first_row(self, sql: str, cursor):
        """Fetch one row, then release the cursor. None for statements without a result set."""
        try:
            if cursor.description is None:
                return None
            return self._fetch(sql, cursor.fetchone)
        finally:
            self._close_statement()

    def row(self, sql: str, params: ParamsArg = None, fetch_mode: FetchMode = FetchMode.ASSOC):
        """Return the first row of the result, or None."""
        result = self._first_row(sql, self._init(sql, params, fetch_mode))
        return _shape(result, fetch_mode) if result is not None else None

    def column(self, sql: str, params: ParamsArg = None) -> list:
        """Return the first field of every row."""
        cursor = self._init(sql, params, FetchMode.NUM)
        if cursor.description is None:
            return []
        return [cells[0] for cells in self._fetch(sql, cursor.fetchall)]

    def single(self, sql: str, params: ParamsArg = None) -> Any:
        """Return the first field of the first row, or None."""
        result = self._first_row(sql, self._init(sql, params, FetchMode.NUM))
        return result[0] if result else None

    # ── Pass-through ──────────────────────────────────────

    def last_insert_id(self) -> Optional[int]:
        """
        Last value produced by a sequence in this session.

        Returns None when no sequence has been used yet. Inside an explicit
        transaction that lookup failure aborts the transaction.
        """
        conn = self._connection()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT lastval()")
                return cur.fetchone()[0]
        except errors.ObjectNotInPrerequisiteState:
            return None
        except psycopg2.Error as e:
            self._fail(StatementFailed, str(e).strip(), "SELECT lastval()")

    def begin_transaction(self) -> bool:
        """Start a transaction. False if one is already open."""
        conn = self._connection()
        if not conn.autocommit:
            return False
        try:
            conn.autocommit = False
        except psycopg2.Error as e:
            self._fail(StatementFailed, str(e).strip(), "BEGIN")
        return True

    def commit_transaction(self) -> bool:
        """Commit the open transaction. False if none is open."""
        return self._end_transaction("COMMIT", lambda conn: conn.commit())

    execute_transaction = commit_transaction

    def rollback(self) -> bool:
        """Roll back the open transaction. False if none is open."""
        return self._end_transaction("ROLLBACK", lambda conn: conn.rollback())

    def _end_transaction(self, command: str, finish: Callable[[Any], None]) -> bool:
        conn = self._connection()
        if conn.autocommit:
            return False
        try:
            finish(conn)
            conn.autocommit = True
        except psycopg2.Error as e:
            self._fail(StatementFailed, str(e).strip(), command)
        return True

    # ── Failure path ──────────────────────────────────────

    def _fail(self, error_cls: type[DatabaseError], message: str, sql: Optional[str] = None) -> NoReturn:
        """Log the failure, then raise `error_cls` or exit the process."""
        if sql:
            logger.error(f"{message} | Raw SQL: {sql}")
        else:
            logger.error(message)

        if self.exception_log is not None:
            entry = message
            if sql:
                entry += f"\r\nRaw SQL : {sql}"
            self.exception_log.write(entry)

        error = error_cls(message, sql)
        if self.exit_on_error:
            print(error, file=sys.stderr)
            sys.exit(1)
        raise error


def _shape(row, fetch_mode: FetchMode):
    if fetch_mode is FetchMode.ASSOC:
        return dict(row)
    return tuple(row)
