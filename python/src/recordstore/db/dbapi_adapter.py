"""
DB-API 2.0 Handle Base

Shared implementation of the DatabaseHandle / Statement protocols on top of
any PEP 249 connection. Driver adapters (sqlite, mysql, postgres) only supply
connection setup, paramstyle, cursor flavour and last-insert-id lookup.

Handles run the driver in autocommit mode and open explicit transactions
themselves, so begin/commit/rollback are tracked here rather than by the
driver.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from .protocol import DatabaseError, Row
from .sql_tokens import ParsedSql, split_placeholders

logger = logging.getLogger(__name__)

PARAMETER_COUNT_MISMATCH = (
    "Invalid parameter number: number of bound variables does not match number of tokens"
)


# ---------------------------------------------------------------------------
# Statement
# ---------------------------------------------------------------------------


class DbApiStatement:
    """
    A statement prepared against a DbApiHandle.
    Holds the driver cursor produced by the last execute() call.
    """

    def __init__(self, handle: "DbApiHandle", sql: str) -> None:
        self._handle = handle
        self._parsed: ParsedSql = split_placeholders(
            sql, handle.identifier_quote, handle.backslash_escapes
        )
        self._cursor: Any = None
        self.sql = sql
        self.placeholder_count = self._parsed.placeholder_count

    def execute(self, params: Sequence[Any] = ()) -> None:
        params = tuple(params)
        if len(params) != self.placeholder_count:
            with self._handle.translate_errors():
                raise DatabaseError(PARAMETER_COUNT_MISMATCH, code="HY093")
        self.close()
        self._cursor = self._handle.run(self._parsed, params)

    def fetch_all(self) -> list[Row]:
        cur = self._executed_cursor()
        if cur.description is None:
            return []
        with self._handle.translate_errors():
            rows = cur.fetchall()
        return [dict(r) for r in rows]

    def fetch_one(self) -> Row | None:
        cur = self._executed_cursor()
        if cur.description is None:
            return None
        with self._handle.translate_errors():
            row = cur.fetchone()
        return dict(row) if row is not None else None

    def close(self) -> None:
        if self._cursor is not None:
            try:
                self._cursor.close()
            finally:
                self._cursor = None

    def _executed_cursor(self) -> Any:
        if self._cursor is None:
            raise DatabaseError("Statement has not been executed")
        return self._cursor


# ---------------------------------------------------------------------------
# Handle
# ---------------------------------------------------------------------------


class DbApiHandle:
    """
    DatabaseHandle over a PEP 249 connection.

    Subclasses set the class attributes below and may override the
    underscore hooks.
    """

    driver = "dbapi"
    # Exception classes the driver raises; translated to DatabaseError.
    driver_errors: tuple[type[BaseException], ...] = ()
    # Raised by drivers while binding a value, e.g. an int wider than 64 bits.
    bind_errors: tuple[type[BaseException], ...] = (TypeError, ValueError, OverflowError)
    placeholder = "?"
    format_paramstyle = False
    identifier_quote = "`"
    backslash_escapes = False

    def __init__(self, conn: Any) -> None:
        self._conn = conn
        self._in_transaction = False
        self._error_info: tuple[str | int | None, str | None] = (None, None)

    # --- Error translation ---

    def describe_error(self, exc: BaseException) -> tuple[str | int | None, str]:
        """Return (driver error code, message) for a driver exception."""
        return None, str(exc)

    @contextmanager
    def translate_errors(self) -> Iterator[None]:
        try:
            yield
        except DatabaseError as e:
            self._error_info = (e.code, e.message)
            raise
        except self.driver_errors as e:
            code, message = self.describe_error(e)
            self._error_info = (code, message)
            raise DatabaseError(message, code) from e
        except self.bind_errors as e:
            message = f"{type(e).__name__}: {e}"
            self._error_info = (None, message)
            raise DatabaseError(message) from e

    def error_info(self) -> tuple[str | int | None, str | None]:
        return self._error_info

    # --- Statements ---

    def prepare(self, sql: str) -> DbApiStatement:
        self._connection()
        return DbApiStatement(self, sql)

    def run(self, parsed: ParsedSql, params: tuple[Any, ...]) -> Any:
        """Execute a parsed statement and return the live cursor."""
        conn = self._connection()
        sql = parsed.render(
            self.placeholder, escape_percent=self.format_paramstyle and bool(params)
        )
        logger.debug("%s execute: %s | params=%s", self.driver, sql, list(params))
        self._error_info = (None, None)
        with self.translate_errors():
            cur = self._cursor(conn)
            try:
                self._execute(cur, sql, params)
            except BaseException:
                cur.close()
                raise
        return cur

    def _cursor(self, conn: Any) -> Any:
        return conn.cursor()

    def _execute(self, cur: Any, sql: str, params: tuple[Any, ...]) -> None:
        if self.format_paramstyle and not params:
            cur.execute(sql)
        else:
            cur.execute(sql, params)

    # --- Last insert id ---

    def last_insert_id(self) -> str:
        conn = self._connection()
        with self.translate_errors():
            value = self._last_insert_id(conn)
        return str(value if value is not None else 0)

    def _last_insert_id(self, conn: Any) -> Any:
        """Driver-specific lookup; every subclass must override it."""
        raise NotImplementedError

    # --- Transactions ---

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def begin(self) -> bool:
        conn = self._connection()
        if self._in_transaction:
            raise DatabaseError("There is already an active transaction")
        with self.translate_errors():
            self._begin(conn)
        self._in_transaction = True
        return True

    def commit(self) -> bool:
        conn = self._connection()
        if not self._in_transaction:
            raise DatabaseError("There is no active transaction")
        with self.translate_errors():
            self._commit(conn)
        self._in_transaction = False
        return True

    def rollback(self) -> bool:
        conn = self._connection()
        if not self._in_transaction:
            raise DatabaseError("There is no active transaction")
        with self.translate_errors():
            self._rollback(conn)
        self._in_transaction = False
        return True

    def _begin(self, conn: Any) -> None:
        self._control(conn, "BEGIN")

    def _commit(self, conn: Any) -> None:
        self._control(conn, "COMMIT")

    def _rollback(self, conn: Any) -> None:
        self._control(conn, "ROLLBACK")

    def _control(self, conn: Any, sql: str) -> None:
        logger.debug("%s transaction: %s", self.driver, sql)
        cur = conn.cursor()
        try:
            cur.execute(sql)
        finally:
            cur.close()

    # --- Lifecycle ---

    def _connection(self) -> Any:
        if self._conn is None:
            raise DatabaseError("Database handle is closed")
        return self._conn

    def close(self) -> None:
        """Close the underlying connection. Safe to call twice."""
        if self._conn is None:
            return
        try:
            self._conn.close()
        finally:
            self._conn = None
            self._in_transaction = False
            logger.info("%s handle closed", self.driver)
