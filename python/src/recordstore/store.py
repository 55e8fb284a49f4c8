"""
RecordStore

Convenience layer over a DatabaseHandle: parameterized CRUD helpers, error
capture and manual transaction control.

Errors never escape as exceptions. Every failure is stored in the error slot
(see get_last_error()) and signalled by the return value:

- ``None``  for helpers that return a statement, row, rows, id or count
- ``False`` for helpers that return a success flag

Single-row helpers additionally return ``NO_ROW`` (an empty, falsy mapping)
when the statement succeeded but matched nothing, so callers can tell
"no row" from "error" with ``row is None``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .db.factory import connect
from .db.protocol import NO_ROW, DatabaseError, DatabaseHandle, Row, Statement
from .error_policy import ErrorPolicy, policy_for

logger = logging.getLogger(__name__)

DEFAULT_ID_FIELD = "id"


class RecordStore:
    """
    Facade over one exclusively owned database handle.

    Values are always bound as positional ``?`` parameters. Table names,
    field names and where-clause fragments are pasted into the SQL text
    as-is: they MUST come from trusted code, never from user input.
    """

    def __init__(
        self,
        target: str,
        username: str = "",
        password: str = "",
        exit_after_error: bool = False,
        *,
        on_error: ErrorPolicy | None = None,
    ) -> None:
        """
        Open a store for a connection target such as ``sqlite:/path/app.db``.

        A connection failure is recorded, not raised; the store then has no
        handle and every later operation fails with a recorded error.
        """
        self._setup(exit_after_error, on_error)
        try:
            self._handle = connect(target, username, password)
        except DatabaseError as e:
            self._error(e)

    def _setup(self, exit_after_error: bool, on_error: ErrorPolicy | None) -> None:
        self._handle: DatabaseHandle | None = None
        self._id_field_name = DEFAULT_ID_FIELD
        self._last_error: str | None = None
        self._exit_after_error = exit_after_error
        self._on_error = policy_for(exit_after_error, on_error)

    # --- Construction helpers ---

    @classmethod
    def from_handle(
        cls,
        handle: DatabaseHandle,
        exit_after_error: bool = False,
        *,
        on_error: ErrorPolicy | None = None,
    ) -> "RecordStore":
        """Wrap an already opened handle; the store takes ownership of it."""
        store = cls.__new__(cls)
        store._setup(exit_after_error, on_error)
        store._handle = handle
        return store

    @classmethod
    def open_sqlite(
        cls,
        path: str,
        exit_after_error: bool = False,
        *,
        on_error: ErrorPolicy | None = None,
    ) -> "RecordStore":
        return cls(f"sqlite:{path}", "", "", exit_after_error, on_error=on_error)

    @classmethod
    def open_mysql(
        cls,
        host: str,
        db_name: str,
        username: str,
        password: str,
        exit_after_error: bool = False,
        charset: str = "",
        *,
        on_error: ErrorPolicy | None = None,
    ) -> "RecordStore":
        """
        Open a MySQL store. When ``charset`` is given and the connection
        succeeded, ``SET NAMES ?`` is issued right away.
        """
        store = cls(
            f"mysql:host={host};dbname={db_name}",
            username,
            password,
            exit_after_error,
            on_error=on_error,
        )
        if charset and not store.get_last_error():
            statement = store.query("SET NAMES ?", [charset])
            if statement is not None:
                statement.close()
        return store

    @classmethod
    def open_postgres(
        cls,
        host: str,
        db_name: str,
        username: str,
        password: str,
        exit_after_error: bool = False,
        port: int = 5432,
        *,
        on_error: ErrorPolicy | None = None,
    ) -> "RecordStore":
        return cls(
            f"pgsql:host={host};dbname={db_name};port={port}",
            username,
            password,
            exit_after_error,
            on_error=on_error,
        )

    # --- Error slot ---

    def _clear_error(self) -> None:
        self._last_error = None

    def _error(self, exc: DatabaseError | None = None) -> None:
        """Record an error from an exception, or from the handle's error info."""
        message = exc.message if exc is not None else None
        if not message and self._handle is not None:
            message = self._handle.error_info()[1]
        if not message and exc is not None:
            # Some drivers raise with an empty message, e.g. PyMySQL's InterfaceError(0, "")
            cause = exc.__cause__ or exc
            message = f"{type(cause).__name__} (code {exc.code})"
        if not message:
            return
        self._last_error = message
        logger.warning("Database error recorded: %s", message)
        self._on_error(message)

    def get_last_error(self) -> str | None:
        """Error description, or None when the last query succeeded."""
        return self._last_error

    @property
    def exit_after_error(self) -> bool:
        return self._exit_after_error

    # --- Id field ---

    @property
    def id_field_name(self) -> str:
        return self._id_field_name

    def set_id_field_name(self, name: str) -> None:
        """Change the primary-key column used by the ``*_with_id`` helpers. Falsy names are ignored."""
        if name:
            self._id_field_name = name

    def _id_clause(self) -> str:
        return f"`{self._id_field_name}`=?"

    # --- Core ---

    def _require_handle(self) -> DatabaseHandle:
        if self._handle is None:
            raise DatabaseError("No database connection")
        return self._handle

    def query(self, sql: str, params: Sequence[Any] = ()) -> Statement | None:
        """
        Prepare and execute ``sql`` with ``params`` bound positionally.

        Returns:
            The executed statement, or None when an error occurred
        """
        self._clear_error()
        try:
            statement = self._require_handle().prepare(sql)
            statement.execute(list(params))
        except DatabaseError as e:
            self._error(e)
            return None
        return statement

    def last_insert_id(self) -> str | None:
        """Id generated by the last insert, as a string (not necessarily numeric)."""
        try:
            return self._require_handle().last_insert_id()
        except DatabaseError as e:
            self._error(e)
            return None

    # --- Write helpers ---

    def insert_record(self, table: str, fields: Mapping[str, Any]) -> str | None:
        """
        Insert one row.

        Args:
            table: Table name (trusted)
            fields: Ordered mapping of column name (trusted) to value

        Returns:
            The generated id as a string, or None on failure
        """
        columns = ",".join(fields)
        placeholders = ",".join("?" for _ in fields)
        statement = self.query(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", list(fields.values())
        )
        if statement is None:
            return None
        statement.close()
        return self.last_insert_id()

    def update_record(
        self,
        table: str,
        fields: Mapping[str, Any],
        where: str = "",
        where_params: Sequence[Any] = (),
    ) -> bool:
        """
        Update rows matching ``where`` (every row when it is empty).

        ``where`` is a raw SQL fragment with its own ``?`` placeholders;
        its values follow the field values in bind order.
        """
        assignments = ",".join(f"{field}=?" for field in fields)
        where_sql = f" WHERE {where}" if where else ""
        statement = self.query(
            f"UPDATE {table} SET {assignments}{where_sql}",
            [*fields.values(), *where_params],
        )
        if statement is None:
            return False
        statement.close()
        return True

    def update_record_with_id(self, table: str, fields: Mapping[str, Any], id: Any) -> bool:
        return self.update_record(table, fields, self._id_clause(), [id])

    def delete_record(self, table: str, where: str = "", where_params: Sequence[Any] = ()) -> bool:
        """Delete rows matching ``where`` (every row when it is empty)."""
        where_sql = f" WHERE {where}" if where else ""
        statement = self.query(f"DELETE FROM {table}{where_sql}", where_params)
        if statement is None:
            return False
        statement.close()
        return True

    def delete_record_with_id(self, table: str, id: Any) -> bool:
        return self.delete_record(table, self._id_clause(), [id])

    # --- Read helpers ---

    def select_records(self, sql: str, params: Sequence[Any] = ()) -> list[Row] | None:
        statement = self.query(sql, params)
        if statement is None:
            return None
        try:
            return statement.fetch_all()
        except DatabaseError as e:
            self._error(e)
            return None
        finally:
            statement.close()

    def select_one_record(self, sql: str, params: Sequence[Any] = ()) -> Mapping[str, Any] | None:
        """
        Fetch the first row of ``sql``.

        Returns:
            The row, NO_ROW when nothing matched, or None on error
        """
        statement = self.query(sql, params)
        if statement is None:
            return None
        try:
            row = statement.fetch_one()
        except DatabaseError as e:
            self._error(e)
            return None
        finally:
            statement.close()
        return row if row is not None else NO_ROW

    select_first_record = select_one_record

    def select_one_record_with_id(self, table: str, id: Any) -> Mapping[str, Any] | None:
        return self.select_one_record(f"SELECT * FROM {table} WHERE {self._id_clause()}", [id])

    select_record_with_id = select_one_record_with_id

    def get_row_count(self, table: str, where: str = "", where_params: Sequence[Any] = ()) -> int | None:
        """Number of rows matching ``where``, or None on failure."""
        where_sql = f" WHERE {where}" if where else ""
        row = self.select_one_record(f"SELECT COUNT(*) AS num FROM {table}{where_sql}", where_params)
        if not row:
            return None
        return int(row["num"])

    # --- Transactions ---
    # No nesting and no automatic rollback: pair begin with end or cancel.

    def begin_transaction(self) -> bool:
        try:
            return bool(self._require_handle().begin())
        except DatabaseError as e:
            self._error(e)
            return False

    def end_transaction(self) -> bool:
        """Commit."""
        try:
            return bool(self._require_handle().commit())
        except DatabaseError as e:
            self._error(e)
            return False

    def cancel_transaction(self) -> bool:
        """Roll back."""
        try:
            return bool(self._require_handle().rollback())
        except DatabaseError as e:
            self._error(e)
            return False

    # --- Lifecycle ---

    def close(self) -> None:
        """Release the handle. Further operations fail with a recorded error."""
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.close()

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
