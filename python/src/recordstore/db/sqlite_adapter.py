"""
SQLite Database Handle

File-backed handle over the standard-library sqlite3 driver.
Active for connection targets of the form ``sqlite:<path>``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from .dbapi_adapter import DbApiHandle
from .protocol import ConnectionFailedError

logger = logging.getLogger(__name__)


class SqliteHandle(DbApiHandle):
    """
    SQLite-backed implementation of DatabaseHandle.
    Rows come back as sqlite3.Row and are converted to plain dicts.
    """

    driver = "sqlite"
    driver_errors = (sqlite3.Error,)

    @classmethod
    def open(cls, path: str) -> "SqliteHandle":
        try:
            # isolation_level=None: autocommit, transactions are opened explicitly
            conn = sqlite3.connect(path, isolation_level=None)
            conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            raise ConnectionFailedError(str(e)) from e
        logger.info("SqliteHandle opened (path=%s)", path)
        return cls(conn)

    def describe_error(self, exc: BaseException) -> tuple[str | int | None, str]:
        return getattr(exc, "sqlite_errorcode", None), str(exc)

    def _last_insert_id(self, conn: Any) -> Any:
        return conn.execute("SELECT last_insert_rowid()").fetchone()[0]
