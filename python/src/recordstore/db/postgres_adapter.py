"""
PostgreSQL Database Handle

Direct psycopg2-based implementation of DatabaseHandle.
Accepts the same ``?`` placeholders and backtick identifiers as the other
handles; both are rewritten to psycopg2's dialect before execution.

Active for connection targets of the form ``pgsql:host=<host>;dbname=<db>[;port=<port>]``.
"""

from __future__ import annotations

import logging
from typing import Any

import psycopg2
import psycopg2.extras

from .dbapi_adapter import DbApiHandle
from .protocol import ConnectionFailedError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5432


def _adapt_value(v: Any) -> Any:
    """Convert Python objects to psycopg2-compatible types."""
    if isinstance(v, dict) or isinstance(v, list):
        return psycopg2.extras.Json(v)
    return v


class PostgresHandle(DbApiHandle):
    """
    PostgreSQL-backed implementation of DatabaseHandle.
    Uses RealDictCursor for result rows.
    """

    driver = "pgsql"
    driver_errors = (psycopg2.Error,)
    placeholder = "%s"
    format_paramstyle = True
    identifier_quote = '"'

    @classmethod
    def open(
        cls,
        host: str,
        db_name: str,
        username: str,
        password: str,
        port: int = DEFAULT_PORT,
    ) -> "PostgresHandle":
        try:
            conn = psycopg2.connect(
                host=host,
                port=int(port),
                dbname=db_name,
                user=username,
                password=password,
            )
            conn.autocommit = True
        except psycopg2.Error as e:
            raise ConnectionFailedError(str(e).strip(), e.pgcode) from e
        logger.info("PostgresHandle opened (host=%s db=%s)", host, db_name)
        return cls(conn)

    def describe_error(self, exc: BaseException) -> tuple[str | int | None, str]:
        message = getattr(exc, "pgerror", None) or str(exc)
        return getattr(exc, "pgcode", None), message.strip()

    def _cursor(self, conn: Any) -> Any:
        return conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)

    def _execute(self, cur: Any, sql: str, params: tuple[Any, ...]) -> None:
        if not params:
            cur.execute(sql)
        else:
            cur.execute(sql, [_adapt_value(p) for p in params])

    def _last_insert_id(self, conn: Any) -> Any:
        # lastval() fails when no sequence was used in this session
        with conn.cursor() as cur:
            cur.execute("SELECT lastval()")
            return cur.fetchone()[0]
