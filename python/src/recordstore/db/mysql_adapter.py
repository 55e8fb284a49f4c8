"""
MySQL Database Handle

PyMySQL-based implementation of DatabaseHandle.
Active for connection targets of the form ``mysql:host=<host>;dbname=<db>[;port=<port>]``.
"""

from __future__ import annotations

import logging
from typing import Any

import pymysql
import pymysql.cursors

from .dbapi_adapter import DbApiHandle
from .protocol import ConnectionFailedError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3306


class MysqlHandle(DbApiHandle):
    """
    MySQL-backed implementation of DatabaseHandle.
    Uses a DictCursor so rows keep result-set column order.
    """

    driver = "mysql"
    driver_errors = (pymysql.MySQLError,)
    placeholder = "%s"
    format_paramstyle = True
    backslash_escapes = True

    @classmethod
    def open(
        cls,
        host: str,
        db_name: str,
        username: str,
        password: str,
        port: int = DEFAULT_PORT,
    ) -> "MysqlHandle":
        try:
            conn = pymysql.connect(
                host=host,
                port=int(port),
                user=username,
                password=password,
                database=db_name,
                autocommit=True,
                cursorclass=pymysql.cursors.DictCursor,
            )
        except pymysql.MySQLError as e:
            raise ConnectionFailedError(_message(e), _code(e)) from e
        logger.info("MysqlHandle opened (host=%s db=%s)", host, db_name)
        return cls(conn)

    def describe_error(self, exc: BaseException) -> tuple[str | int | None, str]:
        return _code(exc), _message(exc)

    def _last_insert_id(self, conn: Any) -> Any:
        return conn.insert_id()

    def _begin(self, conn: Any) -> None:
        conn.begin()

    def _commit(self, conn: Any) -> None:
        conn.commit()

    def _rollback(self, conn: Any) -> None:
        conn.rollback()


def _code(exc: BaseException) -> int | None:
    if exc.args and isinstance(exc.args[0], int):
        return exc.args[0]
    return None


def _message(exc: BaseException) -> str:
    # PyMySQL errors carry (errno, message)
    if len(exc.args) > 1:
        return str(exc.args[1])
    return str(exc)
