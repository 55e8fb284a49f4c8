"""
Database Handle Factory

Opens the correct DatabaseHandle for a connection target and builds the
application-wide RecordStore from environment variables.

Connection targets:
    sqlite:<path>
    mysql:host=<host>;dbname=<db>[;port=<port>]
    pgsql:host=<host>;dbname=<db>[;port=<port>]

RECORDSTORE_DB_PROVIDER=sqlite (default): requires SQLITE_PATH
RECORDSTORE_DB_PROVIDER=mysql:            requires MYSQL_HOST + MYSQL_DATABASE
RECORDSTORE_DB_PROVIDER=postgres:         requires POSTGRES_HOST + POSTGRES_DATABASE
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from .protocol import ConnectionFailedError, DatabaseHandle, UnsupportedTargetError

if TYPE_CHECKING:
    from ..store import RecordStore

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}

# Module-level singleton, created on first use
_store: RecordStore | None = None


def parse_target_params(params: str) -> dict[str, str]:
    """Parse ``key=value;key=value`` into a dict (empty pieces are skipped)."""
    out: dict[str, str] = {}
    for piece in params.split(";"):
        key, sep, value = piece.partition("=")
        if sep and key.strip():
            out[key.strip()] = value.strip()
    return out


def _port(params: dict[str, str], default: int) -> int:
    try:
        return int(params.get("port", default))
    except ValueError as e:
        raise ConnectionFailedError(f"Invalid port: {params.get('port')!r}") from e


def connect(target: str, username: str = "", password: str = "") -> DatabaseHandle:
    """
    Open a handle for ``target``.

    Raises:
        ConnectionFailedError: when the driver refuses the connection.
        UnsupportedTargetError: when the target prefix names no known driver.
    """
    driver, sep, rest = target.partition(":")
    if not sep:
        raise UnsupportedTargetError(f"Invalid data source name: {target!r}")

    if driver == "sqlite":
        from .sqlite_adapter import SqliteHandle

        return SqliteHandle.open(rest)

    if driver == "mysql":
        from .mysql_adapter import DEFAULT_PORT, MysqlHandle

        params = parse_target_params(rest)
        return MysqlHandle.open(
            params.get("host", "localhost"),
            params.get("dbname", ""),
            username,
            password,
            port=_port(params, DEFAULT_PORT),
        )

    if driver == "pgsql":
        from .postgres_adapter import DEFAULT_PORT, PostgresHandle

        params = parse_target_params(rest)
        return PostgresHandle.open(
            params.get("host", "localhost"),
            params.get("dbname", ""),
            username,
            password,
            port=_port(params, DEFAULT_PORT),
        )

    raise UnsupportedTargetError(f"Could not find driver {driver!r}")


def get_record_store() -> RecordStore:
    """
    Returns the active RecordStore singleton.

    Reads RECORDSTORE_DB_PROVIDER on first call and opens the matching store.
    Subsequent calls return the cached instance. A store whose connection
    failed is still returned; its get_last_error() carries the reason.

    Raises:
        ValueError: on missing or invalid configuration (fail-fast on startup).
    """
    global _store
    if _store is not None:
        return _store

    provider = os.getenv("RECORDSTORE_DB_PROVIDER", "sqlite").lower().strip()
    exit_after_error = os.getenv("RECORDSTORE_EXIT_AFTER_ERROR", "").lower().strip() in _TRUTHY

    if provider == "sqlite":
        store = _build_sqlite_store(exit_after_error)
    elif provider == "mysql":
        store = _build_mysql_store(exit_after_error)
    elif provider == "postgres":
        store = _build_postgres_store(exit_after_error)
    else:
        raise ValueError(
            f"RECORDSTORE_DB_PROVIDER='{provider}' is not supported. "
            "Valid values: 'sqlite' (default), 'mysql', 'postgres'."
        )

    if store.get_last_error():
        logger.warning("RecordStore opened without a connection (provider=%s)", provider)
    else:
        logger.info("RecordStore initialised (provider=%s)", provider)
    _store = store
    return _store


def _build_sqlite_store(exit_after_error: bool) -> RecordStore:
    """Build a SQLite RecordStore from SQLITE_PATH."""
    from ..store import RecordStore

    path = os.getenv("SQLITE_PATH")
    if not path:
        raise ValueError(
            "RECORDSTORE_DB_PROVIDER=sqlite requires SQLITE_PATH to be set. "
            "Example: /var/lib/myapp/data.db"
        )
    return RecordStore.open_sqlite(path, exit_after_error)


def _build_mysql_store(exit_after_error: bool) -> RecordStore:
    """Build a MySQL RecordStore from MYSQL_* environment variables."""
    from ..store import RecordStore

    host = os.getenv("MYSQL_HOST")
    db_name = os.getenv("MYSQL_DATABASE")
    if not host or not db_name:
        raise ValueError(
            "RECORDSTORE_DB_PROVIDER=mysql requires MYSQL_HOST and MYSQL_DATABASE "
            "to be set in environment variables."
        )
    return RecordStore.open_mysql(
        host,
        db_name,
        os.getenv("MYSQL_USER", ""),
        os.getenv("MYSQL_PASSWORD", ""),
        exit_after_error,
        charset=os.getenv("MYSQL_CHARSET", ""),
    )


def _build_postgres_store(exit_after_error: bool) -> RecordStore:
    """Build a PostgreSQL RecordStore from POSTGRES_* environment variables."""
    from ..store import RecordStore

    host = os.getenv("POSTGRES_HOST")
    db_name = os.getenv("POSTGRES_DATABASE")
    if not host or not db_name:
        raise ValueError(
            "RECORDSTORE_DB_PROVIDER=postgres requires POSTGRES_HOST and POSTGRES_DATABASE "
            "to be set in environment variables."
        )
    return RecordStore.open_postgres(
        host,
        db_name,
        os.getenv("POSTGRES_USER", ""),
        os.getenv("POSTGRES_PASSWORD", ""),
        exit_after_error,
        port=int(os.getenv("POSTGRES_PORT", "5432")),
    )


def reset_record_store() -> None:
    """
    Close and drop the cached store (used in tests to re-initialise with different env).
    Not intended for production use.
    """
    global _store
    if _store is not None:
        _store.close()
    _store = None
