"""
Database Handle Protocol

Defines the structural interface that every database handle must implement.
Uses Python Protocols for structural subtyping (duck typing); handles
do not need to inherit from these classes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

Row = dict[str, Any]

# Returned by single-row helpers when the statement succeeded but matched nothing.
NO_ROW: Mapping[str, Any] = MappingProxyType({})


class DatabaseError(Exception):
    """Raised by handles and statements; the message is the driver's own."""

    def __init__(self, message: str, code: str | int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ConnectionFailedError(DatabaseError):
    """The handle could not be opened."""


class UnsupportedTargetError(ConnectionFailedError):
    """The connection target names a driver nobody registered."""


@runtime_checkable
class Statement(Protocol):
    """A prepared statement (mirrors a DB-API cursor bound to one SQL text)."""

    sql: str
    placeholder_count: int

    def execute(self, params: Sequence[Any] = ()) -> None: ...
    def fetch_all(self) -> list[Row]: ...
    def fetch_one(self) -> Row | None: ...
    def close(self) -> None: ...


@runtime_checkable
class DatabaseHandle(Protocol):
    """
    Generic connection handle.

    Implemented by SqliteHandle, MysqlHandle and PostgresHandle; tests may
    supply any object with the same shape.
    """

    driver: str

    def prepare(self, sql: str) -> Statement: ...
    def last_insert_id(self) -> str: ...
    def begin(self) -> bool: ...
    def commit(self) -> bool: ...
    def rollback(self) -> bool: ...
    def error_info(self) -> tuple[str | int | None, str | None]: ...
    def close(self) -> None: ...
