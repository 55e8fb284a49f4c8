"""
Database handle layer.

Provides a unified handle interface over SQLite, MySQL and PostgreSQL.
Handles are opened from connection targets (``sqlite:``, ``mysql:``, ``pgsql:``);
the application-wide store is configured by RECORDSTORE_DB_PROVIDER.
"""

from .factory import connect, get_record_store, reset_record_store
from .protocol import (
    NO_ROW,
    ConnectionFailedError,
    DatabaseError,
    DatabaseHandle,
    Row,
    Statement,
    UnsupportedTargetError,
)

__all__ = [
    "connect",
    "get_record_store",
    "reset_record_store",
    "DatabaseHandle",
    "Statement",
    "Row",
    "NO_ROW",
    "DatabaseError",
    "ConnectionFailedError",
    "UnsupportedTargetError",
]
