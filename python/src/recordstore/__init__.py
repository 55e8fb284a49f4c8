"""
recordstore: parameterized CRUD helpers over SQLite, MySQL and PostgreSQL.

    from recordstore import RecordStore

    store = RecordStore.open_sqlite("app.db")
    new_id = store.insert_record("users", {"name": "Ann"})
    if new_id is None:
        print(store.get_last_error())
"""

from .db import NO_ROW, DatabaseError, DatabaseHandle, Row, Statement, get_record_store, reset_record_store
from .error_policy import exit_on_error, record_only
from .store import RecordStore

__all__ = [
    "RecordStore",
    "NO_ROW",
    "Row",
    "Statement",
    "DatabaseHandle",
    "DatabaseError",
    "get_record_store",
    "reset_record_store",
    "record_only",
    "exit_on_error",
]
