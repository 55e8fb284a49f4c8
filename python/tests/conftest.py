import pytest

from recordstore import RecordStore

USERS_DDL = """
CREATE TABLE users (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  email TEXT,
  age INTEGER
)
"""


@pytest.fixture()
def db_path(tmp_path):
    return str(tmp_path / "recordstore_test.db")


@pytest.fixture()
def store(db_path):
    s = RecordStore.open_sqlite(db_path)
    assert s.get_last_error() is None, s.get_last_error()
    statement = s.query(USERS_DDL)
    assert statement is not None, s.get_last_error()
    statement.close()
    yield s
    s.close()


@pytest.fixture()
def seeded(store):
    for name, age in (("ann", 31), ("bob", 42), ("cid", 27)):
        assert store.insert_record("users", {"name": name, "email": f"{name}@example.com", "age": age})
    return store
