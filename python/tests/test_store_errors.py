import pytest

from recordstore import RecordStore
from recordstore.db.dbapi_adapter import PARAMETER_COUNT_MISMATCH


def test_connection_failure_leaves_store_degraded(tmp_path):
    store = RecordStore.open_sqlite(str(tmp_path / "missing" / "dir" / "app.db"))
    assert store.get_last_error()

    assert store.query("SELECT 1") is None
    assert store.get_last_error() == "No database connection"
    assert store.insert_record("users", {"name": "ann"}) is None
    assert store.get_row_count("users") is None
    assert store.begin_transaction() is False
    store.close()


def test_unknown_driver_is_recorded():
    store = RecordStore("oracle:whatever")
    assert "oracle" in store.get_last_error()
    assert store.select_records("SELECT 1") is None


def test_target_without_driver_prefix_is_recorded():
    store = RecordStore("just-a-path.db")
    assert "Invalid data source name" in store.get_last_error()


def test_parameter_count_mismatch(store):
    assert store.query("SELECT * FROM users WHERE id=? AND name=?", [1]) is None
    assert store.get_last_error() == PARAMETER_COUNT_MISMATCH
    assert store.query("SELECT 1", [1]) is None
    assert store.get_last_error() == PARAMETER_COUNT_MISMATCH


def test_question_mark_inside_literal_is_not_a_placeholder(store):
    rows = store.select_records("SELECT '?' AS q WHERE 1=?", [1])
    assert rows == [{"q": "?"}]


def test_error_persists_until_next_query(store):
    store.query("SELEKT")
    first = store.get_last_error()
    assert first
    store.set_id_field_name("uuid")
    assert store.get_last_error() == first


def test_on_error_policy_receives_each_message(db_path):
    seen = []
    store = RecordStore.open_sqlite(db_path, on_error=seen.append)
    store.query("SELEKT")
    store.get_row_count("nope")
    assert len(seen) == 2
    assert seen[-1] == store.get_last_error()
    store.close()


def test_exit_after_error_terminates_after_recording(db_path):
    store = RecordStore.open_sqlite(db_path, exit_after_error=True)
    assert store.exit_after_error is True

    with pytest.raises(SystemExit) as excinfo:
        store.query("SELEKT")

    assert store.get_last_error()
    assert excinfo.value.code == store.get_last_error()
    store.close()


def test_exit_after_error_on_connection_failure(tmp_path):
    with pytest.raises(SystemExit):
        RecordStore.open_sqlite(str(tmp_path / "missing" / "app.db"), exit_after_error=True)


def test_explicit_policy_overrides_exit_flag(db_path):
    seen = []
    store = RecordStore.open_sqlite(db_path, exit_after_error=True, on_error=seen.append)
    assert store.query("SELEKT") is None
    assert seen == [store.get_last_error()]
    store.close()


def test_operations_after_close_fail_without_raising(db_path):
    store = RecordStore.open_sqlite(db_path)
    store.close()
    store.close()
    assert store.select_one_record("SELECT 1") is None
    assert store.get_last_error() == "No database connection"
    assert store.last_insert_id() is None


def test_value_the_driver_cannot_bind_is_recorded(store):
    assert store.insert_record("users", {"name": "x", "age": 2**64}) is None
    assert store.get_last_error().startswith("OverflowError")
    assert store.update_record_with_id("users", {"age": 2**64}, 1) is False
    assert store.get_last_error().startswith("OverflowError")
    assert store.get_row_count("users") == 0
