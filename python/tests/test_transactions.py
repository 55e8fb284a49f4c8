from recordstore import RecordStore


def test_commit_makes_writes_visible(store, db_path):
    assert store.begin_transaction() is True
    store.insert_record("users", {"name": "ann"})
    store.insert_record("users", {"name": "bob"})
    assert store.end_transaction() is True

    with RecordStore.open_sqlite(db_path) as other:
        assert other.get_row_count("users") == 2


def test_rollback_discards_writes(store, db_path):
    store.insert_record("users", {"name": "kept"})

    assert store.begin_transaction()
    store.insert_record("users", {"name": "ann"})
    store.update_record("users", {"name": "renamed"})
    assert store.get_row_count("users") == 2
    assert store.cancel_transaction() is True

    assert store.get_row_count("users") == 1
    assert store.select_one_record_with_id("users", 1)["name"] == "kept"
    with RecordStore.open_sqlite(db_path) as other:
        assert other.get_row_count("users") == 1


def test_commit_without_transaction_fails(store):
    assert store.end_transaction() is False
    assert store.get_last_error() == "There is no active transaction"


def test_rollback_without_transaction_fails(store):
    assert store.cancel_transaction() is False
    assert store.get_last_error() == "There is no active transaction"


def test_nested_begin_is_rejected(store):
    assert store.begin_transaction()
    assert store.begin_transaction() is False
    assert store.get_last_error() == "There is already an active transaction"
    assert store.cancel_transaction()


def test_transaction_can_be_reused(store):
    for name in ("ann", "bob"):
        assert store.begin_transaction()
        store.insert_record("users", {"name": name})
        assert store.end_transaction()
    assert store.get_row_count("users") == 2
