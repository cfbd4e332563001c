"""Tests for the encrypted RecordStore."""

import sqlite3

import pytest

from app.errors import AuthenticationError, StoreIOError
from database.db import RecordStore
from record import Record

from conftest import PASSPHRASE


class TestOpen:

    def test_creates_file_and_parent_dirs(self, store_path):
        with RecordStore.open(PASSPHRASE, store_path):
            pass
        assert store_path.exists()

    def test_new_store_is_empty(self, store):
        assert store.load_all() == []

    def test_reopen_with_same_passphrase(self, store_path):
        RecordStore.open(PASSPHRASE, store_path).close()
        with RecordStore.open(PASSPHRASE, store_path) as reopened:
            assert reopened.load_all() == []

    def test_wrong_passphrase_is_rejected(self, store_path):
        RecordStore.open(PASSPHRASE, store_path).close()
        with pytest.raises(AuthenticationError):
            RecordStore.open("not the passphrase", store_path)

    def test_empty_passphrase_is_rejected(self, store_path):
        with pytest.raises(AuthenticationError):
            RecordStore.open("", store_path)
        assert not store_path.exists()

    def test_long_passphrases_are_fully_checked(self, store_path):
        long_passphrase = "x" * 100
        RecordStore.open(long_passphrase, store_path).close()
        with pytest.raises(AuthenticationError):
            RecordStore.open("x" * 99 + "y", store_path)

    def test_garbage_file_is_an_io_error(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_bytes(b"this is not a sqlite database at all" * 100)
        with pytest.raises(StoreIOError):
            RecordStore.open(PASSPHRASE, store_path)

    def test_store_io_error_is_an_ioerror(self):
        assert issubclass(StoreIOError, IOError)


class TestCrud:

    def test_insert_assigns_distinct_ids(self, store):
        ids = [store.insert(Record(title=f"t{i}", username="u", password="p")) for i in range(5)]
        assert len(set(ids)) == 5
        assert all(isinstance(i, int) for i in ids)

    def test_insert_rejects_persisted_record(self, store):
        with pytest.raises(ValueError):
            store.insert(Record(id=3, title="t"))

    def test_round_trip_on_fresh_handle(self, store, store_path):
        new_id = store.insert(Record(title="Bank", username="alice", password="p1"))
        store.close()
        with RecordStore.open(PASSPHRASE, store_path) as fresh:
            assert fresh.load_all() == [Record(id=new_id, title="Bank", username="alice", password="p1")]

    def test_load_all_is_in_insert_order(self, store):
        for title in ("b", "a", "c"):
            store.insert(Record(title=title))
        assert [r.title for r in store.load_all()] == ["b", "a", "c"]

    def test_update_overwrites_all_fields(self, store):
        new_id = store.insert(Record(title="Bank", username="alice", password="p1"))
        store.update(new_id, Record(title="Bank2", username="bob", password="p2"))
        assert store.load_all() == [Record(id=new_id, title="Bank2", username="bob", password="p2")]

    def test_update_unknown_id_raises(self, store):
        with pytest.raises(StoreIOError):
            store.update(42, Record(title="x"))

    def test_delete_removes_row(self, store):
        keep = store.insert(Record(title="keep"))
        gone = store.insert(Record(title="gone"))
        store.delete(gone)
        assert [r.id for r in store.load_all()] == [keep]

    def test_delete_unknown_id_is_noop(self, store):
        store.insert(Record(title="keep"))
        store.delete(999)
        assert len(store.load_all()) == 1

    def test_deleted_ids_are_not_reused(self, store):
        first = store.insert(Record(title="a"))
        store.delete(first)
        assert store.insert(Record(title="b")) != first

    def test_unicode_fields_survive(self, store):
        new_id = store.insert(Record(title="Café ☕", username="ünï", password="密码"))
        assert store.load_all()[0] == Record(id=new_id, title="Café ☕", username="ünï", password="密码")


class TestEncryption:

    def test_fields_are_not_stored_in_plaintext(self, store, store_path):
        store.insert(Record(title="MyBank", username="alice", password="hunter2"))
        conn = sqlite3.connect(store_path)
        try:
            row = conn.execute("SELECT title, username, password FROM passwords").fetchone()
        finally:
            conn.close()
        assert "MyBank" not in row
        assert "alice" not in row
        assert "hunter2" not in row

    def test_corrupt_token_fails_load(self, store, store_path):
        store.insert(Record(title="a", username="b", password="c"))
        conn = sqlite3.connect(store_path)
        try:
            conn.execute("UPDATE passwords SET password = 'garbage'")
            conn.commit()
        finally:
            conn.close()
        with pytest.raises(StoreIOError):
            store.load_all()

    def test_failed_write_raises_store_io_error(self, store, store_path):
        conn = sqlite3.connect(store_path)
        try:
            conn.execute("DROP TABLE passwords")
            conn.commit()
        finally:
            conn.close()
        with pytest.raises(StoreIOError):
            store.insert(Record(title="a"))
