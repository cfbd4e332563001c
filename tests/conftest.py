"""
Shared pytest fixtures for the passmng test suite.

Every test gets its own store file under ``tmp_path`` and the key
derivation cost is turned down so opening a store stays fast.
"""

import pytest

import database.db as db_mod
from app.models import AppState
from app.session import Session
from database.db import RecordStore
from record import Record

PASSPHRASE = "correct horse battery staple"


class FakeClipboard:
    def __init__(self):
        self.copied = []

    def __call__(self, value: str) -> None:
        self.copied.append(value)


@pytest.fixture(autouse=True)
def _cheap_key_derivation(monkeypatch):
    monkeypatch.setattr(db_mod, "KDF_ITERATIONS", 1000)
    monkeypatch.setattr(db_mod, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "passmng" / "passwords.db"


@pytest.fixture
def store(store_path):
    store = RecordStore.open(PASSPHRASE, store_path)
    yield store
    store.close()


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def session(store, clipboard):
    return Session(store, AppState(), clipboard=clipboard)


@pytest.fixture
def seeded_session(store, clipboard):
    """A session over three persisted records: Bank, Email, Backup."""
    for title, username, password in (
        ("Bank", "alice", "p1"),
        ("Email", "alice@example.com", "p2"),
        ("Backup", "root", "p3"),
    ):
        store.insert(Record(title=title, username=username, password=password))
    return Session.load(store, clipboard=clipboard)
