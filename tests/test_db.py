import sqlite3

import pytest

from ledger.db import Database, is_conflict


def test_open_creates_tables(db):
    names = {r["name"] for r in db.query("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"user_details", "ledger_transactions"} <= names


def test_open_is_idempotent(tmp_path):
    path = str(tmp_path / "twice.db")
    Database(path).open().close()
    database = Database(path).open()
    assert database.is_open
    database.close()


def test_connect_after_close_fails(tmp_path):
    database = Database(str(tmp_path / "closed.db")).open()
    database.close()
    with pytest.raises(RuntimeError):
        database.connect()


def test_transaction_rolls_back_on_error(db):
    with pytest.raises(ValueError):
        with db.transaction() as conn:
            conn.execute(
                "INSERT INTO user_details (name, email, password_hash) VALUES (?, ?, ?)",
                ("A", "a@x.com", "h"),
            )
            raise ValueError("boom")
    assert db.query("SELECT COUNT(*) AS c FROM user_details", one=True)["c"] == 0


def test_transaction_commits(db):
    with db.transaction() as conn:
        conn.execute(
            "INSERT INTO user_details (name, email, password_hash) VALUES (?, ?, ?)",
            ("A", "a@x.com", "h"),
        )
    assert db.query("SELECT COUNT(*) AS c FROM user_details", one=True)["c"] == 1


def test_is_conflict():
    assert is_conflict(sqlite3.OperationalError("database is locked"))
    assert not is_conflict(sqlite3.OperationalError("no such table: x"))
    assert not is_conflict(ValueError("locked"))
