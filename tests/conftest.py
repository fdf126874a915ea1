"""
Shared fixtures.

Every test gets its own SQLite file under tmp_path; nothing touches data/.
"""

import pytest

from ledger.app import create_app
from ledger.credentials import CredentialStore
from ledger.db import Database
from ledger.engine import LedgerEngine


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "ledger.db"), timeout=5).open()
    yield database
    database.close()


@pytest.fixture
def credentials(db):
    return CredentialStore(db)


@pytest.fixture
def engine(db, credentials):
    return LedgerEngine(db, credentials)


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DB_PATH": str(tmp_path / "api.db"),
        "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
    })
    yield app
    app.extensions["ledger_db"].close()


@pytest.fixture
def client(app):
    return app.test_client()


def chain_is_consistent(transactions):
    """Walk newest-first rows oldest-first and recompute every balance_after."""
    running = 0
    for tx in reversed(transactions):
        running = running + tx.signed_amount()
        if tx.balance_after != running or tx.balance_after < 0:
            return False
    return True


def count_users(db):
    return db.query("SELECT COUNT(*) AS c FROM user_details", one=True)["c"]
