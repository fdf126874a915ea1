# ledger/db.py
import logging
import os
import sqlite3
from contextlib import contextmanager

logger = logging.getLogger("ledger-backend")

SCHEMA_FILE = os.path.join(os.path.dirname(__file__), "schema.sql")
EXTENSION_KEY = "ledger_db"


def is_conflict(exc):
    """True when sqlite gave up waiting for another writer."""
    if not isinstance(exc, sqlite3.OperationalError):
        return False
    text = str(exc).lower()
    return "locked" in text or "busy" in text


class Database:
    """
    Handle on the SQLite ledger file.

    Created once by the app factory, opened at start-up and closed at shutdown.
    Every unit of work gets its own connection so requests never share cursor
    state; sqlite's file lock is what serializes writers.
    """

    def __init__(self, path, timeout=5.0):
        self.path = path
        self.timeout = timeout
        self._open = False

    @property
    def is_open(self):
        return self._open

    def open(self):
        """Create the schema (idempotent) and mark the handle usable."""
        if self._open:
            return self
        if not os.path.exists(SCHEMA_FILE):
            raise FileNotFoundError(f"schema.sql not found at expected path: {SCHEMA_FILE}")

        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        self._open = True
        conn = self.connect()
        try:
            with open(SCHEMA_FILE, "r", encoding="utf-8") as f:
                conn.executescript(f.read())
        except Exception:
            self._open = False
            raise
        finally:
            conn.close()
        logger.info(f"Ledger database ready at {self.path}")
        return self

    def close(self):
        if self._open:
            self._open = False
            logger.info("Ledger database closed")

    def connect(self):
        if not self._open:
            raise RuntimeError("Database is not open")
        # isolation_level=None: transactions are started explicitly below
        conn = sqlite3.connect(
            self.path,
            timeout=self.timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def transaction(self):
        """
        Run a block atomically.

        BEGIN IMMEDIATE takes the write lock before the first read, so a
        read-balance-then-insert sequence cannot interleave with another one.
        Any exception rolls the whole block back and is re-raised.
        """
        conn = self.connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def query(self, query, args=(), one=False):
        conn = self.connect()
        try:
            cur = conn.execute(query, args)
            rv = cur.fetchall()
            cur.close()
        finally:
            conn.close()
        return (rv[0] if rv else None) if one else rv
