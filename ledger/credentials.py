# ledger/credentials.py
import logging
import sqlite3
from datetime import datetime, timezone

from werkzeug.security import check_password_hash, generate_password_hash

from .db import is_conflict
from .errors import DuplicateEmail, InternalError, InvalidCredentials, LedgerError, StoreConflict
from .models import User

logger = logging.getLogger("ledger-backend")


def normalize_email(email):
    return str(email or "").strip().lower()


def hash_password(password):
    """Salted hash; werkzeug picks the algorithm and salt."""
    return generate_password_hash(password)


def check_password(password_hash, password):
    if not password_hash or not isinstance(password, str):
        return False
    return check_password_hash(password_hash, password)


def utcnow():
    return datetime.now(timezone.utc)


class CredentialStore:
    """Persists users and looks them up by email or id."""

    def __init__(self, db):
        self.db = db

    def insert_user(self, conn, name, email, password_hash, dob=None, address=None):
        """
        Insert a user on an open transaction and return the new id.

        The email check runs first for a friendly error; the UNIQUE constraint
        still decides when two signups race. Raises DuplicateEmail.
        """
        email = normalize_email(email)
        existing = conn.execute(
            "SELECT id FROM user_details WHERE email = ?", (email,)
        ).fetchone()
        if existing:
            raise DuplicateEmail()

        try:
            cur = conn.execute(
                "INSERT INTO user_details (name, email, password_hash, dob, address, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (name, email, password_hash, dob or None, address or None, utcnow().isoformat()),
            )
        except sqlite3.IntegrityError:
            raise DuplicateEmail()
        return cur.lastrowid

    def create_user(self, name, email, password_hash, dob=None, address=None):
        """Create a user in its own transaction. Returns (user_id, error)."""
        try:
            with self.db.transaction() as conn:
                user_id = self.insert_user(conn, name, email, password_hash, dob, address)
            return user_id, None
        except LedgerError as e:
            return None, e
        except sqlite3.OperationalError as e:
            if is_conflict(e):
                return None, StoreConflict()
            logger.exception("User insert failed")
            return None, InternalError()

    def find_by_email(self, email):
        row = self.db.query(
            "SELECT * FROM user_details WHERE email = ?", (normalize_email(email),), one=True
        )
        return User.from_row(row) if row else None

    def find_by_id(self, user_id):
        row = self.db.query("SELECT * FROM user_details WHERE id = ?", (user_id,), one=True)
        return User.from_row(row) if row else None

    def authenticate(self, email, password):
        """Returns (user, None) or (None, InvalidCredentials); one error for both failure modes."""
        user = self.find_by_email(email)
        if user is None or not check_password(user.password_hash, password):
            logger.warning("Failed login attempt")
            return None, InvalidCredentials()
        return user, None
