# ledger/engine.py
import functools
import logging
import sqlite3
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Tuple

from .credentials import CredentialStore, hash_password, utcnow
from .db import is_conflict
from .errors import (
    InsufficientBalance,
    InternalError,
    LedgerError,
    NotFound,
    StoreConflict,
    ValidationError,
)
from .models import CREDIT, TRANSACTION_TYPES, ZERO, Transaction, to_money

logger = logging.getLogger("ledger-backend")

SEED_REASON = "Initial Balance"
MAX_REASON_LENGTH = 255
DEFAULT_MAX_AMOUNT = Decimal("10000000")

LAST_ROW_SQL = (
    "SELECT * FROM ledger_transactions WHERE user_id = ? "
    "ORDER BY created_at DESC, id DESC LIMIT 1"
)


def parse_money(value, field="Amount", allow_zero=False, max_amount=DEFAULT_MAX_AMOUNT):
    """
    Turn request input (number or numeric string) into a two-place Decimal.

    Returns (Decimal, None) or (None, ValidationError).
    """
    if value is None or isinstance(value, bool) or (isinstance(value, str) and not value.strip()):
        return None, ValidationError(f"{field} is required")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None, ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        return None, ValidationError(f"{field} must be a number")
    if amount < 0:
        if allow_zero:
            return None, ValidationError(f"{field} cannot be negative")
        return None, ValidationError(f"{field} must be greater than 0")
    if amount == 0 and not allow_zero:
        return None, ValidationError(f"{field} must be greater than 0")
    if amount > max_amount:
        return None, ValidationError(f"{field} too large: {amount}")
    if amount != amount.quantize(Decimal("0.01")):
        return None, ValidationError(f"{field} cannot have more than 2 decimal places")
    # "-0" passes the sign checks; drop the sign so it is stored as 0.00
    return to_money(abs(amount)), None


def _clean_text(value):
    return str(value).strip() if value is not None else ""


def _as_result(label):
    """Wrap an engine operation so it returns (value, error) instead of raising."""

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs), None
            except LedgerError as e:
                return None, e
            except sqlite3.OperationalError as e:
                if is_conflict(e):
                    logger.warning(f"{label}: database busy, asking client to retry")
                    return None, StoreConflict()
                logger.exception(f"{label} failed")
                return None, InternalError()
            except Exception:
                logger.exception(f"{label} failed")
                return None, InternalError()

        return wrapper

    return decorator


class LedgerEngine:
    """
    Owns every write to a user's balance.

    Each append reads the newest balance_after and inserts the next row inside
    one BEGIN IMMEDIATE transaction, so the chain of balances stays consistent
    even with concurrent requests for the same user.
    """

    def __init__(self, db, credentials=None, max_amount=DEFAULT_MAX_AMOUNT, clock=utcnow):
        self.db = db
        self.credentials = credentials or CredentialStore(db)
        self.max_amount = Decimal(str(max_amount))
        self.clock = clock

    # ---------------- Validation ----------------
    def validate_transaction(self, amount, kind, reason):
        if amount in (None, "") or not kind or not _clean_text(reason):
            raise ValidationError("Please provide all required fields")
        value, error = parse_money(amount, max_amount=self.max_amount)
        if error:
            raise error
        if kind not in TRANSACTION_TYPES:
            raise ValidationError('Type must be either "expense" or "credit"')
        reason = _clean_text(reason)
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationError(f"Reason cannot be longer than {MAX_REASON_LENGTH} characters")
        return value, kind, reason

    # ---------------- Core (runs on an open transaction) ----------------
    def _current_balance(self, conn, user_id):
        row = conn.execute(LAST_ROW_SQL, (user_id,)).fetchone()
        return (to_money(row["balance_after"]) if row else ZERO), row

    def _append(self, conn, user_id, amount, kind, reason):
        current, last = self._current_balance(conn, user_id)
        if kind == CREDIT:
            new_balance = current + amount
        else:
            new_balance = current - amount
            if new_balance < 0:
                logger.warning(
                    f"Rejected expense of {amount} for user {user_id}: balance is {current}"
                )
                raise InsufficientBalance()

        created_at = self.clock().isoformat()
        # never sort before the row whose balance we just built on
        if last is not None and last["created_at"] > created_at:
            created_at = last["created_at"]

        try:
            cur = conn.execute(
                "INSERT INTO ledger_transactions (user_id, amount, type, reason, balance_after, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (user_id, str(amount), kind, reason, str(new_balance), created_at),
            )
        except sqlite3.IntegrityError:
            raise NotFound()
        row = conn.execute(
            "SELECT * FROM ledger_transactions WHERE id = ?", (cur.lastrowid,)
        ).fetchone()
        return Transaction.from_row(row)

    # ---------------- Public operations ----------------
    @_as_result("Balance lookup")
    def get_current_balance(self, user_id) -> Decimal:
        row = self.db.query(
            "SELECT balance_after FROM ledger_transactions WHERE user_id = ? "
            "ORDER BY created_at DESC, id DESC LIMIT 1",
            (user_id,),
            one=True,
        )
        return to_money(row["balance_after"]) if row else ZERO

    @_as_result("Add transaction")
    def append_transaction(self, user_id, amount, kind, reason) -> Transaction:
        value, kind, reason = self.validate_transaction(amount, kind, reason)
        with self.db.transaction() as conn:
            tx = self._append(conn, user_id, value, kind, reason)
        logger.info(f"User {user_id}: {kind} of {value} recorded, balance now {tx.balance_after}")
        return tx

    @_as_result("List transactions")
    def list_transactions(self, user_id) -> List[Transaction]:
        rows = self.db.query(
            "SELECT * FROM ledger_transactions WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (user_id,),
        )
        return [Transaction.from_row(r) for r in rows]

    @_as_result("Signup")
    def open_account(self, name, email, password, initial_balance, dob=None, address=None) -> int:
        """
        Create a user together with the seed "Initial Balance" credit.

        Both rows are written in one transaction: if either insert fails,
        neither survives.
        """
        name = _clean_text(name)
        email = _clean_text(email)
        if not name or not email or not password or initial_balance is None or initial_balance == "":
            raise ValidationError("Please provide all required fields")
        if not isinstance(password, str):
            raise ValidationError("Password must be a string")
        if "@" not in email:
            raise ValidationError("Please provide a valid email address")

        opening, error = parse_money(
            initial_balance, field="Initial balance", allow_zero=True, max_amount=self.max_amount
        )
        if error:
            raise error

        dob = _clean_text(dob) or None
        if dob is not None:
            try:
                date.fromisoformat(dob)
            except ValueError:
                raise ValidationError("Date of birth must be in YYYY-MM-DD format")
        address = _clean_text(address) or None

        # slow on purpose; keep it outside the write lock
        password_hash = hash_password(password)

        with self.db.transaction() as conn:
            user_id = self.credentials.insert_user(conn, name, email, password_hash, dob, address)
            self._append(conn, user_id, opening, CREDIT, SEED_REASON)
        logger.info(f"User {user_id} signed up with opening balance {opening}")
        return user_id

    @_as_result("Account lookup")
    def account_summary(self, user_id) -> Tuple[object, Decimal]:
        user = self.credentials.find_by_id(user_id)
        if user is None:
            raise NotFound()
        balance, error = self.get_current_balance(user_id)
        if error:
            raise error
        return user, balance
