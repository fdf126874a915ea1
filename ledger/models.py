# ledger/models.py
# lightweight model classes (not DB-bound ORM)
from decimal import Decimal

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

CREDIT = "credit"
EXPENSE = "expense"
TRANSACTION_TYPES = (CREDIT, EXPENSE)


def to_money(value):
    """Quantize a stored or computed value to two decimal places."""
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(CENTS)


def _iso(value):
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


class User:
    def __init__(self, id, name, email, password_hash, dob=None, address=None, created_at=None):
        self.id = id
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.dob = dob
        self.address = address
        self.created_at = created_at

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            dob=row["dob"],
            address=row["address"],
            created_at=row["created_at"],
        )

    def to_dict(self):
        # password_hash never leaves the server
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "dob": _iso(self.dob),
            "address": self.address,
            "created_at": _iso(self.created_at),
        }

    def summary(self):
        return {"id": self.id, "name": self.name, "email": self.email}


class Transaction:
    def __init__(self, id, user_id, amount, type, reason, balance_after, created_at=None):
        self.id = id
        self.user_id = user_id
        self.amount = to_money(amount)
        self.type = type
        self.reason = reason
        self.balance_after = to_money(balance_after)
        self.created_at = created_at

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            amount=row["amount"],
            type=row["type"],
            reason=row["reason"],
            balance_after=row["balance_after"],
            created_at=row["created_at"],
        )

    def signed_amount(self):
        return self.amount if self.type == CREDIT else -self.amount

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "amount": float(self.amount),
            "type": self.type,
            "reason": self.reason,
            "balance_after": float(self.balance_after),
            "created_at": _iso(self.created_at),
        }

    def __repr__(self):
        return f"<Transaction {self.id} {self.type} {self.amount} -> {self.balance_after}>"
