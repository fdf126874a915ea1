# ledger/errors.py
"""Error types returned by the ledger operations.

Operations hand these back as the second element of a ``(value, error)`` tuple;
the HTTP layer turns them into a status code and a JSON body.
"""

from flask import jsonify


class LedgerError(Exception):
    status_code = 500
    message = "Internal server error"
    retryable = False

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        body = {"error": self.message}
        if self.retryable:
            body["retryable"] = True
        return body


class ValidationError(LedgerError):
    status_code = 400
    message = "Please provide all required fields"


class DuplicateEmail(LedgerError):
    status_code = 400
    message = "Email already registered"


class InvalidCredentials(LedgerError):
    # Same text for unknown email and wrong password
    status_code = 401
    message = "Invalid email or password"


class InvalidToken(LedgerError):
    # Same text for expired, malformed and badly signed tokens
    status_code = 403
    message = "Invalid or expired token"


class MissingToken(LedgerError):
    status_code = 401
    message = "Access token required"


class InsufficientBalance(LedgerError):
    status_code = 400
    message = "Insufficient balance"


class NotFound(LedgerError):
    status_code = 404
    message = "User not found"


class StoreConflict(LedgerError):
    status_code = 409
    message = "The ledger is busy, please retry"
    retryable = True


class InternalError(LedgerError):
    status_code = 500
    message = "Internal server error"


def error_response(err):
    """(body, status) pair for a Flask view."""
    return jsonify(err.to_dict()), err.status_code
