# ledger/config.py
import os
from datetime import timedelta

DEFAULT_JWT_SECRET = "dev-key-for-local-ledger-only-change-me-in-production"
DEFAULT_DB_PATH = os.path.join(os.getcwd(), "data", "ledger.db")
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5000"

# Tokens are valid for a fixed 24 hours
TOKEN_LIFETIME = timedelta(hours=24)


def _split_origins(raw):
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


def load_config():
    """
    Build the app configuration from environment variables.

    Every value has a default so the backend starts on a bare checkout; only
    JWT_SECRET_KEY should always be set outside development.
    """
    return {
        "JWT_SECRET_KEY": os.environ.get("JWT_SECRET_KEY", DEFAULT_JWT_SECRET),
        "JWT_ACCESS_TOKEN_EXPIRES": TOKEN_LIFETIME,
        "JWT_TOKEN_LOCATION": ["headers"],
        "DB_PATH": os.environ.get("DB_PATH", DEFAULT_DB_PATH),
        "DB_TIMEOUT": float(os.environ.get("DB_TIMEOUT", 5)),
        "CORS_ORIGINS": _split_origins(os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "MAX_AMOUNT": os.environ.get("MAX_AMOUNT", "10000000"),
        "HOST": os.environ.get("HOST", "127.0.0.1"),
        "PORT": int(os.environ.get("PORT", 3000)),
    }
