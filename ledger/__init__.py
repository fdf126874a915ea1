"""Personal finance ledger: accounts, bearer tokens and a never-negative running balance."""

from .app import create_app

__version__ = "1.0.0"

__all__ = ["create_app"]
