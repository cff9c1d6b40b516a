"""Authentication and session package."""

from finledger.auth.passwords import hash_password, verify_password
from finledger.auth.session import SessionStore

__all__ = ["SessionStore", "hash_password", "verify_password"]
