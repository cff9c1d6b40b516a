"""Salted password hashing."""

from passlib.hash import pbkdf2_sha256 as hasher


def hash_password(raw: str, rounds: int = 29000) -> str:
    return hasher.using(rounds=rounds).hash(raw)


def verify_password(raw: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    try:
        return hasher.verify(raw, password_hash)
    except (ValueError, TypeError):
        return False
