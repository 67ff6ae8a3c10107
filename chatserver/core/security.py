"""Security utilities for password hashing and refresh token digests."""

import hashlib

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# Password hasher using Argon2id (OWASP recommended)
ph = PasswordHasher()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against an Argon2 hashed password."""
    try:
        ph.verify(hashed_password, plain_password)
        return True
    except (VerificationError, InvalidHashError):
        return False


def get_password_hash(password: str) -> str:
    """Generate Argon2 password hash."""
    return ph.hash(password)


def hash_token(token: str) -> str:
    """SHA-256 digest of a refresh token, as stored in the database.

    Tokens are high-entropy and must be looked up by value, so a fast
    deterministic digest is used instead of a salted password hash.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
