"""Tests for security module (Argon2 hashing and refresh token digests)."""

from chatserver.core.security import (
    get_password_hash,
    hash_token,
    verify_password,
)


def test_password_hashing() -> None:
    """Test password hashing with Argon2."""
    password = "mysecretpassword123"
    hashed = get_password_hash(password)

    assert hashed != password
    assert hashed.startswith("$argon2id$")


def test_password_verification_success() -> None:
    """Test successful password verification."""
    hashed = get_password_hash("mysecretpassword123")

    assert verify_password("mysecretpassword123", hashed) is True


def test_password_verification_failure() -> None:
    """Test failed password verification."""
    hashed = get_password_hash("mysecretpassword123")

    assert verify_password("wrongpassword456", hashed) is False


def test_password_hashes_are_salted() -> None:
    """Test that same password produces different hashes."""
    hash1 = get_password_hash("mysecretpassword123")
    hash2 = get_password_hash("mysecretpassword123")

    assert hash1 != hash2
    assert verify_password("mysecretpassword123", hash1) is True
    assert verify_password("mysecretpassword123", hash2) is True


def test_unicode_password() -> None:
    """Test hashing passwords with unicode characters."""
    password = "contraseña🔐密码"
    hashed = get_password_hash(password)

    assert verify_password(password, hashed) is True
    assert verify_password("wrongpassword", hashed) is False


def test_verify_against_malformed_hash() -> None:
    """Test that a corrupted stored hash fails verification instead of raising."""
    assert verify_password("password", "not-an-argon2-hash") is False


def test_hash_token_is_deterministic() -> None:
    """Test that refresh token digests can be used for lookups."""
    token = "header.payload.signature"

    assert hash_token(token) == hash_token(token)
    assert hash_token(token) != hash_token(token + "x")


def test_hash_token_hides_token() -> None:
    """Test that the digest is a fixed-length hex string unrelated to the token."""
    digest = hash_token("header.payload.signature")

    assert len(digest) == 64
    assert "payload" not in digest
    int(digest, 16)
