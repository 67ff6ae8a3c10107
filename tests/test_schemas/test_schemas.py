"""Tests for request and response schemas."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from chatserver.models import User
from chatserver.schemas.user import UserCreate, UserResponse, UserLogin, PasswordChange
from chatserver.schemas.token import LoginResponse, RefreshTokenRequest
from chatserver.schemas.common import ResponseMessage


# Tests for User Schemas


def test_user_create_valid() -> None:
    """Test creating a valid UserCreate schema."""
    user = UserCreate(name="Alice", email="alice@example.com", password="s3cret!")

    assert user.name == "Alice"
    assert user.email == "alice@example.com"
    assert user.confirm_password is None


def test_user_create_matching_confirmation() -> None:
    user = UserCreate(
        name="Alice",
        email="alice@example.com",
        password="s3cret!",
        confirm_password="s3cret!",
    )

    assert user.confirm_password == "s3cret!"


def test_user_create_mismatched_confirmation() -> None:
    with pytest.raises(ValidationError, match="Passwords do not match"):
        UserCreate(
            name="Alice",
            email="alice@example.com",
            password="s3cret!",
            confirm_password="different",
        )


def test_user_create_invalid_fields() -> None:
    """Test creating UserCreate with invalid or missing fields."""
    with pytest.raises(ValidationError):
        UserCreate(name="Alice", email="invalid-email", password="s3cret!")

    with pytest.raises(ValidationError):
        UserCreate(name="Alice", email="alice@example.com", password="short")

    with pytest.raises(ValidationError):
        UserCreate(name="", email="alice@example.com", password="s3cret!")

    with pytest.raises(ValidationError):
        UserCreate(email="alice@example.com", password="s3cret!")


def test_user_response_from_model() -> None:
    """Test that UserResponse reads a User and omits the password hash."""
    user = User(
        name="Alice",
        email="alice@example.com",
        hashed_password="hash",
        created_at=datetime(2026, 1, 1),
        updated_at=datetime(2026, 1, 1),
    )

    response = UserResponse.model_validate(user)
    data = response.model_dump()

    assert data["id"] == user.id
    assert data["is_active"] is True
    assert "hashed_password" not in data


def test_user_login_requires_password() -> None:
    with pytest.raises(ValidationError):
        UserLogin(email="alice@example.com", password="")


def test_password_change_min_length() -> None:
    with pytest.raises(ValidationError):
        PasswordChange(current_password="old", new_password="12345")


# Tests for Token Schemas


def test_refresh_token_request_optional() -> None:
    assert RefreshTokenRequest().refresh_token is None
    assert RefreshTokenRequest(refresh_token="abc").refresh_token == "abc"


def test_login_response_defaults_to_bearer() -> None:
    response = LoginResponse(
        access_token="a",
        refresh_token="r",
        user={
            "id": "u1",
            "name": "Alice",
            "email": "alice@example.com",
            "is_active": True,
            "created_at": datetime(2026, 1, 1),
            "updated_at": datetime(2026, 1, 1),
        },
    )

    assert response.token_type == "bearer"
    assert response.user.name == "Alice"


# Tests for Common Schemas


def test_response_message() -> None:
    assert ResponseMessage(message="Logout successful").message == "Logout successful"
