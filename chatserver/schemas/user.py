"""User schemas for request/response validation."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict, model_validator


class UserBase(BaseModel):
    """Base user schema with common fields."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User's display name",
        examples=["Alice"],
    )
    email: EmailStr = Field(
        ..., description="User email address", examples=["alice@example.com"]
    )


class UserCreate(UserBase):
    """Schema for registering a new user."""

    password: str = Field(
        ...,
        min_length=6,
        max_length=100,
        description="User password (minimum 6 characters)",
        examples=["s3cret!"],
    )
    confirm_password: Optional[str] = Field(
        default=None, description="Optional password confirmation"
    )

    @model_validator(mode="after")
    def check_passwords_match(self) -> "UserCreate":
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


class UserResponse(UserBase):
    """Schema for user response (public information)."""

    id: str = Field(..., description="User ID")
    is_active: bool = Field(..., description="Whether the account is active")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr = Field(..., description="User email", examples=["alice@example.com"])
    password: str = Field(..., min_length=1, description="User password")


class PasswordChange(BaseModel):
    """Schema for changing the current user's password."""

    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(
        ...,
        min_length=6,
        max_length=100,
        description="New password (minimum 6 characters)",
    )
