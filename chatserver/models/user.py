"""User model for authentication."""

from typing import List, TYPE_CHECKING
from uuid import uuid4

from sqlmodel import Field, Relationship

from chatserver.models.base import TimestampModel

if TYPE_CHECKING:
    from chatserver.models.refresh_token import RefreshToken


class User(TimestampModel, table=True):
    """User database model."""

    __tablename__ = "users"

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        primary_key=True,
        max_length=36,
    )
    name: str = Field(
        nullable=False,
        max_length=255,
        description="User's display name",
    )
    email: str = Field(
        unique=True,
        index=True,
        nullable=False,
        max_length=255,
        description="User email address",
    )
    hashed_password: str = Field(
        nullable=False,
        description="Hashed password using Argon2id",
    )
    is_active: bool = Field(
        default=True,
        nullable=False,
        description="Whether the user account is active",
    )

    # Relationships
    refresh_tokens: List["RefreshToken"] = Relationship(
        back_populates="user", cascade_delete=True, passive_deletes=True
    )
