"""Refresh token model: hashed record of every issued refresh token."""

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import Index
from sqlmodel import Field, Relationship

from chatserver.models.base import TimestampModel, UTCDateTime, as_utc, utcnow

if TYPE_CHECKING:
    from chatserver.models.user import User


class RefreshToken(TimestampModel, table=True):
    """Refresh token database model.

    Only the SHA-256 digest of the token is stored. A token is usable while
    it is not revoked and ``expires_at`` lies in the future.
    """

    __tablename__ = "refresh_tokens"
    __table_args__ = (
        Index("ix_refresh_tokens_user_id_is_revoked", "user_id", "is_revoked"),
    )

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        primary_key=True,
        max_length=36,
    )
    user_id: str = Field(
        foreign_key="users.id",
        ondelete="CASCADE",
        index=True,
        nullable=False,
        max_length=36,
        description="Owner of the token",
    )
    token_hash: str = Field(
        unique=True,
        index=True,
        nullable=False,
        max_length=64,
        description="SHA-256 digest of the refresh token",
    )
    expires_at: datetime = Field(
        sa_type=UTCDateTime,
        index=True,
        nullable=False,
        description="Token expiration timestamp (UTC)",
    )
    is_revoked: bool = Field(
        default=False,
        nullable=False,
        description="Whether the token has been revoked",
    )

    # Relationships
    user: Optional["User"] = Relationship(back_populates="refresh_tokens")

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Whether the token is neither revoked nor expired."""
        if self.is_revoked:
            return False
        return as_utc(self.expires_at) > as_utc(now or utcnow())
