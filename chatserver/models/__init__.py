"""Database models package."""

from chatserver.models.base import TimestampModel
from chatserver.models.user import User
from chatserver.models.refresh_token import RefreshToken

__all__ = ["TimestampModel", "User", "RefreshToken"]
