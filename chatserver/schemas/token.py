"""Token schemas for the authentication endpoints."""

from typing import Optional

from pydantic import BaseModel, Field

from chatserver.schemas.user import UserResponse


class AccessToken(BaseModel):
    """Access token response schema."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class Token(AccessToken):
    """Access and refresh token pair."""

    refresh_token: str = Field(..., description="JWT refresh token")


class LoginResponse(Token):
    """Login response: token pair plus the authenticated user."""

    user: UserResponse


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema.

    The token may also come from the refresh cookie, so the body field is
    optional.
    """

    refresh_token: Optional[str] = Field(
        default=None, description="Refresh token, when not sent as a cookie"
    )


class RevokedTokensResponse(BaseModel):
    """Result of revoking every refresh token of a user."""

    message: str = Field(..., description="Response message")
    revoked: int = Field(..., description="Number of refresh tokens revoked")
