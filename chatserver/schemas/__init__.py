"""Schemas package for request/response validation."""

from chatserver.schemas.common import ResponseMessage, HealthCheckResponse
from chatserver.schemas.token import (
    AccessToken,
    Token,
    LoginResponse,
    RefreshTokenRequest,
    RevokedTokensResponse,
)
from chatserver.schemas.user import (
    UserBase,
    UserCreate,
    UserResponse,
    UserLogin,
    PasswordChange,
)

__all__ = [
    "ResponseMessage",
    "HealthCheckResponse",
    "AccessToken",
    "Token",
    "LoginResponse",
    "RefreshTokenRequest",
    "RevokedTokensResponse",
    "UserBase",
    "UserCreate",
    "UserResponse",
    "UserLogin",
    "PasswordChange",
]
