"""Services package."""

from chatserver.services.auth_service import (
    AuthService,
    AuthServiceError,
    EmailAlreadyRegistered,
    InactiveUser,
    InvalidCredentials,
    InvalidRefreshToken,
    LoginResult,
    UserNotFound,
)

__all__ = [
    "AuthService",
    "AuthServiceError",
    "EmailAlreadyRegistered",
    "InactiveUser",
    "InvalidCredentials",
    "InvalidRefreshToken",
    "LoginResult",
    "UserNotFound",
]
