"""Dependencies for API endpoints."""

from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from chatserver.core.exceptions import AuthenticationError, PermissionDeniedError
from chatserver.core.tokens import (
    AccessClaims,
    TokenService,
    VerifyFailure,
    get_token_service,
)
from chatserver.database import get_async_session
from chatserver.models import User
from chatserver.services import AuthService, InactiveUser, UserNotFound
from chatserver.utils.context import set_context
from chatserver.utils.logger import get_logger

logger = get_logger(__name__)

# Bearer token extraction; missing tokens are reported by get_current_claims
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async for session in get_async_session():
        yield session


def get_tokens() -> TokenService:
    """Get the token service."""
    return get_token_service()


def get_auth_service(
    token_service: Annotated[TokenService, Depends(get_tokens)],
) -> AuthService:
    """Get the authentication service."""
    return AuthService(token_service)


async def get_current_claims(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    token_service: Annotated[TokenService, Depends(get_tokens)],
) -> AccessClaims:
    """Verify the Bearer access token and return its claims."""
    if not token:
        raise AuthenticationError("Access token is required")

    result = token_service.verify_access_token(token)
    if isinstance(result, VerifyFailure):
        logger.info("Access token rejected", extra={"reason": result.error})
        raise AuthenticationError("Invalid or expired access token")

    claims = result.decoded
    set_context(user_id=claims.id, user_email=claims.email)
    return claims


async def get_current_user(
    claims: Annotated[AccessClaims, Depends(get_current_claims)],
    db: Annotated[AsyncSession, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """Get current authenticated user from the access token."""
    try:
        return await auth_service.get_user_from_claims(db, claims)
    except UserNotFound as e:
        raise AuthenticationError(str(e))
    except InactiveUser as e:
        raise PermissionDeniedError(str(e))
