"""Authentication endpoints: register, login, refresh, logout."""

from typing import Annotated, Optional

from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from chatserver.api.deps import (
    get_auth_service,
    get_current_user,
    get_db,
    get_tokens,
)
from chatserver.config import settings
from chatserver.core.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    PermissionDeniedError,
)
from chatserver.core.tokens import TokenService
from chatserver.models import User
from chatserver.schemas import (
    AccessToken,
    LoginResponse,
    PasswordChange,
    RefreshTokenRequest,
    ResponseMessage,
    RevokedTokensResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from chatserver.services import (
    AuthService,
    EmailAlreadyRegistered,
    InactiveUser,
    InvalidCredentials,
    InvalidRefreshToken,
)

router = APIRouter()

RefreshCookie = Annotated[
    Optional[str], Cookie(alias=settings.REFRESH_COOKIE_NAME)
]


def set_refresh_cookie(
    response: Response, refresh_token: str, token_service: TokenService
) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
        max_age=int(token_service.config.refresh_expires_in.total_seconds()),
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def resolve_refresh_token(
    cookie_token: Optional[str], body: Optional[RefreshTokenRequest]
) -> Optional[str]:
    """Refresh token from the cookie, falling back to the request body."""
    if cookie_token:
        return cookie_token
    if body is not None and body.refresh_token:
        return body.refresh_token
    return None


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    user_in: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """
    Register a new user.

    The password is hashed before it is stored.
    """
    try:
        return await auth_service.register_user(
            db, name=user_in.name, email=user_in.email, password=user_in.password
        )
    except EmailAlreadyRegistered as e:
        raise ConflictError(str(e))


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: UserLogin,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    token_service: Annotated[TokenService, Depends(get_tokens)],
) -> LoginResponse:
    """
    Log in with email and password.

    Returns an access/refresh token pair. The refresh token is also set as
    an httpOnly cookie.
    """
    try:
        result = await auth_service.login_user(
            db, email=credentials.email, password=credentials.password
        )
    except InvalidCredentials as e:
        raise AuthenticationError(str(e))
    except InactiveUser as e:
        raise PermissionDeniedError(str(e))

    set_refresh_cookie(response, result.refresh_token, token_service)

    return LoginResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        token_type="bearer",
        user=UserResponse.model_validate(result.user),
    )


@router.post("/refresh", response_model=AccessToken)
async def refresh_token(
    db: Annotated[AsyncSession, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    refresh_cookie: RefreshCookie = None,
    refresh_request: Optional[RefreshTokenRequest] = None,
) -> AccessToken:
    """
    Get a new access token using a refresh token.

    The refresh token is read from the cookie or, failing that, the body.
    """
    token = resolve_refresh_token(refresh_cookie, refresh_request)
    if not token:
        raise BadRequestError("Refresh token is required")

    try:
        access_token = await auth_service.refresh_access_token(db, token)
    except InvalidRefreshToken as e:
        raise AuthenticationError(str(e))
    except InactiveUser as e:
        raise PermissionDeniedError(str(e))

    return AccessToken(access_token=access_token, token_type="bearer")


@router.post("/logout", response_model=ResponseMessage)
async def logout(
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    refresh_cookie: RefreshCookie = None,
    refresh_request: Optional[RefreshTokenRequest] = None,
) -> ResponseMessage:
    """
    Log out by revoking the refresh token.

    Succeeds even when no token, an unknown token or an already revoked
    token is presented.
    """
    token = resolve_refresh_token(refresh_cookie, refresh_request)
    if token:
        await auth_service.logout_user(db, token)

    clear_refresh_cookie(response)
    return ResponseMessage(message="Logout successful")


@router.post("/logout-all", response_model=RevokedTokensResponse)
async def logout_all(
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> RevokedTokensResponse:
    """Revoke every refresh token of the current user (all devices)."""
    revoked = await auth_service.revoke_all_user_tokens(db, current_user.id)
    clear_refresh_cookie(response)
    return RevokedTokensResponse(message="Logged out from all devices", revoked=revoked)


@router.post("/change-password", response_model=RevokedTokensResponse)
async def change_password(
    password_change: PasswordChange,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> RevokedTokensResponse:
    """
    Change the current user's password.

    All refresh tokens of the user are revoked, so other sessions have to
    log in again once their access token expires.
    """
    try:
        revoked = await auth_service.change_password(
            db,
            current_user,
            current_password=password_change.current_password,
            new_password=password_change.new_password,
        )
    except InvalidCredentials as e:
        raise BadRequestError(str(e))

    return RevokedTokensResponse(message="Password changed successfully", revoked=revoked)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get the authenticated user's profile."""
    return current_user
