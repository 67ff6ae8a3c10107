"""Authentication service: registration, login, token refresh and revocation."""

from datetime import datetime, UTC
from typing import NamedTuple, Optional

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from chatserver.core.security import get_password_hash, hash_token, verify_password
from chatserver.core.tokens import TokenClaims, TokenService, VerifyFailure
from chatserver.models import RefreshToken, User
from chatserver.utils.context import operation_context
from chatserver.utils.logger import get_logger
from chatserver.utils.telemetry import trace_operation

logger = get_logger(__name__)


class AuthServiceError(Exception):
    """Base exception for authentication errors."""


class EmailAlreadyRegistered(AuthServiceError):
    """Raised when registering an email that already has an account."""


class InvalidCredentials(AuthServiceError):
    """Raised when an email/password pair does not match."""


class InactiveUser(AuthServiceError):
    """Raised when a deactivated user tries to authenticate."""


class InvalidRefreshToken(AuthServiceError):
    """Raised when a refresh token is invalid, expired, revoked or unknown."""


class UserNotFound(AuthServiceError):
    """Raised when the user behind a token no longer exists."""


class LoginResult(NamedTuple):
    user: User
    access_token: str
    refresh_token: str


def token_subject(user: User) -> dict:
    """Identity claims embedded in the tokens issued for ``user``."""
    return {"id": user.id, "name": user.name, "email": user.email}


class AuthService:
    """Service for authentication operations."""

    def __init__(self, token_service: TokenService):
        self.tokens = token_service

    def _now(self) -> datetime:
        """Token service time in UTC, comparable with stored timestamps."""
        return self.tokens.now().astimezone(UTC)

    async def get_user_by_email(
        self, session: AsyncSession, email: str
    ) -> Optional[User]:
        result = await session.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_refresh_token_record(
        self, session: AsyncSession, token: str
    ) -> Optional[RefreshToken]:
        result = await session.execute(
            select(RefreshToken).where(RefreshToken.token_hash == hash_token(token))
        )
        return result.scalar_one_or_none()

    async def register_user(
        self, session: AsyncSession, name: str, email: str, password: str
    ) -> User:
        """
        Create a new user account.

        Raises:
            EmailAlreadyRegistered: If the email is taken
        """
        with operation_context("auth.register", user_email=email):
            if await self.get_user_by_email(session, email):
                raise EmailAlreadyRegistered("Email already registered")

            user = User(
                name=name,
                email=email.lower(),
                hashed_password=get_password_hash(password),
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)

            logger.info("User registered", extra={"registered_user_id": user.id})
            return user

    async def login_user(
        self, session: AsyncSession, email: str, password: str
    ) -> LoginResult:
        """
        Check credentials and issue an access/refresh token pair.

        The refresh token is recorded (hashed) so it can be revoked later.

        Raises:
            InvalidCredentials: If the email is unknown or the password wrong
            InactiveUser: If the account is deactivated
        """
        with operation_context("auth.login", user_email=email), trace_operation(
            "service.auth.login"
        ):
            user = await self.get_user_by_email(session, email)
            if not user or not verify_password(password, user.hashed_password):
                logger.warning("Login failed: bad credentials")
                raise InvalidCredentials("Account or password is incorrect")

            if not user.is_active:
                raise InactiveUser("Inactive user")

            subject = token_subject(user)
            access_token = self.tokens.issue_access_token(subject)
            refresh_token = self.tokens.issue_refresh_token(subject)

            session.add(
                RefreshToken(
                    user_id=user.id,
                    token_hash=hash_token(refresh_token),
                    expires_at=self._now() + self.tokens.config.refresh_expires_in,
                )
            )
            await session.commit()

            logger.info("User logged in", extra={"logged_in_user_id": user.id})
            return LoginResult(user, access_token, refresh_token)

    async def refresh_access_token(self, session: AsyncSession, token: str) -> str:
        """
        Issue a new access token from a refresh token.

        The token must pass signature, expiry and type checks, and its stored
        record must exist, be unrevoked and unexpired.

        Raises:
            InvalidRefreshToken: If any of those checks fails
            InactiveUser: If the account is deactivated
        """
        with operation_context("auth.refresh"), trace_operation(
            "service.auth.refresh"
        ):
            result = self.tokens.verify_refresh_token(token)
            if isinstance(result, VerifyFailure):
                logger.info("Refresh token rejected", extra={"reason": result.error})
                raise InvalidRefreshToken("Invalid or expired refresh token")

            stored = await self.get_refresh_token_record(session, token)
            if stored is None:
                raise InvalidRefreshToken("Refresh token not found")
            if stored.is_revoked:
                raise InvalidRefreshToken("Refresh token has been revoked")
            if not stored.is_valid(self._now()):
                raise InvalidRefreshToken("Refresh token has expired")

            user = await session.get(User, stored.user_id)
            if user is None:
                raise InvalidRefreshToken("User not found")
            if not user.is_active:
                raise InactiveUser("Inactive user")

            return self.tokens.issue_access_token(token_subject(user))

    async def logout_user(self, session: AsyncSession, token: str) -> bool:
        """
        Revoke a refresh token.

        Unknown or already revoked tokens are ignored, so logging out twice
        is harmless.

        Returns:
            True if a token was revoked by this call
        """
        with operation_context("auth.logout"):
            stored = await self.get_refresh_token_record(session, token)
            if stored is None or stored.is_revoked:
                return False

            stored.is_revoked = True
            session.add(stored)
            await session.commit()

            logger.info("Refresh token revoked", extra={"owner_id": stored.user_id})
            return True

    async def revoke_all_user_tokens(self, session: AsyncSession, user_id: str) -> int:
        """Revoke every active refresh token of a user; returns how many."""
        with operation_context("auth.revoke_all", user_id=user_id):
            result = await session.execute(
                update(RefreshToken)
                .where(RefreshToken.user_id == user_id)
                .where(RefreshToken.is_revoked.is_(False))
                .values(is_revoked=True)
            )
            await session.commit()

            logger.info(
                "Refresh tokens revoked", extra={"revoked_count": result.rowcount}
            )
            return result.rowcount

    async def change_password(
        self,
        session: AsyncSession,
        user: User,
        current_password: str,
        new_password: str,
    ) -> int:
        """
        Replace the user's password and revoke all their refresh tokens.

        Raises:
            InvalidCredentials: If ``current_password`` is wrong
        """
        with operation_context("auth.change_password", user_id=user.id):
            if not verify_password(current_password, user.hashed_password):
                raise InvalidCredentials("Current password is incorrect")

            user.hashed_password = get_password_hash(new_password)
            session.add(user)
            await session.commit()

            return await self.revoke_all_user_tokens(session, user.id)

    async def get_user_from_claims(
        self, session: AsyncSession, claims: TokenClaims
    ) -> User:
        """
        Load the user an access token was issued for.

        Raises:
            UserNotFound: If the user no longer exists
            InactiveUser: If the account is deactivated
        """
        user = await session.get(User, claims.id)
        if user is None:
            raise UserNotFound("User not found")
        if not user.is_active:
            raise InactiveUser("Inactive user")
        return user

    async def delete_expired_tokens(self, session: AsyncSession) -> int:
        """Delete refresh token records past their expiry; returns how many."""
        result = await session.execute(
            delete(RefreshToken).where(RefreshToken.expires_at < self._now())
        )
        await session.commit()
        return result.rowcount
