"""JWT access/refresh token issuance and verification.

Access and refresh tokens share one claims shape (``id``, ``name``,
``email``) plus a ``type`` discriminant, and are signed with separate
secrets. Verification checks the signature, then expiry, then the
discriminant, and always returns a tagged result instead of raising.
"""

import secrets
from datetime import datetime, timedelta, UTC
from functools import lru_cache
from typing import Any, Callable, Literal, Optional, Union

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from chatserver.config import (
    DEFAULT_JWT_ACCESS_SECRET,
    DEFAULT_JWT_REFRESH_SECRET,
    Settings,
    settings,
)
from chatserver.core.durations import parse_duration
from chatserver.utils.logger import get_logger

logger = get_logger(__name__)

ACCESS = "access"
REFRESH = "refresh"

TokenKind = Literal["access", "refresh"]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


class TokenConfig(BaseModel):
    """Signing secrets and expiry policy, fixed for the process lifetime."""

    model_config = ConfigDict(frozen=True)

    access_secret: str = Field(..., min_length=1)
    refresh_secret: str = Field(..., min_length=1)
    access_expires_in: timedelta = timedelta(hours=1)
    refresh_expires_in: timedelta = timedelta(days=7)
    algorithm: str = "HS256"

    @field_validator("access_expires_in", "refresh_expires_in", mode="before")
    @classmethod
    def parse_expiry(cls, v: Any) -> timedelta:
        """Accept duration strings and reject out-of-range expiries."""
        return parse_duration(v)

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "TokenConfig":
        """Build the token configuration from application settings."""
        return cls(
            access_secret=app_settings.JWT_ACCESS_SECRET,
            refresh_secret=app_settings.JWT_REFRESH_SECRET,
            access_expires_in=parse_duration(app_settings.JWT_ACCESS_EXPIRATION),
            refresh_expires_in=parse_duration(app_settings.JWT_REFRESH_EXPIRATION),
            algorithm=app_settings.JWT_ALGORITHM,
        )

    @property
    def uses_fallback_secrets(self) -> list[str]:
        """Names of the secrets still set to their built-in fallback value."""
        fallbacks = []
        if self.access_secret == DEFAULT_JWT_ACCESS_SECRET:
            fallbacks.append("JWT_ACCESS_SECRET")
        if self.refresh_secret == DEFAULT_JWT_REFRESH_SECRET:
            fallbacks.append("JWT_REFRESH_SECRET")
        return fallbacks


class TokenSubject(BaseModel):
    """Identity a token is issued for."""

    model_config = ConfigDict(coerce_numbers_to_str=True, from_attributes=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)


class TokenClaims(TokenSubject):
    """Claims signed into every token."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: TokenKind
    iat: int
    exp: int
    jti: Optional[str] = None


class AccessClaims(TokenClaims):
    type: Literal["access"] = ACCESS


class RefreshClaims(TokenClaims):
    type: Literal["refresh"] = REFRESH


class VerifySuccess(BaseModel):
    """Token passed every check."""

    model_config = ConfigDict(frozen=True)

    valid: Literal[True] = True
    decoded: Union[AccessClaims, RefreshClaims]


class VerifyFailure(BaseModel):
    """Token was rejected; ``error`` names the cause."""

    model_config = ConfigDict(frozen=True)

    valid: Literal[False] = False
    error: str


VerificationResult = Union[VerifySuccess, VerifyFailure]

_CLAIMS_BY_KIND: dict[str, type[TokenClaims]] = {
    ACCESS: AccessClaims,
    REFRESH: RefreshClaims,
}


class TokenService:
    """Issues and verifies typed JWTs.

    Stateless apart from its immutable configuration, so one instance can be
    shared by every request.
    """

    def __init__(self, config: TokenConfig, clock: Clock = utc_now):
        self.config = config
        self._clock = clock

    def _secret_for(self, kind: str) -> str:
        if kind == ACCESS:
            return self.config.access_secret
        return self.config.refresh_secret

    def _expiry_for(self, kind: str) -> timedelta:
        if kind == ACCESS:
            return self.config.access_expires_in
        return self.config.refresh_expires_in

    def _issue(self, subject: Any, kind: str) -> str:
        identity = TokenSubject.model_validate(subject)
        now = self._clock()
        expire = now + self._expiry_for(kind)

        to_encode = {
            **identity.model_dump(),
            "type": kind,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
            "jti": secrets.token_hex(16),
        }
        return jwt.encode(
            to_encode, self._secret_for(kind), algorithm=self.config.algorithm
        )

    def _verify(self, token: str, kind: str) -> VerificationResult:
        if not isinstance(token, str) or not token:
            return VerifyFailure(error="Token is empty")

        try:
            # Expiry is checked below against the service clock
            payload = jwt.decode(
                token,
                self._secret_for(kind),
                algorithms=[self.config.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.debug(
                "Token rejected", extra={"token_type": kind, "error": str(e)}
            )
            return VerifyFailure(error=str(e) or "Invalid token")

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            return VerifyFailure(error="Token is missing required claims: exp")
        if self._clock().timestamp() >= exp:
            return VerifyFailure(error="Token has expired")

        token_type = payload.get("type")
        if token_type != kind:
            return VerifyFailure(
                error=f"Invalid token type: expected {kind}, got {token_type}"
            )

        try:
            claims = _CLAIMS_BY_KIND[kind].model_validate(payload)
        except ValidationError as e:
            missing = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            return VerifyFailure(
                error=f"Token is missing required claims: {', '.join(missing)}"
            )

        return VerifySuccess(decoded=claims)

    def issue_access_token(self, subject: Any) -> str:
        """Create a signed access token for ``subject`` (id, name, email)."""
        return self._issue(subject, ACCESS)

    def issue_refresh_token(self, subject: Any) -> str:
        """Create a signed refresh token for ``subject`` (id, name, email)."""
        return self._issue(subject, REFRESH)

    def verify_access_token(self, token: str) -> VerificationResult:
        """Verify an access token against the access secret."""
        return self._verify(token, ACCESS)

    def verify_refresh_token(self, token: str) -> VerificationResult:
        """Verify a refresh token against the refresh secret."""
        return self._verify(token, REFRESH)

    def now(self) -> datetime:
        """Current time as seen by this service."""
        return self._clock()


@lru_cache
def get_token_service() -> TokenService:
    """Get the process-wide token service built from settings."""
    return TokenService(TokenConfig.from_settings(settings))
