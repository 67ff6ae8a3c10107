"""Rate limiting using SlowAPI."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from chatserver.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri="memory://",
)
