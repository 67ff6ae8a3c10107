#!/usr/bin/env python3
"""Delete expired refresh token records from the database."""

import asyncio
import sys
from pathlib import Path

# Make the chatserver package importable when run from a checkout
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from chatserver.core.tokens import get_token_service
from chatserver.database import async_engine, async_session_maker
from chatserver.services import AuthService
from chatserver.utils.logger import get_logger, log_timer, setup_logging

logger = get_logger("chatserver.scripts.cleanup_expired_tokens")


async def cleanup_expired_tokens() -> int:
    """Delete every refresh token past its expiry; returns how many."""
    service = AuthService(get_token_service())
    try:
        async with async_session_maker() as session:
            with log_timer("refresh_token_cleanup", logger):
                deleted = await service.delete_expired_tokens(session)
    finally:
        await async_engine.dispose()

    logger.info("Expired refresh tokens deleted", extra={"deleted": deleted})
    return deleted


if __name__ == "__main__":
    setup_logging()
    try:
        count = asyncio.run(cleanup_expired_tokens())
        print(f"Deleted {count} expired refresh token(s)")
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(1)
