"""Health check endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chatserver import __version__
from chatserver.api.deps import get_db, get_tokens
from chatserver.core.tokens import TokenService
from chatserver.schemas import HealthCheckResponse
from chatserver.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=HealthCheckResponse)
async def health_check(
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    token_service: Annotated[TokenService, Depends(get_tokens)],
) -> HealthCheckResponse:
    """
    Health check endpoint.

    Probes the database and reports whether tokens are signed with
    configured secrets. Answers 503 while the database is unreachable.
    """
    try:
        await db.execute(text("SELECT 1"))
        database_status = "connected"
    except SQLAlchemyError as e:
        logger.error("Database health probe failed", extra={"error": str(e)})
        database_status = "unavailable"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    fallbacks = token_service.config.uses_fallback_secrets
    return HealthCheckResponse(
        status="healthy" if database_status == "connected" else "degraded",
        version=__version__,
        database=database_status,
        signing_secrets="fallback" if fallbacks else "configured",
    )
