"""Health check endpoints for liveness and readiness probes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.dependencies import get_cache
from app.infrastructure.cache.redis_cache import CacheService
from app.infrastructure.persistence.database import get_session_factory
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check(
    cache: Annotated[CacheService | None, Depends(get_cache)],
) -> ReadinessResponse | JSONResponse:
    """Return 200 when Postgres answers; 503 otherwise.

    Cache state is reported but never fails readiness: the service keeps
    serving from Postgres while Redis is down.
    """
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(
                status="not_ready",
                message="database unreachable",
            ).model_dump(),
        )
    if cache is None:
        cache_state = "disabled"
    else:
        cache_state = "ok" if cache.is_available() else "degraded"
    return ReadinessResponse(cache=cache_state)
