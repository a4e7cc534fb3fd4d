"""Health check endpoints for liveness/readiness probes."""

from __future__ import annotations

import structlog
from fastapi import APIRouter
from fastapi.responses import ORJSONResponse
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError

from prompthub import __version__
from prompthub.api.deps import DBSession
from prompthub.models.llm_config import LLMConfiguration
from prompthub.schemas.health import LivenessResponse, ReadinessResponse

logger = structlog.stdlib.get_logger()

router = APIRouter()


@router.get(
    "/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
)
async def liveness() -> LivenessResponse:
    return LivenessResponse(version=__version__)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
)
async def readiness(db: DBSession) -> ORJSONResponse:
    db_status = "disconnected"
    active: str | None = None

    try:
        await db.execute(text("SELECT 1"))
        db_status = "connected"
        result = await db.execute(
            select(LLMConfiguration.config_name).where(LLMConfiguration.is_active.is_(True))
        )
        active = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        await logger.awarning("health.database.unavailable", error=str(e))

    overall = "ok" if db_status == "connected" else "degraded"

    return ORJSONResponse(
        status_code=200 if overall == "ok" else 503,
        content=ReadinessResponse(
            status=overall,
            database=db_status,
            active_llm_configuration=active,
        ).model_dump(),
    )
