"""Run history, personal statistics and the active configuration."""

from __future__ import annotations

from fastapi import APIRouter, Query

from prompthub.api.deps import CurrentUser, DBSession, RunLogger
from prompthub.common.errors import NoActiveConfigurationError, NotFoundError
from prompthub.schemas.llm_configs import LLMConfigInfo
from prompthub.schemas.runs import RunLogListResponse
from prompthub.schemas.stats import UserStatsSnapshot
from prompthub.services.llm_config_service import LLMConfigService
from prompthub.services.stats_service import StatsService

router = APIRouter()


@router.get(
    "/runs",
    response_model=RunLogListResponse,
    summary="The caller's run history, newest first",
)
async def list_my_runs(
    user: CurrentUser,
    usage_logger: RunLogger,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> RunLogListResponse:
    return await usage_logger.list_for_user(user.id, offset=offset, limit=limit)


@router.get(
    "/users/me/stats",
    response_model=UserStatsSnapshot,
    summary="Points, level and streak for the caller",
)
async def my_stats(user: CurrentUser, db: DBSession, usage_logger: RunLogger) -> UserStatsSnapshot:
    return await StatsService(db, usage_logger).for_user(user.id)


@router.get(
    "/llm-config/active",
    response_model=LLMConfigInfo,
    summary="The active LLM configuration",
)
async def active_llm_config(user: CurrentUser, db: DBSession) -> LLMConfigInfo:
    try:
        return await LLMConfigService(db).get_active()
    except NoActiveConfigurationError as e:
        raise NotFoundError(e.message) from e
