"""Run log across all users."""

from __future__ import annotations

from fastapi import APIRouter, Query

from prompthub.api.deps import AdminUser, RunLogger
from prompthub.schemas.runs import RunLogListResponse

router = APIRouter()


@router.get(
    "",
    response_model=RunLogListResponse,
    summary="List run logs",
)
async def list_runs(
    admin: AdminUser,
    usage_logger: RunLogger,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> RunLogListResponse:
    return await usage_logger.list_all(offset=offset, limit=limit)
