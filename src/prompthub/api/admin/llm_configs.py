"""LLM configuration management endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter

from prompthub.api.deps import AdminUser, DBSession
from prompthub.schemas.llm_configs import (
    CreateLLMConfigRequest,
    LLMConfigInfo,
    LLMConfigListResponse,
    UpdateLLMConfigRequest,
)
from prompthub.services.llm_config_service import LLMConfigService

router = APIRouter()


@router.get(
    "",
    response_model=LLMConfigListResponse,
    summary="List LLM configurations",
)
async def list_configs(admin: AdminUser, db: DBSession) -> LLMConfigListResponse:
    return await LLMConfigService(db).list_configs()


@router.post(
    "",
    response_model=LLMConfigInfo,
    status_code=201,
    summary="Create LLM configuration",
)
async def create_config(
    body: CreateLLMConfigRequest,
    admin: AdminUser,
    db: DBSession,
) -> LLMConfigInfo:
    return await LLMConfigService(db).create_config(body)


@router.put(
    "/{config_id}",
    response_model=LLMConfigInfo,
    summary="Update LLM configuration",
)
async def update_config(
    config_id: uuid.UUID,
    body: UpdateLLMConfigRequest,
    admin: AdminUser,
    db: DBSession,
) -> LLMConfigInfo:
    return await LLMConfigService(db).update_config(config_id, body)


@router.delete(
    "/{config_id}",
    status_code=204,
    summary="Delete LLM configuration",
)
async def delete_config(config_id: uuid.UUID, admin: AdminUser, db: DBSession) -> None:
    await LLMConfigService(db).delete_config(config_id)


@router.put(
    "/{config_id}/activate",
    response_model=LLMConfigInfo,
    summary="Make this the only active configuration",
)
async def activate_config(config_id: uuid.UUID, admin: AdminUser, db: DBSession) -> LLMConfigInfo:
    return await LLMConfigService(db).activate(config_id)
