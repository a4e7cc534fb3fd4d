"""Prompt templates: CRUD, favorites and runs."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Query, Request

from prompthub.api.deps import (
    AppSettings,
    CurrentUser,
    DBSession,
    Gateway,
    OptionalUser,
    RunLogger,
)
from prompthub.api.payloads import parse_prompt_payload, parse_run_request, read_payload
from prompthub.schemas.prompts import FavoriteResponse, PromptInfo, PromptListResponse
from prompthub.schemas.runs import RunResponse
from prompthub.services.documents import DocumentStore
from prompthub.services.prompt_service import PromptService
from prompthub.services.run_service import RunOrchestrator

logger = structlog.stdlib.get_logger()

router = APIRouter()


@router.get(
    "",
    response_model=PromptListResponse,
    summary="List prompts, newest first",
)
async def list_prompts(
    db: DBSession,
    subgroup_id: uuid.UUID | None = Query(None),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> PromptListResponse:
    return await PromptService(db).list_prompts(subgroup_id, offset=offset, limit=limit)


@router.post(
    "",
    response_model=PromptInfo,
    status_code=201,
    summary="Create a prompt",
    description="Accepts JSON or multipart form data; uploaded files go in `documents`.",
)
async def create_prompt(
    request: Request,
    user: CurrentUser,
    db: DBSession,
    settings: AppSettings,
) -> PromptInfo:
    payload, documents = parse_prompt_payload(
        await read_payload(request, settings.uploads.max_bytes)
    )
    service = PromptService(db, DocumentStore(settings.uploads))
    return await service.create_prompt(payload, user, documents)


@router.get(
    "/{prompt_id}",
    response_model=PromptInfo,
    summary="Get a prompt with its variables",
)
async def get_prompt(prompt_id: uuid.UUID, db: DBSession) -> PromptInfo:
    return await PromptService(db).get_prompt(prompt_id)


@router.put(
    "/{prompt_id}",
    response_model=PromptInfo,
    summary="Update a prompt",
)
async def update_prompt(
    prompt_id: uuid.UUID,
    request: Request,
    user: CurrentUser,
    db: DBSession,
    settings: AppSettings,
) -> PromptInfo:
    payload, documents = parse_prompt_payload(
        await read_payload(request, settings.uploads.max_bytes)
    )
    service = PromptService(db, DocumentStore(settings.uploads))
    return await service.update_prompt(prompt_id, payload, user, documents)


@router.delete(
    "/{prompt_id}",
    status_code=204,
    summary="Delete a prompt",
)
async def delete_prompt(prompt_id: uuid.UUID, user: CurrentUser, db: DBSession) -> None:
    await PromptService(db).delete_prompt(prompt_id, user)


@router.post(
    "/{prompt_id}/favorite",
    response_model=FavoriteResponse,
    summary="Add a prompt to favorites",
)
async def favorite_prompt(prompt_id: uuid.UUID, user: CurrentUser, db: DBSession) -> FavoriteResponse:
    return await PromptService(db).favorite(prompt_id, user)


@router.delete(
    "/{prompt_id}/favorite",
    response_model=FavoriteResponse,
    summary="Remove a prompt from favorites",
)
async def unfavorite_prompt(
    prompt_id: uuid.UUID, user: CurrentUser, db: DBSession
) -> FavoriteResponse:
    return await PromptService(db).unfavorite(prompt_id, user)


@router.post(
    "/{prompt_id}/run",
    response_model=RunResponse,
    summary="Run a prompt against the active LLM configuration",
    description=(
        "Variable values come from a JSON `variables` object, or from multipart "
        "text fields and UTF-8 text files named after each variable."
    ),
)
async def run_prompt(
    prompt_id: uuid.UUID,
    request: Request,
    user: OptionalUser,
    db: DBSession,
    settings: AppSettings,
    gateway: Gateway,
    usage_logger: RunLogger,
) -> RunResponse:
    body = parse_run_request(await read_payload(request, settings.uploads.max_bytes))

    await logger.ainfo(
        "run.request",
        prompt_id=str(prompt_id),
        user_id=str(user.id) if user else None,
        variables=sorted(body.variables),
    )

    orchestrator = RunOrchestrator(db, gateway, usage_logger)
    outcome = await orchestrator.run(
        prompt_id,
        body.variables,
        user=user,
        parameters=body.parameters,
    )

    if outcome.error is not None:
        error = outcome.error
        error.details = {
            **error.details,
            "run_id": str(outcome.run_id) if outcome.run_id else None,
            "logged": outcome.logged,
        }
        raise error

    return RunResponse(
        run_id=outcome.run_id,
        prompt_id=outcome.prompt_id,
        status=outcome.status.value,
        response=outcome.response,
        final_prompt=outcome.final_prompt,
        config_name=outcome.config_name,
        model=outcome.model,
        started_at=outcome.started_at,
        ended_at=outcome.ended_at,
        duration_ms=outcome.duration_ms,
        logged=outcome.logged,
    )
