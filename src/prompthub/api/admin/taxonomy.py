"""Group and subgroup administration."""

from __future__ import annotations

import uuid

from fastapi import APIRouter

from prompthub.api.deps import AdminUser, DBSession
from prompthub.schemas.taxonomy import (
    CreateGroupRequest,
    CreateSubgroupRequest,
    GroupInfo,
    SubgroupInfo,
)
from prompthub.services.taxonomy_service import TaxonomyService

router = APIRouter()


@router.post(
    "",
    response_model=GroupInfo,
    status_code=201,
    summary="Create group",
)
async def create_group(body: CreateGroupRequest, admin: AdminUser, db: DBSession) -> GroupInfo:
    return await TaxonomyService(db).create_group(body)


@router.post(
    "/{group_id}/subgroups",
    response_model=SubgroupInfo,
    status_code=201,
    summary="Create subgroup",
)
async def create_subgroup(
    group_id: uuid.UUID,
    body: CreateSubgroupRequest,
    admin: AdminUser,
    db: DBSession,
) -> SubgroupInfo:
    return await TaxonomyService(db).create_subgroup(group_id, body)
