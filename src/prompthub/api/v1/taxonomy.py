"""Group and subgroup browsing."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from prompthub.api.deps import DBSession
from prompthub.schemas.taxonomy import GroupInfo, SubgroupDetails, SubgroupInfo
from prompthub.services.taxonomy_service import TaxonomyService

router = APIRouter()


@router.get(
    "/groups",
    response_model=list[GroupInfo],
    summary="List groups with their subgroups",
)
async def list_groups(db: DBSession) -> list[GroupInfo]:
    return await TaxonomyService(db).list_groups()


@router.get(
    "/subgroups",
    response_model=list[SubgroupInfo],
    summary="List subgroups",
)
async def list_subgroups(
    db: DBSession,
    group_id: uuid.UUID | None = Query(None),
) -> list[SubgroupInfo]:
    return await TaxonomyService(db).list_subgroups(group_id)


@router.get(
    "/subgroups/{subgroup_id}/details",
    response_model=SubgroupDetails,
    summary="Subgroup details with prompt count",
)
async def subgroup_details(subgroup_id: uuid.UUID, db: DBSession) -> SubgroupDetails:
    return await TaxonomyService(db).subgroup_details(subgroup_id)
