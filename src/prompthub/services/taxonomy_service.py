"""Groups and subgroups."""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from prompthub.common.errors import NotFoundError
from prompthub.models.group import Group, Subgroup
from prompthub.models.prompt import Prompt
from prompthub.schemas.taxonomy import (
    CreateGroupRequest,
    CreateSubgroupRequest,
    GroupInfo,
    SubgroupDetails,
    SubgroupInfo,
)


class TaxonomyService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_groups(self) -> list[GroupInfo]:
        result = await self.db.execute(
            select(Group).options(selectinload(Group.subgroups)).order_by(Group.order_id, Group.name)
        )
        return [self._group_info(g) for g in result.scalars().all()]

    async def list_subgroups(self, group_id: uuid.UUID | None = None) -> list[SubgroupInfo]:
        query = select(Subgroup).order_by(Subgroup.order_id, Subgroup.name)
        if group_id is not None:
            query = query.where(Subgroup.group_id == group_id)
        result = await self.db.execute(query)
        return [self._subgroup_info(s) for s in result.scalars().all()]

    async def get_subgroup(self, subgroup_id: uuid.UUID) -> Subgroup:
        subgroup = await self.db.get(Subgroup, subgroup_id)
        if subgroup is None:
            raise NotFoundError(f"Subgroup not found: {subgroup_id}")
        return subgroup

    async def subgroup_details(self, subgroup_id: uuid.UUID) -> SubgroupDetails:
        subgroup = await self.get_subgroup(subgroup_id)
        count_result = await self.db.execute(
            select(func.count(Prompt.id)).where(Prompt.subgroup_id == subgroup_id)
        )
        return SubgroupDetails(
            **self._subgroup_info(subgroup).model_dump(),
            description=f"Prompts for {subgroup.name}",
            icon="default-icon",
            prompt_count=count_result.scalar_one(),
        )

    async def create_group(self, req: CreateGroupRequest) -> GroupInfo:
        group = Group(name=req.name, order_id=req.order_id, subgroups=[])
        self.db.add(group)
        await self.db.flush()
        return self._group_info(group)

    async def create_subgroup(self, group_id: uuid.UUID, req: CreateSubgroupRequest) -> SubgroupInfo:
        group = await self.db.get(Group, group_id)
        if group is None:
            raise NotFoundError(f"Group not found: {group_id}")

        subgroup = Subgroup(group_id=group.id, name=req.name, order_id=req.order_id)
        self.db.add(subgroup)
        await self.db.flush()
        return self._subgroup_info(subgroup)

    def _group_info(self, g: Group) -> GroupInfo:
        return GroupInfo(
            id=g.id,
            name=g.name,
            order_id=g.order_id,
            created_at=g.created_at,
            updated_at=g.updated_at,
            subgroups=[self._subgroup_info(s) for s in g.subgroups],
        )

    @staticmethod
    def _subgroup_info(s: Subgroup) -> SubgroupInfo:
        return SubgroupInfo(
            id=s.id,
            name=s.name,
            group_id=s.group_id,
            order_id=s.order_id,
            created_at=s.created_at,
            updated_at=s.updated_at,
        )
