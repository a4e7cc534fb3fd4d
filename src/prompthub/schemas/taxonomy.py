"""Group and subgroup schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SubgroupInfo(BaseModel):
    id: uuid.UUID
    name: str
    group_id: uuid.UUID
    order_id: int
    created_at: datetime
    updated_at: datetime


class GroupInfo(BaseModel):
    id: uuid.UUID
    name: str
    order_id: int
    created_at: datetime
    updated_at: datetime
    subgroups: list[SubgroupInfo]


class SubgroupDetails(SubgroupInfo):
    description: str
    icon: str
    prompt_count: int


class CreateGroupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    order_id: int = 0


class CreateSubgroupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    order_id: int = 0
