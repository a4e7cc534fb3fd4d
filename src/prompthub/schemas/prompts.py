"""Prompt template schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator


class PromptPayload(BaseModel):
    """Create/update body after JSON or multipart input has been normalised."""

    title: str = Field(..., max_length=255)
    prompt_text: str = Field(..., validation_alias=AliasChoices("prompt_text", "content"))
    notes: str | None = None
    subgroup_id: uuid.UUID

    @field_validator("title", "prompt_text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class DocumentInfo(BaseModel):
    name: str
    path: str
    size: int
    type: str | None = None


class CreatorInfo(BaseModel):
    id: uuid.UUID
    name: str | None
    email: str


class PromptInfo(BaseModel):
    id: uuid.UUID
    title: str
    prompt_text: str
    notes: str | None
    subgroup_id: uuid.UUID
    group_id: uuid.UUID
    user_id: uuid.UUID | None
    creator: CreatorInfo | None
    favorites_count: int
    variables: list[str]
    metadata: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime


class PromptListResponse(BaseModel):
    prompts: list[PromptInfo]
    total: int


class FavoriteResponse(BaseModel):
    prompt_id: uuid.UUID
    favorited: bool
    favorites_count: int
