"""Prompt run and run log schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class RunRequest(BaseModel):
    variables: dict[str, str] = Field(default_factory=dict)
    # Overrides merged over the configuration's default_parameters
    parameters: dict[str, Any] | None = None


class RunResponse(BaseModel):
    run_id: uuid.UUID | None
    prompt_id: uuid.UUID
    status: str
    response: str | None
    final_prompt: str
    config_name: str
    model: str
    started_at: datetime
    ended_at: datetime
    duration_ms: int
    logged: bool


class RunLogInfo(BaseModel):
    id: uuid.UUID
    prompt_id: uuid.UUID | None
    prompt_title: str
    user_id: uuid.UUID | None
    config_name: str
    model: str
    input_data: dict[str, Any]
    output_data: dict[str, Any]
    status: str
    started_at: datetime
    ended_at: datetime
    duration_ms: int
    created_at: datetime


class RunLogListResponse(BaseModel):
    runs: list[RunLogInfo]
    total: int
