"""LLM configuration management schemas."""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, model_validator

from prompthub.models.llm_config import ProviderType

_ENV_VAR_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


def _parse_parameters(value: Any) -> Any:
    # Accept a JSON string as well as an object
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError("default_parameters must be valid JSON") from e
    if value is not None and not isinstance(value, dict):
        raise ValueError("default_parameters must be a JSON object")
    return value


Parameters = Annotated[dict[str, Any] | None, BeforeValidator(_parse_parameters)]


class CreateLLMConfigRequest(BaseModel):
    config_name: str = Field(..., min_length=1, max_length=255)
    api_type: ProviderType
    api_base_url: str | None = Field(None, max_length=512)
    api_key_env_var: str = Field(..., max_length=255, pattern=_ENV_VAR_PATTERN)
    model_name: str = Field(..., min_length=1, max_length=255)
    default_parameters: Parameters = None
    is_active: bool = False

    @model_validator(mode="after")
    def _custom_needs_url(self) -> CreateLLMConfigRequest:
        if self.api_type == ProviderType.CUSTOM and not self.api_base_url:
            raise ValueError("api_base_url is required for custom configurations")
        return self


class UpdateLLMConfigRequest(BaseModel):
    config_name: str | None = Field(None, min_length=1, max_length=255)
    api_type: ProviderType | None = None
    api_base_url: str | None = Field(None, max_length=512)
    api_key_env_var: str | None = Field(None, max_length=255, pattern=_ENV_VAR_PATTERN)
    model_name: str | None = Field(None, min_length=1, max_length=255)
    default_parameters: Parameters = None
    is_active: bool | None = None


class LLMConfigInfo(BaseModel):
    id: uuid.UUID
    config_name: str
    api_type: str
    api_base_url: str | None
    api_key_env_var: str
    model_name: str
    default_parameters: dict[str, Any] | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class LLMConfigListResponse(BaseModel):
    configs: list[LLMConfigInfo]
    total: int
