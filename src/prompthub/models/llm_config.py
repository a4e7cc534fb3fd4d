from __future__ import annotations

import enum
from typing import Any

from sqlalchemy import Boolean, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from prompthub.models.base import Base, JSONType, TimestampMixin, UUIDPrimaryKeyMixin


class ProviderType(str, enum.Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"
    CUSTOM = "custom"


class LLMConfiguration(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "llm_configurations"

    # Identity
    config_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    api_type: Mapped[ProviderType] = mapped_column(Enum(ProviderType), nullable=False)
    model_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Connection. The credential itself lives in the named environment variable.
    api_base_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    api_key_env_var: Mapped[str] = mapped_column(String(255), nullable=False)

    default_parameters: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


# At most one active configuration
Index(
    "uq_llm_configurations_single_active",
    LLMConfiguration.is_active,
    unique=True,
    postgresql_where=LLMConfiguration.is_active.is_(True),
    sqlite_where=LLMConfiguration.is_active.is_(True),
)
