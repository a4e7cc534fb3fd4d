from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from prompthub.models.base import Base, JSONType, utcnow


class RunStatus(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class RunLog(Base):
    """One row per prompt run that reached the LLM. Insert-only."""

    __tablename__ = "run_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Identity. Snapshots survive deletion of the prompt or configuration.
    prompt_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("prompts.id", ondelete="SET NULL"), nullable=True, index=True
    )
    prompt_title: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    llm_configuration_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("llm_configurations.id", ondelete="SET NULL"), nullable=True
    )
    config_name: Mapped[str] = mapped_column(String(255), nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)

    # Payload
    input_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)  # {"variables", "final_prompt"}
    output_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)  # {"response"} | {"error"}
    status: Mapped[RunStatus] = mapped_column(Enum(RunStatus), nullable=False)

    # Timing
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ended_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_ms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True
    )
