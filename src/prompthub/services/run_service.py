"""
Run orchestrator: executes one prompt against the active LLM configuration.

  Load prompt → Validate variables → Snapshot active config → Invoke gateway → Log

Validation and configuration failures happen before anything is invoked and
leave no log entry. Every run that reaches the gateway is logged exactly once,
whether it succeeds or fails.
"""

from __future__ import annotations

import os
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from prompthub.common.errors import GatewayError, StorageError, ValidationError
from prompthub.core.prompts.template import extract_variables, missing_variables, substitute
from prompthub.models.base import utcnow
from prompthub.models.llm_config import LLMConfiguration
from prompthub.models.run_log import RunLog, RunStatus
from prompthub.models.user import User
from prompthub.providers.base import GatewayConfig
from prompthub.providers.gateway import LLMGateway
from prompthub.services.llm_config_service import LLMConfigService
from prompthub.services.prompt_service import PromptService
from prompthub.services.usage_logger import UsageLogger

logger = structlog.stdlib.get_logger()


@dataclass
class RunOutcome:
    """Result of one run attempt, successful or not."""

    prompt_id: uuid.UUID
    status: RunStatus
    final_prompt: str
    config_name: str
    model: str
    started_at: datetime
    ended_at: datetime
    duration_ms: int
    response: str | None = None
    error: GatewayError | None = None
    run_id: uuid.UUID | None = None
    logged: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.SUCCESS


def snapshot_config(
    config: LLMConfiguration,
    overrides: Mapping[str, Any] | None = None,
) -> GatewayConfig:
    """
    Freeze the configuration for one call.

    The credential is read from the named environment variable now, never
    cached. Per-call overrides win over the stored default parameters.
    """
    return GatewayConfig(
        name=config.config_name,
        provider=config.api_type.value,
        model_name=config.model_name,
        base_url=config.api_base_url,
        credential=os.environ.get(config.api_key_env_var) or None,
        parameters={**(config.default_parameters or {}), **(overrides or {})},
    )


class RunOrchestrator:
    def __init__(self, db: AsyncSession, gateway: LLMGateway, usage_logger: UsageLogger) -> None:
        self.db = db
        self.gateway = gateway
        self.usage_logger = usage_logger

    async def run(
        self,
        prompt_id: uuid.UUID,
        variables: Mapping[str, str],
        user: User | None = None,
        parameters: Mapping[str, Any] | None = None,
    ) -> RunOutcome:
        prompt = await PromptService(self.db).get_model(prompt_id)

        # Validating. A body without placeholders needs no values.
        if extract_variables(prompt.prompt_text):
            missing = missing_variables(prompt.prompt_text, variables)
            if missing:
                raise ValidationError(
                    f"Missing values for: {', '.join(missing)}",
                    details={"missing_variables": missing},
                )

        active = await LLMConfigService(self.db).get_active_model()
        config_id = active.id
        config = snapshot_config(active, parameters)

        # Invoking
        final_prompt = substitute(prompt.prompt_text, variables)
        started_at = utcnow()
        start = time.perf_counter()

        response: str | None = None
        error: GatewayError | None = None
        try:
            response = await self.gateway.invoke(config, final_prompt)
        except GatewayError as e:
            error = e
        except Exception as e:
            # Anything else from the call still counts as a failed, logged run
            await logger.aexception(
                "run.invoke.unexpected_error",
                prompt_id=str(prompt.id),
                provider=config.provider,
            )
            error = GatewayError(
                f"{config.provider} call failed: {type(e).__name__}",
                details={"provider": config.provider, "configuration": config.name},
            )

        duration = time.perf_counter() - start
        duration_ms = int(duration * 1000)
        outcome = RunOutcome(
            prompt_id=prompt.id,
            status=RunStatus.SUCCESS if error is None else RunStatus.FAILURE,
            final_prompt=final_prompt,
            config_name=config.name,
            model=config.model_name,
            started_at=started_at,
            ended_at=started_at + timedelta(seconds=duration),
            duration_ms=duration_ms,
            response=response,
            error=error,
        )

        entry = RunLog(
            id=uuid.uuid4(),
            prompt_id=prompt.id,
            prompt_title=prompt.title,
            user_id=user.id if user else None,
            llm_configuration_id=config_id,
            config_name=config.name,
            model=config.model_name,
            input_data={"variables": dict(variables), "final_prompt": final_prompt},
            output_data={"response": response} if error is None else {"error": error.message},
            status=outcome.status,
            started_at=outcome.started_at,
            ended_at=outcome.ended_at,
            duration_ms=duration_ms,
        )
        try:
            await self.usage_logger.record(entry)
            outcome.run_id = entry.id
            outcome.logged = True
        except StorageError as e:
            await logger.aerror("run.log.failed", prompt_id=str(prompt.id), error=e.message)

        await logger.ainfo(
            "run.completed",
            prompt_id=str(prompt.id),
            status=outcome.status.value,
            configuration=config.name,
            provider=config.provider,
            model=config.model_name,
            duration_ms=duration_ms,
            logged=outcome.logged,
            error=error.message if error else None,
        )
        return outcome
