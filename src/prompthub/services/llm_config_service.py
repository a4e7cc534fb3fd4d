"""
LLM configuration management.

At most one configuration is active. Activation runs inside the caller's
transaction: lock the configuration rows, deactivate every other row, then
activate the target. The partial unique index on ``is_active`` turns any
race that slips past the lock into a ConflictError.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from prompthub.common.errors import (
    ConflictError,
    NoActiveConfigurationError,
    NotFoundError,
    ValidationError,
)
from prompthub.models.llm_config import LLMConfiguration, ProviderType
from prompthub.schemas.llm_configs import (
    CreateLLMConfigRequest,
    LLMConfigInfo,
    LLMConfigListResponse,
    UpdateLLMConfigRequest,
)

logger = structlog.stdlib.get_logger()


class LLMConfigService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_config(self, req: CreateLLMConfigRequest) -> LLMConfigInfo:
        await self._require_unique_name(req.config_name)

        config = LLMConfiguration(
            config_name=req.config_name,
            api_type=req.api_type,
            api_base_url=req.api_base_url,
            api_key_env_var=req.api_key_env_var,
            model_name=req.model_name,
            default_parameters=req.default_parameters,
            is_active=False,
        )
        self.db.add(config)
        await self._flush()

        if req.is_active:
            await self._activate(config.id)

        await logger.ainfo(
            "llm_config.created",
            config_id=str(config.id),
            config_name=config.config_name,
            api_type=config.api_type.value,
            is_active=config.is_active,
        )
        return self._to_info(config)

    async def list_configs(self) -> LLMConfigListResponse:
        result = await self.db.execute(
            select(LLMConfiguration).order_by(LLMConfiguration.created_at.desc())
        )
        configs = result.scalars().all()
        return LLMConfigListResponse(
            configs=[self._to_info(c) for c in configs],
            total=len(configs),
        )

    async def get_model(self, config_id: uuid.UUID) -> LLMConfiguration:
        config = await self.db.get(LLMConfiguration, config_id)
        if config is None:
            raise NotFoundError(f"LLM configuration not found: {config_id}")
        return config

    async def get_config(self, config_id: uuid.UUID) -> LLMConfigInfo:
        return self._to_info(await self.get_model(config_id))

    async def update_config(self, config_id: uuid.UUID, req: UpdateLLMConfigRequest) -> LLMConfigInfo:
        config = await self.get_model(config_id)

        update_data = req.model_dump(exclude_unset=True)
        activate = update_data.pop("is_active", None)

        new_name = update_data.get("config_name")
        if new_name and new_name != config.config_name:
            await self._require_unique_name(new_name)

        for field, value in update_data.items():
            setattr(config, field, value)

        if config.api_type == ProviderType.CUSTOM and not config.api_base_url:
            raise ValidationError("api_base_url is required for custom configurations")

        if activate is False:
            config.is_active = False
        await self._flush()

        if activate:
            await self._activate(config.id)

        await logger.ainfo(
            "llm_config.updated",
            config_id=str(config_id),
            fields=sorted(update_data),
            is_active=config.is_active,
        )
        return self._to_info(config)

    async def delete_config(self, config_id: uuid.UUID) -> None:
        config = await self.get_model(config_id)
        if config.is_active:
            raise ConflictError(
                "Cannot delete the active LLM configuration; activate another one first",
                details={"config_id": str(config_id)},
            )
        await self.db.delete(config)
        await self.db.flush()
        await logger.ainfo("llm_config.deleted", config_id=str(config_id))

    async def activate(self, config_id: uuid.UUID) -> LLMConfigInfo:
        config = await self.get_model(config_id)
        await self._activate(config.id)
        await logger.ainfo(
            "llm_config.activated",
            config_id=str(config_id),
            config_name=config.config_name,
        )
        return self._to_info(config)

    async def get_active_model(self) -> LLMConfiguration:
        result = await self.db.execute(
            select(LLMConfiguration).where(LLMConfiguration.is_active.is_(True))
        )
        config = result.scalar_one_or_none()
        if config is None:
            raise NoActiveConfigurationError("No LLM configuration is active")
        return config

    async def get_active(self) -> LLMConfigInfo:
        return self._to_info(await self.get_active_model())

    async def _activate(self, config_id: uuid.UUID) -> None:
        try:
            # FOR UPDATE is a no-op on SQLite, whose writers are already serialised
            result = await self.db.execute(
                select(LLMConfiguration)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            configs = result.scalars().all()

            # Deactivate first: the unique index rejects two active rows
            for config in configs:
                if config.id != config_id and config.is_active:
                    config.is_active = False
            await self.db.flush()

            for config in configs:
                if config.id == config_id:
                    config.is_active = True
            await self.db.flush()
        except (IntegrityError, OperationalError) as e:
            raise ConflictError(
                "Another activation is in progress; retry",
                details={"config_id": str(config_id)},
            ) from e

    async def _require_unique_name(self, name: str) -> None:
        result = await self.db.execute(
            select(func.count(LLMConfiguration.id)).where(LLMConfiguration.config_name == name)
        )
        if result.scalar_one():
            raise ConflictError(f"LLM configuration '{name}' already exists")

    async def _flush(self) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ConflictError("LLM configuration conflicts with an existing one") from e

    @staticmethod
    def _to_info(c: LLMConfiguration) -> LLMConfigInfo:
        return LLMConfigInfo(
            id=c.id,
            config_name=c.config_name,
            api_type=c.api_type.value,
            api_base_url=c.api_base_url,
            api_key_env_var=c.api_key_env_var,
            model_name=c.model_name,
            default_parameters=c.default_parameters,
            is_active=c.is_active,
            created_at=c.created_at,
            updated_at=c.updated_at,
        )
