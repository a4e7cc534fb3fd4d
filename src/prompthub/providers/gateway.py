"""Single entry point the run orchestrator uses to call an LLM."""

from __future__ import annotations

import asyncio

import httpx
import structlog

from prompthub.common.errors import GatewayError, GatewayTimeoutError
from prompthub.config import LLMSettings
from prompthub.providers.base import GatewayConfig
from prompthub.providers.registry import get_adapter

logger = structlog.stdlib.get_logger()


class LLMGateway:
    """Sends one rendered prompt to the provider named in a GatewayConfig."""

    def __init__(
        self,
        settings: LLMSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or LLMSettings()
        self.http_client = http_client

    async def invoke(self, config: GatewayConfig, rendered_prompt: str) -> str:
        """
        Return the response text.

        Raises:
            GatewayTimeoutError: the call took longer than ``timeout_seconds``
            GatewayError: any other provider or transport failure
        """
        try:
            adapter = get_adapter(config.provider, self.http_client)
        except ValueError as e:
            raise GatewayError(str(e), details={"provider": config.provider}) from e

        timeout = httpx.Timeout(
            self.settings.timeout_seconds,
            connect=self.settings.connect_timeout_seconds,
        )

        # httpx timeouts are per phase; this bounds the whole call
        try:
            async with asyncio.timeout(self.settings.timeout_seconds):
                return await adapter.send(rendered_prompt, config, timeout)
        except TimeoutError as e:
            raise GatewayTimeoutError(
                f"{config.provider} did not answer within {self.settings.timeout_seconds:g}s",
                details={"provider": config.provider, "configuration": config.name},
            ) from e
