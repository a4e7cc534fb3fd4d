"""Abstract base class for LLM provider adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from prompthub.common.errors import GatewayError, GatewayTimeoutError

logger = structlog.stdlib.get_logger()


@dataclass(frozen=True)
class GatewayConfig:
    """
    Immutable view of an LLM configuration for a single run.

    Built when a run starts invoking, so edits to the stored configuration
    never affect a call already in flight. ``credential`` is resolved from
    the environment at that moment and is never logged.
    """

    name: str
    provider: str
    model_name: str
    base_url: str | None = None
    credential: str | None = field(default=None, repr=False)
    parameters: dict[str, Any] = field(default_factory=dict)


class ProviderAdapter(ABC):
    """
    Base class for all LLM provider adapters.

    Subclasses must implement:
      - transform_request() : build the provider's native request
      - transform_response() : pull the response text out of the body
    """

    provider_name: str
    default_base_url: str | None = None
    requires_credential: bool = True

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self.client = http_client

    @abstractmethod
    def transform_request(
        self,
        prompt: str,
        config: GatewayConfig,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Returns (url, headers, body) for the provider's API."""
        ...

    @abstractmethod
    def transform_response(self, raw_response: dict[str, Any]) -> str | None:
        """Extract the generated text, or None if the body has none."""
        ...

    def base_url(self, config: GatewayConfig) -> str:
        base = config.base_url or self.default_base_url
        if not base:
            raise GatewayError(
                f"No base URL configured for '{config.name}'",
                details={"provider": self.provider_name},
            )
        return base.rstrip("/")

    async def send(self, prompt: str, config: GatewayConfig, timeout: httpx.Timeout) -> str:
        """Send one non-streaming request and return the response text."""
        if self.requires_credential and not config.credential:
            raise GatewayError(
                f"Credential for '{config.name}' is not set in the environment",
                details={"provider": self.provider_name},
            )

        url, headers, body = self.transform_request(prompt, config)

        try:
            response = await self.client.post(url, headers=headers, json=body, timeout=timeout)
        except httpx.TimeoutException as e:
            raise GatewayTimeoutError(
                f"{self.provider_name} request timed out",
                details={"provider": self.provider_name, "configuration": config.name},
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise GatewayError(
                f"Failed to reach {self.provider_name}: {e}",
                details={"provider": self.provider_name, "configuration": config.name},
            ) from e

        if not response.is_success:
            await self._handle_error_response(response, config)

        try:
            raw = response.json()
        except ValueError as e:
            raise GatewayError(
                f"{self.provider_name} returned a non-JSON body",
                details={"provider": self.provider_name, "status_code": response.status_code},
            ) from e

        try:
            text = self.transform_response(raw) if isinstance(raw, dict) else None
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            raise GatewayError(
                f"{self.provider_name} returned a malformed response",
                details={"provider": self.provider_name, "status_code": response.status_code},
            ) from e
        if text is None:
            raise GatewayError(
                f"{self.provider_name} response did not contain any text",
                details={"provider": self.provider_name, "status_code": response.status_code},
            )
        return text

    async def _handle_error_response(
        self,
        response: httpx.Response,
        config: GatewayConfig,
    ) -> None:
        """Shared error handling for non-2xx responses."""
        error_body = response.text
        await logger.aerror(
            f"provider.{self.provider_name}.error",
            status_code=response.status_code,
            body=error_body[:500],
            configuration=config.name,
        )

        if response.status_code in (401, 403):
            raise GatewayError(
                f"{self.provider_name} rejected the credential for '{config.name}'",
                details={"provider": self.provider_name, "status_code": response.status_code},
            )
        if response.status_code == 429:
            raise GatewayError(
                f"{self.provider_name} rate limit exceeded for '{config.name}'",
                details={"provider": self.provider_name, "status_code": 429},
            )

        raise GatewayError(
            f"{self.provider_name} returned {response.status_code}: {error_body[:200]}",
            details={
                "provider": self.provider_name,
                "status_code": response.status_code,
                "configuration": config.name,
            },
        )
