"""Generic REST adapter for self-built endpoints."""

from __future__ import annotations

from typing import Any

from prompthub.providers.base import GatewayConfig, ProviderAdapter

# Checked in order when reading the response body
_TEXT_KEYS = ("response", "text", "output", "completion")


class CustomRESTAdapter(ProviderAdapter):
    """
    POSTs ``{"model", "prompt", **parameters}`` to the configured URL as-is.

    The configured base URL is the full endpoint. A bearer token is sent only
    when a credential is present.
    """

    provider_name = "custom"
    requires_credential = False

    def transform_request(
        self,
        prompt: str,
        config: GatewayConfig,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {"Content-Type": "application/json"}
        if config.credential:
            headers["Authorization"] = f"Bearer {config.credential}"

        body: dict[str, Any] = {
            **config.parameters,
            "model": config.model_name,
            "prompt": prompt,
        }
        return self.base_url(config), headers, body

    def transform_response(self, raw_response: dict[str, Any]) -> str | None:
        for key in _TEXT_KEYS:
            value = raw_response.get(key)
            if isinstance(value, str):
                return value

        # OpenAI-shaped bodies from compatible servers
        choices = raw_response.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        first = choices[0]
        message = first.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        text = first.get("text")
        return text if isinstance(text, str) else None
