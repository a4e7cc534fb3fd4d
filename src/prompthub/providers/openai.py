"""OpenAI-compatible adapter (OpenAI, Azure OpenAI, vLLM, LM Studio, ...)."""

from __future__ import annotations

from typing import Any

from prompthub.providers.base import GatewayConfig, ProviderAdapter


class OpenAIAdapter(ProviderAdapter):
    provider_name = "openai"
    default_base_url = "https://api.openai.com/v1"

    def transform_request(
        self,
        prompt: str,
        config: GatewayConfig,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{self.base_url(config)}/chat/completions"

        headers = {
            "Authorization": f"Bearer {config.credential}",
            "Content-Type": "application/json",
        }

        body: dict[str, Any] = {
            **config.parameters,
            "model": config.model_name,
            "messages": [{"role": "user", "content": prompt}],
        }
        body["stream"] = False
        return url, headers, body

    def transform_response(self, raw_response: dict[str, Any]) -> str | None:
        choices = raw_response.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None
