"""Ollama (local) adapter using the /api/generate endpoint."""

from __future__ import annotations

from typing import Any

from prompthub.providers.base import GatewayConfig, ProviderAdapter


class OllamaAdapter(ProviderAdapter):
    provider_name = "ollama"
    default_base_url = "http://localhost:11434"
    requires_credential = False

    def transform_request(
        self,
        prompt: str,
        config: GatewayConfig,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{self.base_url(config)}/api/generate"

        headers = {"Content-Type": "application/json"}
        if config.credential:
            headers["Authorization"] = f"Bearer {config.credential}"

        # Ollama takes sampling parameters under "options"
        body: dict[str, Any] = {
            "model": config.model_name,
            "prompt": prompt,
            "stream": False,
        }
        if config.parameters:
            body["options"] = dict(config.parameters)
        return url, headers, body

    def transform_response(self, raw_response: dict[str, Any]) -> str | None:
        text = raw_response.get("response")
        return text if isinstance(text, str) else None
