"""
Anthropic Messages API adapter.

Differences from OpenAI:
  - Auth: x-api-key header plus anthropic-version
  - max_tokens is mandatory
  - Response text arrives as a list of content blocks
"""

from __future__ import annotations

from typing import Any

from prompthub.providers.base import GatewayConfig, ProviderAdapter

ANTHROPIC_API_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 4096


class AnthropicAdapter(ProviderAdapter):
    provider_name = "anthropic"
    default_base_url = "https://api.anthropic.com"

    def transform_request(
        self,
        prompt: str,
        config: GatewayConfig,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{self.base_url(config)}/v1/messages"

        headers = {
            "x-api-key": config.credential or "",
            "anthropic-version": ANTHROPIC_API_VERSION,
            "content-type": "application/json",
        }

        body: dict[str, Any] = {
            "max_tokens": DEFAULT_MAX_TOKENS,
            **config.parameters,
            "model": config.model_name,
            "messages": [{"role": "user", "content": prompt}],
        }
        body["stream"] = False
        return url, headers, body

    def transform_response(self, raw_response: dict[str, Any]) -> str | None:
        blocks = raw_response.get("content")
        if not isinstance(blocks, list):
            return None
        text_parts = [
            block["text"]
            for block in blocks
            if isinstance(block, dict)
            and block.get("type") == "text"
            and isinstance(block.get("text"), str)
        ]
        return "\n".join(text_parts) if text_parts else None
