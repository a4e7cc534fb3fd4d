"""Provider adapter registry: maps provider kinds to adapter classes."""

from __future__ import annotations

import httpx

from prompthub.providers.anthropic import AnthropicAdapter
from prompthub.providers.base import ProviderAdapter
from prompthub.providers.custom import CustomRESTAdapter
from prompthub.providers.ollama import OllamaAdapter
from prompthub.providers.openai import OpenAIAdapter

# Registry: provider kind → adapter class
_ADAPTERS: dict[str, type[ProviderAdapter]] = {
    "openai": OpenAIAdapter,
    "anthropic": AnthropicAdapter,
    "ollama": OllamaAdapter,
    "custom": CustomRESTAdapter,
}

_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared async HTTP client."""
    global _http_client  # noqa: PLW0603
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            http2=True,
            follow_redirects=True,
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared HTTP client (called on app shutdown)."""
    global _http_client  # noqa: PLW0603
    if _http_client and not _http_client.is_closed:
        await _http_client.aclose()
        _http_client = None


def get_adapter(provider: str, http_client: httpx.AsyncClient | None = None) -> ProviderAdapter:
    """Get an adapter instance for the given provider kind."""
    adapter_cls = _ADAPTERS.get(provider)
    if adapter_cls is None:
        supported = ", ".join(sorted(_ADAPTERS.keys()))
        raise ValueError(f"Unsupported provider: '{provider}'. Supported: {supported}")
    return adapter_cls(http_client or get_http_client())


def list_supported_providers() -> list[str]:
    """Return all registered provider kinds."""
    return sorted(_ADAPTERS.keys())
