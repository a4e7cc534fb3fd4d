"""Tests for the OpenAI provider adapter."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from prompthub.providers.base import GatewayConfig
from prompthub.providers.openai import OpenAIAdapter


@pytest.mark.unit
class TestOpenAIAdapter:
    def _make_config(self, **overrides) -> GatewayConfig:
        defaults = {
            "name": "test-openai",
            "provider": "openai",
            "model_name": "gpt-4o",
            "base_url": "https://api.openai.com/v1/",
            "credential": "sk-test",
        }
        defaults.update(overrides)
        return GatewayConfig(**defaults)

    def test_transform_request_basic(self) -> None:
        adapter = OpenAIAdapter(MagicMock())

        url, headers, body = adapter.transform_request("Hello", self._make_config())

        assert url == "https://api.openai.com/v1/chat/completions"
        assert headers["Authorization"] == "Bearer sk-test"
        assert body["model"] == "gpt-4o"
        assert body["messages"] == [{"role": "user", "content": "Hello"}]
        assert body["stream"] is False

    def test_default_base_url(self) -> None:
        adapter = OpenAIAdapter(MagicMock())
        url, _, _ = adapter.transform_request("Hi", self._make_config(base_url=None))
        assert url == "https://api.openai.com/v1/chat/completions"

    def test_parameters_are_passed_through(self) -> None:
        adapter = OpenAIAdapter(MagicMock())
        config = self._make_config(parameters={"temperature": 0.2, "max_tokens": 100, "stream": True})

        _, _, body = adapter.transform_request("Hi", config)

        assert body["temperature"] == 0.2
        assert body["max_tokens"] == 100
        # Runs are never streamed
        assert body["stream"] is False

    def test_transform_response(self) -> None:
        adapter = OpenAIAdapter(MagicMock())
        raw = {
            "id": "chatcmpl-abc123",
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": "Hello! How can I help?"},
                    "finish_reason": "stop",
                }
            ],
        }
        assert adapter.transform_response(raw) == "Hello! How can I help?"

    def test_transform_response_without_choices(self) -> None:
        adapter = OpenAIAdapter(MagicMock())
        assert adapter.transform_response({"choices": []}) is None
        assert adapter.transform_response({"error": "nope"}) is None

    @pytest.mark.parametrize(
        "raw",
        [
            {"choices": ["oops"]},
            {"choices": "abc"},
            {"choices": [{"message": "plain"}]},
            {"choices": [{"message": {"content": ["a", "b"]}}]},
        ],
    )
    def test_transform_response_unexpected_shapes(self, raw: dict) -> None:
        assert OpenAIAdapter(MagicMock()).transform_response(raw) is None

    def test_credential_is_not_in_repr(self) -> None:
        assert "sk-test" not in repr(self._make_config())
