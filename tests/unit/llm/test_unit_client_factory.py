# tests/unit/llm/test_client_factory.py — v1
"""Tests for llm/client_factory.py."""

from __future__ import annotations

import pytest

from salesintel.config.settings import Settings
from salesintel.llm import client_factory
from salesintel.llm.adapters.anthropic_adapter import AnthropicAdapter
from salesintel.llm.adapters.openai_adapter import OpenAIAdapter
from salesintel.llm.client_factory import (
    UnsupportedProviderError,
    create_llm_client,
    register_provider,
)


class TestCreateLLMClient:
    def test_anthropic_with_settings_key(self):
        s = Settings(_env_file=None, anthropic_api_key="sk-ant")
        client = create_llm_client("anthropic", "claude-sonnet-4-20250514", settings=s)
        assert isinstance(client, AnthropicAdapter)
        assert client.provider_name == "anthropic"
        assert client.model_name == "claude-sonnet-4-20250514"
        assert client._api_key == "sk-ant"

    def test_openai(self):
        s = Settings(_env_file=None, openai_api_key="sk-oai")
        client = create_llm_client("openai", "gpt-4o-mini", settings=s)
        assert isinstance(client, OpenAIAdapter)
        assert client.model_name == "gpt-4o-mini"
        assert client._api_key == "sk-oai"

    def test_explicit_key_wins(self):
        s = Settings(_env_file=None, anthropic_api_key="from-settings")
        client = create_llm_client("anthropic", "m", settings=s, api_key="explicit")
        assert client._api_key == "explicit"

    def test_unsupported(self):
        with pytest.raises(UnsupportedProviderError, match="Available: anthropic, openai"):
            create_llm_client("google", "gemini")


class TestRegisterProvider:
    def test_register(self, monkeypatch):
        monkeypatch.setattr(client_factory, "_PROVIDER_REGISTRY", dict(client_factory._PROVIDER_REGISTRY))
        register_provider("azure", "salesintel.llm.adapters.openai_adapter.OpenAIAdapter")
        assert isinstance(create_llm_client("azure", "gpt-4o"), OpenAIAdapter)
