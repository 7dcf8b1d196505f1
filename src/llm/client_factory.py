# src/llm/client_factory.py — v4
"""Build the analysis model client named by LLM_DEFAULT_PROVIDER.

Adapters are referenced by dotted path and imported on demand, so a
deployment that only talks to one provider never imports the other SDK.
"""

from __future__ import annotations

import importlib
import logging

from salesintel.config.settings import Settings
from salesintel.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

_PROVIDER_REGISTRY: dict[str, str] = {
    "anthropic": "salesintel.llm.adapters.anthropic_adapter.AnthropicAdapter",
    "openai": "salesintel.llm.adapters.openai_adapter.OpenAIAdapter",
}

# Settings attribute holding each built-in provider's API key
_KEY_SETTING: dict[str, str] = {
    "anthropic": "anthropic_api_key",
    "openai": "openai_api_key",
}


class UnsupportedProviderError(ValueError):
    """Provider name has no registered adapter."""


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the adapter registered for provider.

    An api_key passed in kwargs takes precedence over the one in settings.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    adapter_cls = adapter_class(provider)
    init_kwargs: dict[str, object] = {**kwargs, "model": model}
    key_setting = _KEY_SETTING.get(provider)
    if settings is not None and key_setting:
        init_kwargs.setdefault("api_key", getattr(settings, key_setting))

    logger.debug("LLM client %s/%s via %s", provider, model, adapter_cls.__name__)
    return adapter_cls(**init_kwargs)


def adapter_class(provider: str) -> type[BaseLLMClient]:
    try:
        class_path = _PROVIDER_REGISTRY[provider]
    except KeyError:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        ) from None
    module_path, _, class_name = class_path.rpartition(".")
    return getattr(importlib.import_module(module_path), class_name)


def register_provider(name: str, class_path: str) -> None:
    """Make a BaseLLMClient subclass available under name."""
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider %s (%s)", name, class_path)
