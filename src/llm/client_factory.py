# src/llm/client_factory.py - v1
"""Factory: instantiate the ingredient-analysis LLM client from settings."""

from __future__ import annotations

import importlib
import logging

from labeliq.config.settings import Settings
from labeliq.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

# Registry of provider name -> adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "anthropic": "labeliq.llm.adapters.anthropic_adapter.AnthropicAdapter",
    "openai": "labeliq.llm.adapters.openai_adapter.OpenAIAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(settings: Settings, provider: str | None = None) -> BaseLLMClient:
    """Instantiate the adapter for ``provider`` (default: ``settings.llm_provider``).

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    provider = provider or settings.llm_provider
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    if provider == "anthropic":
        api_key, base_url = settings.anthropic_api_key, settings.anthropic_base_url
    else:
        api_key, base_url = settings.openai_api_key, settings.openai_base_url

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, settings.llm_model)
    return adapter_cls(
        model=settings.llm_model,
        api_key=api_key,
        base_url=base_url or None,
        timeout_s=settings.request_timeout_s,
    )


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
