# src/llm/base_client.py - v1
"""Abstract LLM client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from labeliq.llm.models import LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers.

    Implementations perform exactly one round trip per ``complete`` call and
    leave retries to the caller's RetryExecutor.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.2,
    ) -> LLMResponse:
        """Text completion."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (anthropic, openai)."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Model name requests are sent to."""
