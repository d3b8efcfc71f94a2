"""Abstract LLM client with provider factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

import httpx
from loguru import logger
from pydantic import BaseModel

from readme_generator.config import Settings
from readme_generator.errors import GenerationFailed, QuotaExhausted, RateLimited


class LLMResponse(BaseModel):
    """Standardized LLM response."""
    content: str
    model: str
    tokens_used: int = 0
    finish_reason: str | None = None


class CompletionStream:
    """Raw byte stream of an in-flight streamed completion.

    The body is never buffered; whoever consumes the stream must call
    ``aclose`` once done with it.
    """

    def __init__(self, response: httpx.Response):
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._response.aiter_bytes()

    async def aclose(self) -> None:
        await self._response.aclose()


async def raise_for_provider_status(response: httpx.Response) -> None:
    """Map a non-success provider response to the error taxonomy.

    Works for streamed responses too: the body is read for logging first.
    """
    if response.is_success:
        return

    await response.aread()
    logger.error(f"AI API error: {response.status_code} {response.text[:500]}")

    if response.status_code == 429:
        raise RateLimited()
    if response.status_code == 402:
        raise QuotaExhausted()
    raise GenerationFailed(response.status_code)


class LLMClient(ABC):
    """Abstract base class for LLM providers."""

    def __init__(self, settings: Settings, model: str | None = None):
        self.settings = settings
        self.model = model or self.default_model

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Default model for this provider."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion."""

    @abstractmethod
    async def stream(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> CompletionStream:
        """Start a streamed completion and return its raw byte stream."""

    async def aclose(self) -> None:
        """Release any pooled connections."""


def get_llm_client(settings: Settings, http_client: httpx.AsyncClient | None = None) -> LLMClient:
    """Factory function to get appropriate LLM client.

    Args:
        settings: Runtime settings; ``llm_provider`` selects openai or local.
        http_client: Optional shared httpx client, mostly for tests.

    Returns:
        Configured LLM client instance.
    """
    provider = settings.llm_provider.lower()
    provider_map: dict[str, type[LLMClient]] = {}

    if provider == "openai":
        from readme_generator.llm.providers.openai import OpenAIClient
        provider_map["openai"] = OpenAIClient
    elif provider == "local":
        from readme_generator.llm.providers.local import OllamaClient
        provider_map["local"] = OllamaClient
    else:
        msg = f"Unknown LLM provider: {provider}"
        raise ValueError(msg)

    logger.info(f"Initializing LLM client: {provider}")
    return provider_map[provider](settings, http_client=http_client)
