"""OpenAI-compatible chat completion provider over httpx."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from readme_generator.config import Settings
from readme_generator.errors import AuthConfigurationError, GenerationFailed
from readme_generator.llm.client import (
    CompletionStream,
    LLMClient,
    LLMResponse,
    raise_for_provider_status,
)
from readme_generator.schemas import ChatCompletion, ChatPrompt


class OpenAIClient(LLMClient):
    """Client for any endpoint speaking the OpenAI chat completions API."""

    requires_api_key = True
    default_base_url = "https://api.openai.com/v1"

    def __init__(
        self,
        settings: Settings,
        model: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(settings, model)
        self.base_url = (settings.llm_base_url or self.default_base_url).rstrip("/")
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def default_model(self) -> str:
        return self.settings.llm_model or "gpt-4o-mini"

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        api_key = self.settings.llm_api_key
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        elif self.requires_api_key:
            raise AuthConfigurationError()
        return headers

    def _payload(
        self,
        prompt: str,
        system: str | None,
        stream: bool,
        temperature: float | None,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        messages = ChatPrompt(system=system, user=prompt).messages()
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [m.model_dump() for m in messages],
        }
        if stream:
            payload["stream"] = True
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a single, non-streamed completion."""
        headers = self._headers()
        payload = self._payload(prompt, system, False, temperature, max_tokens)
        client = self._get_client()

        try:
            response = await client.post(self.completions_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"{self.provider_name} request failed: {e}")
            raise GenerationFailed() from e

        await raise_for_provider_status(response)

        try:
            completion = ChatCompletion.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Unexpected completion payload: {e}")
            raise GenerationFailed(message="AI generation returned an unexpected payload") from e

        choice = completion.choices[0] if completion.choices else None
        return LLMResponse(
            content=completion.text,
            model=self.model,
            tokens_used=completion.usage.total_tokens if completion.usage else 0,
            finish_reason=choice.finish_reason if choice else None,
        )

    async def stream(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> CompletionStream:
        """Open a ``stream: true`` completion and hand back its byte stream."""
        headers = self._headers()
        payload = self._payload(prompt, system, True, temperature, max_tokens)
        client = self._get_client()
        request = client.build_request("POST", self.completions_url, json=payload, headers=headers)

        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"{self.provider_name} stream request failed: {e}")
            raise GenerationFailed() from e

        try:
            await raise_for_provider_status(response)
        except Exception:
            await response.aclose()
            raise

        logger.info(f"Streaming completion from {self.provider_name} ({self.model})")
        return CompletionStream(response)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
