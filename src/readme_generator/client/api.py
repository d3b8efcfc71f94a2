"""HTTP client for the README generator service."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from readme_generator.client.consumer import StreamConsumer
from readme_generator.errors import ReadmeGeneratorError, error_for_status
from readme_generator.schemas import (
    ContentResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    GenerationOptions,
    ImproveRequest,
    RegenerateSectionRequest,
    RepoInfo,
    ScoreRequest,
    ScoreResponse,
)

EVENT_STREAM = "text/event-stream"
DEFAULT_BASE_URL = "http://localhost:8000"


def error_from_response(response: httpx.Response) -> ReadmeGeneratorError:
    """Turn a non-200 ``{"error": ...}`` response into a typed error."""
    try:
        message = ErrorResponse.model_validate_json(response.content).error
    except ValidationError:
        message = None
    return error_for_status(response.status_code, message or f"Request failed: {response.status_code}")


class ReadmeApiClient:
    """Talks to ``/generate`` and the editing endpoints.

    Pass ``transport`` (e.g. ``httpx.ASGITransport``) to run against an
    in-process app, or ``http_client`` to share a client.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 300.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> ReadmeApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def stream_generate(
        self,
        repo_url: str,
        options: GenerationOptions | None = None,
        consumer: StreamConsumer | None = None,
        keep_previous: bool = False,
    ) -> StreamConsumer:
        """Stream a README into ``consumer``.

        The response is closed when this returns or is cancelled.

        Raises:
            ReadmeGeneratorError: For a non-200 status before streaming starts.
            StreamInterrupted: If the stream carried an error event.
        """
        consumer = consumer or StreamConsumer()
        body = GenerateRequest(
            repo_url=repo_url,
            options=options or GenerationOptions(),
            stream=True,
        ).to_wire()

        logger.info(f"Streaming README for {repo_url}")
        async with self._client.stream(
            "POST",
            "/generate",
            json=body,
            headers={"Accept": EVENT_STREAM},
        ) as response:
            if response.status_code != 200:
                await response.aread()
                raise error_from_response(response)
            await consumer.consume(response.aiter_bytes(), keep_previous=keep_previous)
        return consumer

    async def generate(self, repo_url: str, options: GenerationOptions | None = None) -> GenerateResponse:
        body = GenerateRequest(repo_url=repo_url, options=options or GenerationOptions(), stream=False)
        data = await self._post("/generate", body.to_wire())
        return GenerateResponse.model_validate(data)

    async def regenerate_section(
        self,
        section: str,
        section_content: str,
        repo_info: RepoInfo,
        instruction: str | None = None,
    ) -> str:
        body = RegenerateSectionRequest(
            section=section,
            section_content=section_content,
            repo_info=repo_info,
            instruction=instruction,
        )
        data = await self._post("/regenerate-section", body.to_wire())
        return ContentResponse.model_validate(data).content

    async def score(self, readme: str, repo_name: str | None = None) -> ScoreResponse:
        data = await self._post("/score", ScoreRequest(readme=readme, repo_name=repo_name).to_wire())
        return ScoreResponse.model_validate(data)

    async def improve(self, readme: str) -> str:
        data = await self._post("/improve", ImproveRequest(readme=readme).to_wire())
        return ContentResponse.model_validate(data).content

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        response = await self._client.post(path, json=body)
        if response.status_code != 200:
            raise error_from_response(response)
        return response.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
