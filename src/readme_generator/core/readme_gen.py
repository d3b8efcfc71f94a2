"""README generation service: context, prompt, model call, stream relay."""

from __future__ import annotations

import re
from collections.abc import AsyncIterator
from dataclasses import dataclass

from loguru import logger
from pydantic import ValidationError

from readme_generator.config import Settings
from readme_generator.core.composer import (
    compose_improve_prompt,
    compose_readme_prompt,
    compose_score_prompt,
    compose_section_prompt,
)
from readme_generator.core.context import RepositoryContextBuilder
from readme_generator.core.github import GitHubClient
from readme_generator.errors import GenerationFailed
from readme_generator.llm import CompletionStream, LLMClient, get_llm_client
from readme_generator.schemas import (
    GenerationOptions,
    RepoInfo,
    RepositoryContext,
    ScoreResult,
    StreamEvent,
)
from readme_generator.streaming import StreamReframer
from readme_generator.utils import truncate_to_tokens

_JSON_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


@dataclass
class GenerationResult:
    """Non-streamed README plus the repository it was written for."""
    readme: str
    repo_info: RepoInfo
    context: RepositoryContext


class ReadmeStream:
    """A README generation whose model output has started streaming.

    Upstream failures that happen before any output (bad status, missing
    credential) have already been raised by the time this object exists.
    """

    def __init__(self, context: RepositoryContext, upstream: CompletionStream, timeout: float | None):
        self.context = context
        self.upstream = upstream
        self._reframer = StreamReframer(context.repo_info(), upstream, timeout=timeout)

    @property
    def repo_info(self) -> RepoInfo:
        return self._reframer.repo_info

    async def events(self) -> AsyncIterator[StreamEvent]:
        try:
            async for event in self._reframer.events():
                yield event
        finally:
            await self.upstream.aclose()

    async def frames(self) -> AsyncIterator[str]:
        try:
            async for frame in self._reframer.frames():
                yield frame
        finally:
            await self.upstream.aclose()

    async def aclose(self) -> None:
        await self.upstream.aclose()


class ReadmeGenerator:
    """Generate, stream, rewrite and score READMEs for GitHub repositories."""

    def __init__(
        self,
        settings: Settings,
        github: GitHubClient | None = None,
        llm_client: LLMClient | None = None,
    ):
        self.settings = settings
        self.github = github or GitHubClient(settings)
        self.llm = llm_client or get_llm_client(settings)
        self.context_builder = RepositoryContextBuilder(self.github)

    async def generate(self, repo_url: str, options: GenerationOptions | None = None) -> GenerationResult:
        """Generate a README in one non-streamed completion.

        Args:
            repo_url: GitHub URL or owner/repo shorthand
            options: Style and section selection

        Returns:
            GenerationResult with the markdown and repository identity
        """
        context = await self.context_builder.build(repo_url)
        prompt = compose_readme_prompt(context, options)

        logger.info("Context prepared, calling AI...")
        response = await self.llm.complete(prompt=prompt.user, system=prompt.system)
        logger.info(f"README generated successfully: {len(response.content.split())} words")

        return GenerationResult(
            readme=response.content,
            repo_info=context.repo_info(),
            context=context,
        )

    async def open_stream(self, repo_url: str, options: GenerationOptions | None = None) -> ReadmeStream:
        """Fetch context and start a streamed completion.

        Every failure up to the first upstream byte is raised from here, so
        callers can still answer with a plain error response.
        """
        context = await self.context_builder.build(repo_url)
        prompt = compose_readme_prompt(context, options)

        logger.info(f"Context prepared, streaming README for {context.owner}/{context.name}")
        upstream = await self.llm.stream(prompt=prompt.user, system=prompt.system)
        return ReadmeStream(context, upstream, timeout=self.settings.stream_timeout)

    async def regenerate_section(
        self,
        section: str,
        section_content: str,
        repo_info: RepoInfo,
        instruction: str | None = None,
    ) -> str:
        logger.info(f"Regenerating section: {section} for {repo_info.name}")
        prompt = compose_section_prompt(section, section_content, repo_info, instruction)
        response = await self.llm.complete(prompt=prompt.user, system=prompt.system)
        logger.info("Section regenerated successfully")
        return response.content

    async def score(self, readme: str, repo_name: str | None = None) -> ScoreResult:
        """Ask the model for a 0-100 quality score with a category breakdown."""
        readme = truncate_to_tokens(readme, self.settings.max_input_tokens)
        prompt = compose_score_prompt(readme, repo_name)
        response = await self.llm.complete(prompt=prompt.user, system=prompt.system, temperature=0.2)
        return parse_score(response.content)

    async def improve(self, readme: str) -> str:
        readme = truncate_to_tokens(readme, self.settings.max_input_tokens)
        prompt = compose_improve_prompt(readme)
        response = await self.llm.complete(prompt=prompt.user, system=prompt.system)
        return response.content

    async def aclose(self) -> None:
        await self.github.aclose()
        await self.llm.aclose()


def parse_score(content: str) -> ScoreResult:
    """Parse the model's score JSON, tolerating a markdown code fence.

    Raises:
        GenerationFailed: If no valid score JSON can be read.
    """
    match = _JSON_FENCE.search(content)
    if match:
        content = match.group(1)
    try:
        return ScoreResult.model_validate_json(content.strip())
    except ValidationError as e:
        logger.error(f"Failed to parse score output: {e}")
        raise GenerationFailed(message="Failed to parse README score") from e
