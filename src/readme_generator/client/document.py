"""Editable README document, generation sessions and bulk generation."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import httpx
from loguru import logger

from readme_generator.client.api import ReadmeApiClient
from readme_generator.client.consumer import DEFAULT_FLUSH_DELAY, StreamConsumer
from readme_generator.core.sections import find_section, replace_section, segment_sections
from readme_generator.errors import ReadmeGeneratorError, RegenerationInProgress
from readme_generator.schemas import GenerationOptions, RepoInfo, Section


class ReadmeDocument:
    """README markdown plus the repository it describes.

    Sections are always recomputed from the current markdown, never cached.
    """

    def __init__(self, markdown: str = "", repo_info: RepoInfo | None = None):
        self.markdown = markdown
        self.repo_info = repo_info
        self._regenerating: str | None = None

    @property
    def regenerating(self) -> str | None:
        """Title of the section being regenerated, if any."""
        return self._regenerating

    def sections(self) -> list[Section]:
        return segment_sections(self.markdown)

    def section(self, title: str | None = None, index: int | None = None) -> Section:
        found = find_section(self.sections(), title=title, index=index)
        if found is None:
            wanted = title if title is not None else f"#{index}"
            msg = f"Section not found: {wanted}"
            raise KeyError(msg)
        return found

    def replace_section(self, content: str, title: str | None = None, index: int | None = None) -> str:
        """Replace one section's lines with ``content`` and return the new markdown."""
        target = self.section(title=title, index=index)
        self.markdown = replace_section(self.markdown, target, content)
        return self.markdown

    async def regenerate_section(
        self,
        api: ReadmeApiClient,
        title: str | None = None,
        index: int | None = None,
        instruction: str | None = None,
    ) -> str:
        """Ask the service to rewrite one section and splice the result in.

        Raises:
            RegenerationInProgress: If another regeneration has not finished.
            StaleSectionError: If the section changed while waiting for the model.
        """
        if self._regenerating is not None:
            raise RegenerationInProgress(f"Already regenerating section: {self._regenerating}")
        if self.repo_info is None:
            msg = "Document has no repository info; generate it first"
            raise ValueError(msg)

        target = self.section(title=title, index=index)
        self._regenerating = target.title
        try:
            content = await api.regenerate_section(target.title, target.content, self.repo_info, instruction)
            self.markdown = replace_section(self.markdown, target, content)
        finally:
            self._regenerating = None

        logger.info(f"Section '{target.title}' regenerated")
        return self.markdown


class GenerationSession:
    """Owns at most one in-flight streamed generation.

    Starting a new generation cancels the previous one; its consumer is
    abandoned so a late flush can never overwrite the new document.
    """

    def __init__(
        self,
        api: ReadmeApiClient,
        flush_delay: float = DEFAULT_FLUSH_DELAY,
        on_update: Callable[[ReadmeDocument], None] | None = None,
    ):
        self.api = api
        self.flush_delay = flush_delay
        self.on_update = on_update
        self.document = ReadmeDocument()
        self._task: asyncio.Task[ReadmeDocument] | None = None
        self._consumer: StreamConsumer | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(
        self,
        repo_url: str,
        options: GenerationOptions | None = None,
        regenerate: bool = False,
    ) -> asyncio.Task[ReadmeDocument]:
        """Start streaming a README, replacing any generation in flight.

        With ``regenerate`` the current markdown stays visible until the new
        stream produces content.
        """
        await self.cancel()

        if not regenerate:
            self.document = ReadmeDocument()
        document = self.document
        consumer = StreamConsumer(flush_delay=self.flush_delay)

        def apply_info(repo_info: RepoInfo) -> None:
            if consumer is self._consumer:
                document.repo_info = repo_info

        def apply_text(text: str) -> None:
            if consumer is self._consumer:
                document.markdown = text
                if self.on_update is not None:
                    self.on_update(document)

        consumer.on_info = apply_info
        consumer.on_update = apply_text
        self._consumer = consumer
        self._task = asyncio.create_task(self._run(repo_url, options, consumer, regenerate))
        return self._task

    async def _run(
        self,
        repo_url: str,
        options: GenerationOptions | None,
        consumer: StreamConsumer,
        regenerate: bool,
    ) -> ReadmeDocument:
        await self.api.stream_generate(repo_url, options, consumer=consumer, keep_previous=regenerate)
        return self.document

    async def wait(self) -> ReadmeDocument:
        if self._task is None:
            return self.document
        return await self._task

    async def cancel(self) -> None:
        """Cancel the in-flight generation, if any, and wait for it to unwind."""
        task, consumer = self._task, self._consumer
        self._task = None
        self._consumer = None
        if consumer is not None:
            consumer.abandon()
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug("Previous generation cancelled")
        except (ReadmeGeneratorError, httpx.HTTPError) as e:
            logger.debug(f"Previous generation ended with an error: {e}")


@dataclass
class BulkItem:
    """Progress of one repository in a bulk run."""
    url: str
    status: str = "pending"
    readme: str = ""
    repo_info: RepoInfo | None = None
    error: str | None = None


async def generate_many(
    api: ReadmeApiClient,
    urls: list[str],
    options: GenerationOptions | None = None,
    on_progress: Callable[[BulkItem], None] | None = None,
) -> list[BulkItem]:
    """Generate READMEs for several repositories one after another.

    A failure is recorded on its item and the run continues.
    """
    items = [BulkItem(url=url.strip()) for url in urls if url.strip()]
    for item in items:
        item.status = "generating"
        if on_progress is not None:
            on_progress(item)

        consumer = StreamConsumer()
        try:
            await api.stream_generate(item.url, options, consumer=consumer)
            item.status = "done"
            item.readme = consumer.text
            item.repo_info = consumer.repo_info
        except ReadmeGeneratorError as e:
            item.status = "error"
            item.error = e.message
            item.readme = consumer.text
        except httpx.HTTPError as e:
            item.status = "error"
            item.error = str(e)

        logger.info(f"{item.url}: {item.status}")
        if on_progress is not None:
            on_progress(item)
    return items
