from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from readme_generator.client import BulkItem, GenerationSession, ReadmeApiClient, ReadmeDocument, generate_many
from readme_generator.core.sections import StaleSectionError
from readme_generator.errors import RegenerationInProgress, StreamInterrupted
from readme_generator.schemas import ContentEvent, DoneEvent, ErrorEvent, InfoEvent, RepoInfo, encode_event

README = "# Title\nintro\n## Install\nnpm i\n## Usage\nrun it"
REPO = RepoInfo(name="Hello-World", owner="octocat")


def _stream_body(*texts: str, error: str | None = None) -> bytes:
    events = [InfoEvent(repo_info=REPO), *(ContentEvent(text=t) for t in texts)]
    if error:
        events.append(ErrorEvent(error=error))
    events.append(DoneEvent())
    return "".join(encode_event(e) for e in events).encode()


async def _hanging_body(first: bytes):
    yield first
    await asyncio.Event().wait()


def _api(handler) -> ReadmeApiClient:
    return ReadmeApiClient("http://testserver", transport=httpx.MockTransport(handler))


def test_document_sections_are_recomputed() -> None:
    document = ReadmeDocument(README, REPO)
    assert [s.title for s in document.sections()] == ["Title", "Install", "Usage"]

    document.markdown = "# Only"
    assert [s.title for s in document.sections()] == ["Only"]


def test_document_replace_section_by_title() -> None:
    document = ReadmeDocument(README, REPO)

    document.replace_section("## Install\npip install hello", title="Install")

    assert document.markdown == "# Title\nintro\n## Install\npip install hello\n## Usage\nrun it"


def test_document_unknown_section() -> None:
    with pytest.raises(KeyError):
        ReadmeDocument(README, REPO).section(title="Changelog")


@pytest.mark.asyncio
async def test_regenerate_section_splices_model_output() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"content": "## Usage\nhello --help"})

    document = ReadmeDocument(README, REPO)
    await document.regenerate_section(_api(handler), title="Usage", instruction="Show --help")

    assert document.markdown.endswith("## Install\nnpm i\n## Usage\nhello --help")
    assert seen[0]["section"] == "Usage"
    assert seen[0]["sectionContent"] == "## Usage\nrun it"
    assert seen[0]["repoInfo"]["name"] == "Hello-World"
    assert seen[0]["instruction"] == "Show --help"
    assert document.regenerating is None


@pytest.mark.asyncio
async def test_only_one_regeneration_at_a_time() -> None:
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        await release.wait()
        return httpx.Response(200, json={"content": "## Install\nmake"})

    api = _api(handler)
    document = ReadmeDocument(README, REPO)
    first = asyncio.create_task(document.regenerate_section(api, title="Install"))
    await asyncio.sleep(0.01)

    assert document.regenerating == "Install"
    with pytest.raises(RegenerationInProgress):
        await document.regenerate_section(api, title="Usage")

    release.set()
    await first
    assert "## Install\nmake" in document.markdown
    assert document.regenerating is None


@pytest.mark.asyncio
async def test_regeneration_against_edited_document_is_rejected() -> None:
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        await release.wait()
        return httpx.Response(200, json={"content": "## Usage\nnew"})

    document = ReadmeDocument(README, REPO)
    task = asyncio.create_task(document.regenerate_section(_api(handler), title="Usage"))
    await asyncio.sleep(0.01)
    document.markdown = README.replace("run it", "edited by hand")
    release.set()

    with pytest.raises(StaleSectionError):
        await task
    assert document.markdown.endswith("edited by hand")
    assert document.regenerating is None


@pytest.mark.asyncio
async def test_session_streams_into_document() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content)["stream"] is True
        return httpx.Response(200, content=_stream_body("# Hello", "-World"))

    session = GenerationSession(_api(handler))
    await session.start("octocat/Hello-World")
    document = await session.wait()

    assert document.markdown == "# Hello-World"
    assert document.repo_info == REPO
    assert not session.active


@pytest.mark.asyncio
async def test_new_generation_cancels_the_previous_one() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            return httpx.Response(200, content=_hanging_body(encode_event(ContentEvent(text="stale")).encode()))
        return httpx.Response(200, content=_stream_body("fresh"))

    updates: list[str] = []
    session = GenerationSession(
        _api(handler),
        flush_delay=0.01,
        on_update=lambda document: updates.append(document.markdown),
    )
    first = await session.start("octocat/one")
    await asyncio.sleep(0.05)

    await session.start("octocat/two")
    document = await session.wait()
    await asyncio.sleep(0.05)

    assert first.cancelled()
    assert document.markdown == "fresh"
    assert updates[-1] == "fresh"


@pytest.mark.asyncio
async def test_regenerate_keeps_previous_markdown_on_failure() -> None:
    bodies = [_stream_body("# Original"), _stream_body(error="Stream interrupted")]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=bodies.pop(0))

    session = GenerationSession(_api(handler))
    await session.start("octocat/Hello-World")
    await session.wait()

    await session.start("octocat/Hello-World", regenerate=True)
    with pytest.raises(StreamInterrupted):
        await session.wait()

    assert session.document.markdown == "# Original"


@pytest.mark.asyncio
async def test_generate_many_records_each_outcome() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if json.loads(request.content)["repoUrl"] == "octocat/busy":
            return httpx.Response(429, json={"error": "Rate limit exceeded. Please try again later."})
        return httpx.Response(200, content=_stream_body("# Fine"))

    progress: list[tuple[str, str]] = []
    items = await generate_many(
        _api(handler),
        ["octocat/Hello-World", "  ", "octocat/busy"],
        on_progress=lambda item: progress.append((item.url, item.status)),
    )

    assert [(i.url, i.status) for i in items] == [("octocat/Hello-World", "done"), ("octocat/busy", "error")]
    assert items[0].readme == "# Fine"
    assert items[0].repo_info == REPO
    assert items[1].error == "Rate limit exceeded. Please try again later."
    assert progress[0] == ("octocat/Hello-World", "generating")
    assert isinstance(items[0], BulkItem)
