from __future__ import annotations

import asyncio

import pytest

from readme_generator.client.consumer import ConsumerState, FlushScheduler, StreamConsumer
from readme_generator.errors import StreamInterrupted
from readme_generator.schemas import ContentEvent, DoneEvent, ErrorEvent, InfoEvent, RepoInfo, encode_event
from tests._fixtures.fakes import ChunkedStream, split_every

REPO = RepoInfo(name="Hello-World", owner="octocat")


def _wire(*events) -> bytes:
    return "".join(encode_event(event) for event in events).encode()


@pytest.mark.asyncio
async def test_consumes_full_stream() -> None:
    infos: list[RepoInfo] = []
    consumer = StreamConsumer(on_info=infos.append)
    body = _wire(InfoEvent(repo_info=REPO), ContentEvent(text="# Hi"), ContentEvent(text=" 🚀"), DoneEvent())

    text = await consumer.consume(ChunkedStream(split_every(body, 5)))

    assert text == "# Hi 🚀"
    assert consumer.state == ConsumerState.SUCCEEDED
    assert infos == [REPO]
    assert consumer.repo_info == REPO


@pytest.mark.asyncio
async def test_updates_are_coalesced() -> None:
    updates: list[str] = []
    consumer = StreamConsumer(on_update=updates.append, flush_delay=10)
    deltas = [ContentEvent(text=str(i)) for i in range(50)]

    await consumer.consume(ChunkedStream([_wire(InfoEvent(repo_info=REPO), *deltas, DoneEvent())]))

    # The timer never fires within this test; only the final flush publishes
    assert updates == ["".join(str(i) for i in range(50))]


@pytest.mark.asyncio
async def test_error_event_keeps_partial_text() -> None:
    consumer = StreamConsumer()
    body = _wire(
        InfoEvent(repo_info=REPO),
        ContentEvent(text="partial"),
        ErrorEvent(error="Stream interrupted"),
        DoneEvent(),
    )

    with pytest.raises(StreamInterrupted) as exc_info:
        await consumer.consume(ChunkedStream([body]))

    assert exc_info.value.message == "Stream interrupted"
    assert consumer.state == ConsumerState.FAILED
    assert consumer.text == "partial"


@pytest.mark.asyncio
async def test_unparseable_lines_are_ignored() -> None:
    consumer = StreamConsumer()
    body = b'data: {"type": "mystery"}\ndata: not json\n\n' + _wire(ContentEvent(text="ok"), DoneEvent())

    assert await consumer.consume(ChunkedStream([body])) == "ok"


@pytest.mark.asyncio
async def test_cancelled_consumer_never_publishes_again() -> None:
    updates: list[str] = []
    consumer = StreamConsumer(on_update=updates.append, flush_delay=0.1)
    upstream = ChunkedStream([_wire(ContentEvent(text="late"))], hang=True)

    task = asyncio.create_task(consumer.consume(upstream))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.sleep(0.15)

    assert consumer.state == ConsumerState.CANCELLED
    assert updates == []


@pytest.mark.asyncio
async def test_regenerate_keeps_previous_text_until_new_content() -> None:
    consumer = StreamConsumer()
    await consumer.consume(ChunkedStream([_wire(ContentEvent(text="old readme"), DoneEvent())]))

    with pytest.raises(StreamInterrupted):
        await consumer.consume(
            ChunkedStream([_wire(ErrorEvent(error="Stream interrupted"), DoneEvent())]),
            keep_previous=True,
        )
    assert consumer.text == "old readme"

    await consumer.consume(ChunkedStream([_wire(ContentEvent(text="new"), DoneEvent())]), keep_previous=True)
    assert consumer.text == "new"


@pytest.mark.asyncio
async def test_flush_scheduler_fires_once_per_window() -> None:
    calls: list[int] = []
    scheduler = FlushScheduler(0.01, lambda: calls.append(1))

    scheduler.schedule()
    scheduler.schedule()
    assert scheduler.pending
    await asyncio.sleep(0.05)

    assert calls == [1]
    assert not scheduler.pending


@pytest.mark.asyncio
async def test_flush_scheduler_cancel_drops_pending_publish() -> None:
    calls: list[int] = []
    scheduler = FlushScheduler(0.01, lambda: calls.append(1))

    scheduler.schedule()
    scheduler.cancel()
    scheduler.flush()
    await asyncio.sleep(0.05)

    assert calls == []
