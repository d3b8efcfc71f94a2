"""Server-side re-framing of a provider SSE stream into our event protocol."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass, field
from enum import Enum

import httpx
from loguru import logger
from pydantic import ValidationError

from readme_generator.schemas import (
    ChatCompletionChunk,
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    InfoEvent,
    RepoInfo,
    StreamEvent,
    encode_event,
)
from readme_generator.schemas.stream import DONE_MARKER, data_payload
from readme_generator.streaming.lines import LineBuffer

STREAM_INTERRUPTED = "Stream interrupted"
STREAM_TIMED_OUT = "Stream timed out"

_READ_ERRORS = (httpx.HTTPError, httpx.StreamError, OSError)


class ReframerState(str, Enum):
    AWAITING_FIRST_BYTE = "awaiting_first_byte"
    RELAYING = "relaying"
    TERMINATED = "terminated"


class LineKind(str, Enum):
    IGNORED = "ignored"
    DONE = "done"
    DELTA = "delta"
    MALFORMED = "malformed"


def classify_line(line: str) -> tuple[LineKind, str]:
    """Classify one provider line and extract its text delta, if any."""
    if not line.strip() or line.startswith(":"):
        return LineKind.IGNORED, ""

    payload = data_payload(line)
    if payload is None:
        return LineKind.IGNORED, ""
    if payload == DONE_MARKER:
        return LineKind.DONE, ""

    try:
        chunk = ChatCompletionChunk.model_validate_json(payload)
    except ValidationError:
        return LineKind.MALFORMED, ""
    return LineKind.DELTA, chunk.text


@dataclass
class _RelayContext:
    """Mutable state owned by one in-flight stream."""
    buffer: LineBuffer = field(default_factory=LineBuffer)
    deadline: float | None = None
    content_events: int = 0
    dropped_lines: int = 0
    saw_done: bool = False


class StreamReframer:
    """Relay a provider completion stream as info/content/error/done events.

    The info event is emitted before the upstream stream is touched, and the
    terminal sentinel is always the last event, on success and on failure.
    Each instance relays exactly one stream.
    """

    def __init__(
        self,
        repo_info: RepoInfo,
        upstream: AsyncIterable[bytes],
        timeout: float | None = None,
    ):
        self.repo_info = repo_info
        self._upstream = upstream
        self._timeout = timeout
        self._state = ReframerState.AWAITING_FIRST_BYTE
        self._ctx = _RelayContext()

    @property
    def state(self) -> ReframerState:
        return self._state

    @property
    def dropped_lines(self) -> int:
        return self._ctx.dropped_lines

    async def events(self) -> AsyncIterator[StreamEvent]:
        if self._state != ReframerState.AWAITING_FIRST_BYTE:
            msg = "StreamReframer instances relay a single stream"
            raise RuntimeError(msg)

        yield InfoEvent(repo_info=self.repo_info)
        self._state = ReframerState.RELAYING

        if self._timeout is not None:
            self._ctx.deadline = asyncio.get_running_loop().time() + self._timeout

        error: str | None = None
        try:
            async for event in self._relay():
                yield event
        except asyncio.TimeoutError:
            logger.error(f"Stream for {self.repo_info.name} exceeded {self._timeout}s")
            error = STREAM_TIMED_OUT
        except _READ_ERRORS as e:
            logger.error(f"Stream for {self.repo_info.name} interrupted: {e}")
            error = STREAM_INTERRUPTED
        except Exception as e:
            logger.exception(f"Unexpected failure relaying stream for {self.repo_info.name}: {e}")
            error = STREAM_INTERRUPTED

        if error is not None:
            yield ErrorEvent(error=error)

        self._state = ReframerState.TERMINATED
        self._log_summary()
        yield DoneEvent()

    async def frames(self) -> AsyncIterator[str]:
        """Encoded ``data: ...`` frames, ready for a text/event-stream body."""
        async for event in self.events():
            yield encode_event(event)

    async def _relay(self) -> AsyncIterator[ContentEvent]:
        iterator = aiter(self._upstream)
        while True:
            try:
                chunk = await self._next_chunk(iterator)
            except StopAsyncIteration:
                break
            for line in self._ctx.buffer.feed(chunk):
                event = self._handle_line(line)
                if self._ctx.saw_done:
                    return
                if event is not None:
                    yield event

        for line in self._ctx.buffer.close():
            event = self._handle_line(line)
            if self._ctx.saw_done:
                return
            if event is not None:
                yield event

        logger.warning("Upstream stream closed without a [DONE] marker")

    async def _next_chunk(self, iterator: AsyncIterator[bytes]) -> bytes:
        deadline = self._ctx.deadline
        if deadline is None:
            return await anext(iterator)
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise asyncio.TimeoutError
        return await asyncio.wait_for(anext(iterator), remaining)

    def _handle_line(self, line: str) -> ContentEvent | None:
        kind, text = classify_line(line)
        if kind == LineKind.DONE:
            self._ctx.saw_done = True
            return None
        if kind == LineKind.MALFORMED:
            # Deltas are expected to fit on one line; anything else is dropped
            self._ctx.dropped_lines += 1
            return None
        if kind == LineKind.DELTA and text:
            self._ctx.content_events += 1
            return ContentEvent(text=text)
        return None

    def _log_summary(self) -> None:
        if self._ctx.dropped_lines:
            logger.warning(f"Dropped {self._ctx.dropped_lines} malformed stream line(s)")
        logger.info(
            f"Stream for {self.repo_info.name} finished: {self._ctx.content_events} content event(s)"
        )
