"""Client-side consumer for the README event stream."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, Callable
from enum import Enum

from loguru import logger
from pydantic import ValidationError

from readme_generator.errors import StreamInterrupted
from readme_generator.schemas import ContentEvent, DoneEvent, ErrorEvent, InfoEvent, RepoInfo
from readme_generator.schemas.stream import data_payload, decode_payload
from readme_generator.streaming import LineBuffer

DEFAULT_FLUSH_DELAY = 0.05


class ConsumerState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class FlushScheduler:
    """Coalesce publishes into at most one per ``delay`` window.

    Belongs to a single stream; ``cancel`` guarantees the pending callback
    never runs.
    """

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        if self._closed or self._handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Publish now, dropping any scheduled publish."""
        if self._closed:
            return
        self._clear()
        self._callback()

    def cancel(self) -> None:
        """Drop the pending publish and refuse any further ones."""
        self._clear()
        self._closed = True

    def _clear(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if not self._closed:
            self._callback()


class StreamConsumer:
    """Parse the generation stream into observable state.

    ``text`` is the published README snapshot. It only changes on a flush,
    so rapid deltas cost one update per flush window.
    """

    def __init__(
        self,
        on_info: Callable[[RepoInfo], None] | None = None,
        on_update: Callable[[str], None] | None = None,
        flush_delay: float = DEFAULT_FLUSH_DELAY,
    ):
        self.on_info = on_info
        self.on_update = on_update
        self.flush_delay = flush_delay
        self.state = ConsumerState.IDLE
        self.repo_info: RepoInfo | None = None
        self.error: str | None = None
        self._text = ""
        self._parts: list[str] = []
        self._received_content = False
        self._keep_previous = False
        self._scheduler: FlushScheduler | None = None

    @property
    def text(self) -> str:
        return self._text

    def _begin(self, keep_previous: bool) -> None:
        if self._scheduler is not None:
            self._scheduler.cancel()
        self.state = ConsumerState.STREAMING
        self.error = None
        self._parts = []
        self._received_content = False
        self._keep_previous = keep_previous
        if not keep_previous:
            self._text = ""
            self.repo_info = None
        self._scheduler = FlushScheduler(self.flush_delay, self._publish)

    def _publish(self) -> None:
        # Regenerating in place keeps the old text until new content exists
        if self._keep_previous and not self._received_content:
            return
        snapshot = "".join(self._parts)
        if snapshot == self._text:
            return
        self._text = snapshot
        if self.on_update is not None:
            self.on_update(snapshot)

    async def consume(self, chunks: AsyncIterable[bytes], keep_previous: bool = False) -> str:
        """Read the whole stream and return the final published text.

        Args:
            chunks: Response body as raw byte chunks
            keep_previous: Keep the current text visible until new content arrives

        Raises:
            StreamInterrupted: If the server sent an error event.
        """
        self._begin(keep_previous)
        scheduler = self._scheduler
        buffer = LineBuffer()
        try:
            finished = False
            async for chunk in chunks:
                for line in buffer.feed(chunk):
                    if self._handle_line(line):
                        finished = True
                        break
                if finished:
                    break
            if not finished:
                for line in buffer.close():
                    if self._handle_line(line):
                        break
        except asyncio.CancelledError:
            scheduler.cancel()
            self.state = ConsumerState.CANCELLED
            raise
        except StreamInterrupted as e:
            scheduler.flush()
            scheduler.cancel()
            self.state = ConsumerState.FAILED
            self.error = e.message
            raise
        except Exception as e:
            scheduler.flush()
            scheduler.cancel()
            self.state = ConsumerState.FAILED
            self.error = str(e)
            raise

        scheduler.flush()
        scheduler.cancel()
        self.state = ConsumerState.SUCCEEDED
        return self._text

    def abandon(self) -> None:
        """Stop publishing; a scheduled flush will not fire."""
        if self._scheduler is not None:
            self._scheduler.cancel()
        if self.state == ConsumerState.STREAMING:
            self.state = ConsumerState.CANCELLED

    def _handle_line(self, line: str) -> bool:
        """Apply one protocol line; True once the terminal sentinel is seen."""
        payload = data_payload(line)
        if payload is None:
            return False
        try:
            event = decode_payload(payload)
        except ValidationError:
            logger.debug(f"Ignoring unparseable stream line: {payload[:80]}")
            return False

        if isinstance(event, DoneEvent):
            return True
        if isinstance(event, InfoEvent):
            self.repo_info = event.repo_info
            if self.on_info is not None:
                self.on_info(event.repo_info)
        elif isinstance(event, ContentEvent):
            self._parts.append(event.text)
            self._received_content = True
            self._scheduler.schedule()
        elif isinstance(event, ErrorEvent):
            raise StreamInterrupted(event.error)
        return False
