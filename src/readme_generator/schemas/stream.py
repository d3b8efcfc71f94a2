"""Line-delimited event protocol between the server and the browser."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from readme_generator.schemas.base import CamelModel
from readme_generator.schemas.repository import RepoInfo

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"


class InfoEvent(CamelModel):
    type: Literal["info"] = "info"
    repo_info: RepoInfo


class ContentEvent(CamelModel):
    type: Literal["content"] = "content"
    text: str


class ErrorEvent(CamelModel):
    type: Literal["error"] = "error"
    error: str


class DoneEvent(BaseModel):
    """Terminal sentinel, written as ``data: [DONE]`` on the wire."""
    type: Literal["done"] = "done"


StreamEvent = Union[InfoEvent, ContentEvent, ErrorEvent, DoneEvent]

_PayloadEvent = Annotated[Union[InfoEvent, ContentEvent, ErrorEvent], Field(discriminator="type")]
_payload_adapter: TypeAdapter[InfoEvent | ContentEvent | ErrorEvent] = TypeAdapter(_PayloadEvent)


def encode_event(event: StreamEvent) -> str:
    """Render one event as a ``data: ...`` frame followed by a blank line."""
    if isinstance(event, DoneEvent):
        return f"{DATA_PREFIX} {DONE_MARKER}\n\n"
    return f"{DATA_PREFIX} {event.model_dump_json(by_alias=True)}\n\n"


def data_payload(line: str) -> str | None:
    """Return the payload of a ``data:`` line, or None for any other line."""
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):].strip()


def decode_payload(payload: str) -> StreamEvent:
    """Parse a frame payload back into an event.

    Raises:
        pydantic.ValidationError: If the payload is not a known event.
    """
    if payload == DONE_MARKER:
        return DoneEvent()
    return _payload_adapter.validate_json(payload)
