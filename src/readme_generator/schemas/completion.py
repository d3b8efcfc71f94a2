"""OpenAI-style chat completion payloads, validated at the provider boundary."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatPrompt(BaseModel):
    """System instructions plus one user content block."""
    system: str | None = None
    user: str

    def messages(self) -> list[ChatMessage]:
        messages = []
        if self.system:
            messages.append(ChatMessage(role="system", content=self.system))
        messages.append(ChatMessage(role="user", content=self.user))
        return messages


class CompletionMessage(BaseModel):
    content: str | None = None


class CompletionChoice(BaseModel):
    message: CompletionMessage = Field(default_factory=CompletionMessage)
    finish_reason: str | None = None


class CompletionUsage(BaseModel):
    total_tokens: int = 0


class ChatCompletion(BaseModel):
    """Non-streaming completion response."""
    choices: list[CompletionChoice] = Field(default_factory=list)
    usage: CompletionUsage | None = None

    @property
    def text(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


class ChunkDelta(BaseModel):
    content: str | None = None


class ChunkChoice(BaseModel):
    delta: ChunkDelta = Field(default_factory=ChunkDelta)
    finish_reason: str | None = None


class ChatCompletionChunk(BaseModel):
    """One ``data:`` payload of a streamed completion."""
    choices: list[ChunkChoice] = Field(default_factory=list)

    @property
    def text(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].delta.content or ""
