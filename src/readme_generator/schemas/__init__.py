"""Pydantic schemas for the README generator."""

from readme_generator.schemas.api import (
    ContentResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    ImproveRequest,
    RegenerateSectionRequest,
    ScoreRequest,
    ScoreResponse,
)
from readme_generator.schemas.completion import (
    ChatCompletion,
    ChatCompletionChunk,
    ChatMessage,
    ChatPrompt,
)
from readme_generator.schemas.readme import (
    PRESETS,
    GenerationOptions,
    ReadmeSection,
    ReadmeStyle,
    ScoreCategory,
    ScoreResult,
    Section,
    SectionToggles,
)
from readme_generator.schemas.repository import (
    FileEntry,
    GitHubContentItem,
    GitHubRepository,
    RepoInfo,
    RepoReference,
    RepositoryContext,
)
from readme_generator.schemas.stream import (
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    InfoEvent,
    StreamEvent,
    decode_payload,
    encode_event,
)

__all__ = [
    "PRESETS",
    "ChatCompletion",
    "ChatCompletionChunk",
    "ChatMessage",
    "ChatPrompt",
    "ContentEvent",
    "ContentResponse",
    "DoneEvent",
    "ErrorEvent",
    "ErrorResponse",
    "FileEntry",
    "GenerateRequest",
    "GenerateResponse",
    "GenerationOptions",
    "GitHubContentItem",
    "GitHubRepository",
    "HealthResponse",
    "ImproveRequest",
    "InfoEvent",
    "ReadmeSection",
    "ReadmeStyle",
    "RegenerateSectionRequest",
    "RepoInfo",
    "RepoReference",
    "RepositoryContext",
    "ScoreCategory",
    "ScoreRequest",
    "ScoreResponse",
    "ScoreResult",
    "Section",
    "SectionToggles",
    "StreamEvent",
    "decode_payload",
    "encode_event",
]
