"""Request and response bodies of the HTTP surface."""

from __future__ import annotations

from pydantic import Field, field_validator

from readme_generator.schemas.base import CamelModel
from readme_generator.schemas.readme import GenerationOptions, ScoreCategory
from readme_generator.schemas.repository import RepoInfo


def _required_text(value: str, name: str) -> str:
    if not value or not value.strip():
        msg = f"{name} is required"
        raise ValueError(msg)
    return value


class GenerateRequest(CamelModel):
    repo_url: str
    options: GenerationOptions = Field(default_factory=GenerationOptions)
    stream: bool | None = None

    @field_validator("repo_url")
    @classmethod
    def _repo_url(cls, value: str) -> str:
        return _required_text(value, "Repository URL")


class GenerateResponse(CamelModel):
    readme: str
    repo_info: RepoInfo


class RegenerateSectionRequest(CamelModel):
    section: str
    section_content: str = ""
    repo_info: RepoInfo
    instruction: str | None = None

    @field_validator("section")
    @classmethod
    def _section(cls, value: str) -> str:
        return _required_text(value, "Section")


class ContentResponse(CamelModel):
    content: str


class ScoreRequest(CamelModel):
    readme: str
    repo_name: str | None = None

    @field_validator("readme")
    @classmethod
    def _readme(cls, value: str) -> str:
        return _required_text(value, "README content")


class ScoreResponse(CamelModel):
    score: float
    suggestions: list[str] = Field(default_factory=list)
    breakdown: list[ScoreCategory] = Field(default_factory=list)


class ImproveRequest(CamelModel):
    readme: str

    @field_validator("readme")
    @classmethod
    def _readme(cls, value: str) -> str:
        return _required_text(value, "README content")


class ErrorResponse(CamelModel):
    error: str


class HealthResponse(CamelModel):
    status: str
