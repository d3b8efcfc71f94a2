"""Repository schemas: GitHub payloads and the normalized generation context."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from readme_generator.schemas.base import CamelModel


class RepoReference(BaseModel):
    """Owner/repository pair resolved from user input."""
    owner: str
    repo: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


class GitHubOwner(BaseModel):
    login: str


class GitHubLicense(BaseModel):
    name: str | None = None


class GitHubRepository(BaseModel):
    """Subset of the GitHub ``/repos/{owner}/{repo}`` payload."""
    name: str
    owner: GitHubOwner
    description: str | None = None
    language: str | None = None
    topics: list[str] = Field(default_factory=list)
    license: GitHubLicense | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    html_url: str = ""
    default_branch: str = "main"

    @field_validator("topics", mode="before")
    @classmethod
    def _none_topics(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("stargazers_count", "forks_count", mode="before")
    @classmethod
    def _none_counts(cls, value: Any) -> Any:
        return 0 if value is None else value


class GitHubContentItem(BaseModel):
    """Entry of a ``/contents`` listing, or a single file with its body."""
    name: str
    type: str = "file"
    path: str = ""
    content: str | None = None
    encoding: str | None = None


class FileEntry(BaseModel):
    """First-level file tree entry."""
    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "file"  # file, dir, symlink, submodule

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


class RepoInfo(CamelModel):
    """Repository identity sent to the browser ahead of any README text."""
    name: str
    owner: str = ""
    description: str = ""
    language: str = ""
    stars: int = 0
    forks: int = 0
    url: str = ""


class RepositoryContext(BaseModel):
    """Everything the prompt needs to know about one repository."""
    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    description: str = "No description provided"
    language: str = "Unknown"
    languages: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    license: str = "Not specified"
    stars: int = 0
    forks: int = 0
    url: str = ""
    default_branch: str = "main"
    file_tree: tuple[FileEntry, ...] = ()
    dependencies: tuple[str, ...] = ()
    manifests: tuple[str, ...] = ()  # manifest filenames found at the top level

    def has_manifest(self, filename: str) -> bool:
        return filename in self.manifests

    @property
    def has_package_json(self) -> bool:
        return self.has_manifest("package.json")

    @property
    def has_requirements_txt(self) -> bool:
        return self.has_manifest("requirements.txt")

    @property
    def has_go_mod(self) -> bool:
        return self.has_manifest("go.mod")

    def repo_info(self) -> RepoInfo:
        return RepoInfo(
            name=self.name,
            owner=self.owner,
            description=self.description,
            language=self.language,
            stars=self.stars,
            forks=self.forks,
            url=self.url,
        )
