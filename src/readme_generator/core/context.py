"""Repository context builder: GitHub data normalized for prompting."""

from __future__ import annotations

import asyncio
import json
import re

from loguru import logger

from readme_generator.core.github import GitHubClient
from readme_generator.errors import InvalidReference
from readme_generator.schemas import (
    FileEntry,
    GitHubContentItem,
    GitHubRepository,
    RepoReference,
    RepositoryContext,
)

MANIFEST_FILES: tuple[str, ...] = (
    "package.json",
    "requirements.txt",
    "Cargo.toml",
    "go.mod",
    "pom.xml",
    "build.gradle",
    "Gemfile",
    "composer.json",
)

MAX_DEPENDENCIES = 20

_REFERENCE_PATTERNS = (
    re.compile(r"github\.com/([^/?#\s]+)/([^/?#\s]+)"),
    re.compile(r"^([^/?#\s]+)/([^/?#\s]+)$"),
)


def parse_repo_reference(reference: str) -> RepoReference:
    """Resolve a GitHub URL or ``owner/repo`` shorthand.

    Raises:
        InvalidReference: If the input matches neither form.
    """
    cleaned = reference.strip().rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]

    for pattern in _REFERENCE_PATTERNS:
        match = pattern.search(cleaned)
        if match:
            return RepoReference(owner=match.group(1), repo=match.group(2))

    raise InvalidReference()


def extract_dependencies(package_json: str, limit: int = MAX_DEPENDENCIES) -> list[str]:
    """Dependency then devDependency names from a package.json body."""
    try:
        pkg = json.loads(package_json)
    except ValueError:
        logger.warning("Failed to parse package.json")
        return []
    if not isinstance(pkg, dict):
        logger.warning("Failed to parse package.json")
        return []

    names: list[str] = []
    for key in ("dependencies", "devDependencies"):
        group = pkg.get(key)
        if isinstance(group, dict):
            names.extend(str(name) for name in group)
    return names[:limit]


class RepositoryContextBuilder:
    """Build a RepositoryContext for one generation request."""

    def __init__(self, github: GitHubClient):
        self.github = github

    async def build(self, reference: str | RepoReference) -> RepositoryContext:
        """Fetch and normalize everything known about a repository.

        Args:
            reference: GitHub URL, ``owner/repo`` shorthand, or a parsed reference

        Returns:
            Immutable context for prompt composition

        Raises:
            InvalidReference: If the reference cannot be parsed.
            UpstreamFetchError: If repository metadata cannot be fetched.
        """
        ref = reference if isinstance(reference, RepoReference) else parse_repo_reference(reference)
        logger.info(f"Processing repository: {ref.slug}")

        # Let all three settle before surfacing a metadata failure
        results = await asyncio.gather(
            self.github.fetch_repository(ref.owner, ref.repo),
            self.github.fetch_contents(ref.owner, ref.repo),
            self.github.fetch_languages(ref.owner, ref.repo),
            return_exceptions=True,
        )
        repo_data, contents, languages = results
        for result in results:
            if isinstance(result, BaseException):
                raise result

        manifests = await self._fetch_manifests(ref, contents)

        dependencies: list[str] = []
        if "package.json" in manifests:
            dependencies = extract_dependencies(manifests["package.json"])

        return self._assemble(repo_data, contents, languages, manifests, dependencies)

    async def _fetch_manifests(
        self,
        ref: RepoReference,
        contents: list[GitHubContentItem],
    ) -> dict[str, str]:
        """Fetch manifests one at a time, keeping only non-empty bodies."""
        found: dict[str, str] = {}
        for item in contents:
            if item.name not in MANIFEST_FILES or item.name in found:
                continue
            body = await self.github.fetch_file(ref.owner, ref.repo, item.name)
            if body:
                found[item.name] = body
        return found

    def _assemble(
        self,
        repo: GitHubRepository,
        contents: list[GitHubContentItem],
        languages: dict[str, int],
        manifests: dict[str, str],
        dependencies: list[str],
    ) -> RepositoryContext:
        return RepositoryContext(
            owner=repo.owner.login,
            name=repo.name,
            description=repo.description or "No description provided",
            language=repo.language or "Unknown",
            languages=tuple(languages),
            topics=tuple(repo.topics),
            license=(repo.license.name if repo.license and repo.license.name else "Not specified"),
            stars=repo.stargazers_count,
            forks=repo.forks_count,
            url=repo.html_url,
            default_branch=repo.default_branch,
            file_tree=tuple(FileEntry(name=item.name, type=item.type) for item in contents),
            dependencies=tuple(dependencies),
            manifests=tuple(name for name in MANIFEST_FILES if name in manifests),
        )
