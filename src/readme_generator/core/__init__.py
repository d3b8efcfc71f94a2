"""Core module exports."""

from readme_generator.core.context import RepositoryContextBuilder, extract_dependencies, parse_repo_reference
from readme_generator.core.github import GitHubClient
from readme_generator.core.readme_gen import GenerationResult, ReadmeGenerator, ReadmeStream
from readme_generator.core.sections import find_section, replace_section, segment_sections

__all__ = [
    "GenerationResult",
    "GitHubClient",
    "ReadmeGenerator",
    "ReadmeStream",
    "RepositoryContextBuilder",
    "extract_dependencies",
    "find_section",
    "parse_repo_reference",
    "replace_section",
    "segment_sections",
]
