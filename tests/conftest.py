from __future__ import annotations

import httpx
import pytest

from readme_generator.config import Settings
from readme_generator.core.github import GitHubClient
from tests._fixtures.fakes import github_transport


@pytest.fixture
def settings() -> Settings:
    return Settings(llm_api_key="test-key", github_token=None, stream_timeout=5)


@pytest.fixture
def github(settings: Settings) -> GitHubClient:
    """GitHub client serving the octocat/Hello-World fixture."""
    return GitHubClient(settings, http_client=httpx.AsyncClient(transport=github_transport()))
