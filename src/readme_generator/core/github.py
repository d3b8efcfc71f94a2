"""Read-only GitHub REST client."""

from __future__ import annotations

import base64
import binascii

import httpx
from loguru import logger
from pydantic import ValidationError

from readme_generator.config import Settings
from readme_generator.errors import UpstreamFetchError
from readme_generator.schemas import GitHubContentItem, GitHubRepository


class GitHubClient:
    """Fetch repository metadata, listings, file bodies and languages.

    Only the metadata fetch is allowed to fail the request; every other call
    degrades to an empty result.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        self.settings = settings
        self.base_url = settings.github_api_url.rstrip("/")
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "README-Generator",
        }
        if self.settings.github_token:
            headers["Authorization"] = f"Bearer {self.settings.github_token}"
        return headers

    async def _get(self, path: str) -> httpx.Response:
        client = self._get_client()
        return await client.get(f"{self.base_url}{path}", headers=self._headers())

    async def fetch_repository(self, owner: str, repo: str) -> GitHubRepository:
        """Fetch repository metadata.

        Raises:
            UpstreamFetchError: On a non-success status, a transport failure,
                or a payload that does not look like a repository.
        """
        logger.info(f"Fetching repo data for {owner}/{repo}")
        try:
            response = await self._get(f"/repos/{owner}/{repo}")
        except httpx.HTTPError as e:
            logger.error(f"GitHub request failed for {owner}/{repo}: {e}")
            raise UpstreamFetchError() from e

        if response.status_code != 200:
            logger.error(f"Failed to fetch repository {owner}/{repo}: {response.status_code}")
            raise UpstreamFetchError(response.status_code)

        try:
            return GitHubRepository.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Unexpected repository payload for {owner}/{repo}: {e}")
            raise UpstreamFetchError(message="Unexpected repository payload from GitHub") from e

    async def fetch_contents(self, owner: str, repo: str, path: str = "") -> list[GitHubContentItem]:
        """List a directory; an empty list on any failure."""
        logger.info(f"Fetching repo contents for {owner}/{repo}/{path}")
        try:
            response = await self._get(f"/repos/{owner}/{repo}/contents/{path}")
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch contents: {e}")
            return []

        if response.status_code != 200:
            logger.warning(f"Failed to fetch contents: {response.status_code}")
            return []

        try:
            data = response.json()
            items = data if isinstance(data, list) else [data]
            return [GitHubContentItem.model_validate(item) for item in items]
        except (ValueError, ValidationError) as e:
            logger.warning(f"Unexpected contents payload: {e}")
            return []

    async def fetch_file(self, owner: str, repo: str, path: str) -> str:
        """Return a decoded file body, or an empty string."""
        logger.info(f"Fetching file content for {path}")
        try:
            response = await self._get(f"/repos/{owner}/{repo}/contents/{path}")
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch {path}: {e}")
            return ""

        if response.status_code != 200:
            return ""

        try:
            item = GitHubContentItem.model_validate_json(response.content)
        except ValidationError:
            return ""
        if not item.content:
            return ""
        try:
            return base64.b64decode(item.content).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as e:
            logger.warning(f"Could not decode {path}: {e}")
            return ""

    async def fetch_languages(self, owner: str, repo: str) -> dict[str, int]:
        """Per-language byte counts, empty on failure."""
        logger.info(f"Fetching languages for {owner}/{repo}")
        try:
            response = await self._get(f"/repos/{owner}/{repo}/languages")
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch languages: {e}")
            return {}

        if response.status_code != 200:
            return {}

        try:
            data = response.json()
        except ValueError:
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, int)}

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
