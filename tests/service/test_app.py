"""Tests for the FastAPI service."""

from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from readme_generator.config import Settings
from readme_generator.core.github import GitHubClient
from readme_generator.core.readme_gen import ReadmeGenerator
from readme_generator.errors import QuotaExhausted, RateLimited
from readme_generator.llm.providers import OpenAIClient
from readme_generator.server import create_app
from tests._fixtures.fakes import FakeLLM, github_transport, sse_body


def _app(settings: Settings, llm: FakeLLM, **github_kwargs):
    def factory(s: Settings) -> ReadmeGenerator:
        github = GitHubClient(s, http_client=httpx.AsyncClient(transport=github_transport(**github_kwargs)))
        return ReadmeGenerator(s, github=github, llm_client=llm)

    return create_app(settings, generator_factory=factory)


def _payloads(body: str) -> list[str]:
    return [line[len("data: "):] for line in body.split("\n") if line.startswith("data: ")]


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM(content="# Hello-World", stream_chunks=[sse_body(["# Hello", "-World"])])


@pytest.fixture
def client(settings: Settings, llm: FakeLLM):
    with TestClient(_app(settings, llm)) as test_client:
        yield test_client


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_generate_streams_events(client: TestClient) -> None:
    response = client.post(
        "/generate",
        json={"repoUrl": "https://github.com/octocat/Hello-World", "stream": True},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"

    payloads = _payloads(response.text)
    info = json.loads(payloads[0])
    assert info["type"] == "info"
    assert info["repoInfo"]["name"] == "Hello-World"
    assert info["repoInfo"]["owner"] == "octocat"
    contents = [json.loads(p)["text"] for p in payloads[1:-1]]
    assert "".join(contents) == "# Hello-World"
    assert payloads[-1] == "[DONE]"
    assert payloads.count("[DONE]") == 1


def test_generate_streams_on_accept_header(client: TestClient) -> None:
    response = client.post(
        "/generate",
        json={"repoUrl": "octocat/Hello-World"},
        headers={"Accept": "text/event-stream"},
    )
    assert response.headers["content-type"].startswith("text/event-stream")


def test_generate_json_variant(client: TestClient) -> None:
    response = client.post("/generate", json={"repoUrl": "octocat/Hello-World", "stream": False})

    assert response.status_code == 200
    data = response.json()
    assert data["readme"] == "# Hello-World"
    assert data["repoInfo"]["stars"] == 42


def test_generate_honours_section_options(client: TestClient, llm: FakeLLM) -> None:
    client.post(
        "/generate",
        json={
            "repoUrl": "octocat/Hello-World",
            "stream": False,
            "options": {"style": "minimal", "sections": {"contributing": False, "techStack": False}},
        },
    )

    system = llm.calls[-1]["system"]
    assert "Contributing guidelines" not in system
    assert "Tech stack" not in system
    assert "Usage examples" in system


def test_missing_repo_url_is_400(client: TestClient) -> None:
    response = client.post("/generate", json={})
    assert response.status_code == 400
    assert "error" in response.json()


def test_blank_repo_url_is_400(client: TestClient) -> None:
    response = client.post("/generate", json={"repoUrl": "   "})
    assert response.status_code == 400
    assert response.json() == {"error": "Repository URL is required"}


def test_invalid_reference_is_400(client: TestClient) -> None:
    response = client.post("/generate", json={"repoUrl": "not a repo", "stream": True})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid GitHub URL format"}


def test_missing_repository_passes_status_through(settings: Settings, llm: FakeLLM) -> None:
    with TestClient(_app(settings, llm, repo_status=404)) as client:
        response = client.post("/generate", json={"repoUrl": "octocat/missing", "stream": True})

    assert response.status_code == 404
    assert response.json() == {"error": "Failed to fetch repository: 404"}
    assert llm.calls == []


@pytest.mark.parametrize("stream", [True, False])
@pytest.mark.parametrize(
    ("error", "status", "message"),
    [
        (RateLimited(), 429, "Rate limit exceeded. Please try again later."),
        (QuotaExhausted(), 402, "AI credits exhausted. Please add credits to continue."),
    ],
)
def test_provider_errors_map_to_status(
    settings: Settings, stream: bool, error: Exception, status: int, message: str
) -> None:
    with TestClient(_app(settings, FakeLLM(error=error))) as client:
        response = client.post("/generate", json={"repoUrl": "octocat/Hello-World", "stream": stream})

    assert response.status_code == status
    assert response.json() == {"error": message}


def test_missing_credential_is_500() -> None:
    settings = Settings(llm_api_key=None)

    def factory(s: Settings) -> ReadmeGenerator:
        github = GitHubClient(s, http_client=httpx.AsyncClient(transport=github_transport()))
        return ReadmeGenerator(s, github=github)

    with TestClient(create_app(settings, generator_factory=factory)) as client:
        response = client.post("/generate", json={"repoUrl": "octocat/Hello-World", "stream": True})

    assert response.status_code == 500
    assert response.json() == {"error": "LLM API key is not configured"}


def test_regenerate_section(client: TestClient, llm: FakeLLM) -> None:
    llm.content = "## Usage\nnew"

    response = client.post(
        "/regenerate-section",
        json={
            "section": "Usage",
            "sectionContent": "## Usage\nold",
            "repoInfo": {"name": "Hello-World", "owner": "octocat"},
            "instruction": "Add an example",
        },
    )

    assert response.status_code == 200
    assert response.json() == {"content": "## Usage\nnew"}


def test_score_and_improve(client: TestClient, llm: FakeLLM) -> None:
    llm.content = '{"score": 72, "suggestions": ["Add usage"], "breakdown": []}'
    score = client.post("/score", json={"readme": "# Title", "repoName": "Hello-World"})
    assert score.status_code == 200
    assert score.json()["score"] == 72

    llm.content = "# Better Title"
    improved = client.post("/improve", json={"readme": "# Title"})
    assert improved.json() == {"content": "# Better Title"}


def test_unparseable_score_is_500(client: TestClient, llm: FakeLLM) -> None:
    llm.content = "no json here"
    response = client.post("/score", json={"readme": "# Title"})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to parse README score"}


def test_cors_preflight(client: TestClient) -> None:
    response = client.options(
        "/generate",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in {"*", "http://localhost:5173"}


@pytest.mark.parametrize(
    ("path", "body"),
    [
        ("/generate", {"repoUrl": "octocat/Hello-World", "stream": True}),
        ("/regenerate-section", {"section": "Usage", "sectionContent": "## Usage", "repoInfo": {"name": "Hello-World"}}),
        ("/score", {"readme": "# Title"}),
        ("/improve", {"readme": "# Title"}),
    ],
)
def test_provider_rate_limit_is_429_on_every_route(settings: Settings, path: str, body: dict) -> None:
    def factory(s: Settings) -> ReadmeGenerator:
        github = GitHubClient(s, http_client=httpx.AsyncClient(transport=github_transport()))
        provider = OpenAIClient(
            s,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(429))),
        )
        return ReadmeGenerator(s, github=github, llm_client=provider)

    with TestClient(create_app(settings, generator_factory=factory)) as client:
        response = client.post(path, json=body)

    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded. Please try again later."}
