"""Ollama local LLM provider."""

from __future__ import annotations

from readme_generator.llm.providers.openai import OpenAIClient


class OllamaClient(OpenAIClient):
    """Ollama through its OpenAI-compatible ``/v1`` endpoint; no key needed."""

    requires_api_key = False
    default_base_url = "http://localhost:11434/v1"

    @property
    def default_model(self) -> str:
        return self.settings.llm_model or "llama3.1"

    @property
    def provider_name(self) -> str:
        return "local"
