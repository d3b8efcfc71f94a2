"""LLM provider implementations."""

from readme_generator.llm.providers.local import OllamaClient
from readme_generator.llm.providers.openai import OpenAIClient

__all__ = ["OpenAIClient", "OllamaClient"]
