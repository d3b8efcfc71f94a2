"""LLM module exports."""

from readme_generator.llm.client import CompletionStream, LLMClient, LLMResponse, get_llm_client
from readme_generator.llm.prompts import PromptTemplates

__all__ = ["CompletionStream", "LLMClient", "LLMResponse", "PromptTemplates", "get_llm_client"]
