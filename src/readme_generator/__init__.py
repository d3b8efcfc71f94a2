"""Generate README files for GitHub repositories with a streaming LLM backend."""

__version__ = "0.1.0"
