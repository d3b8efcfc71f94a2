"""Runtime configuration for the README generator."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Explicit configuration injected into clients and the web app."""

    llm_provider: str = "openai"
    llm_api_key: str | None = None
    llm_base_url: str | None = None
    llm_model: str | None = None
    github_api_url: str = "https://api.github.com"
    github_token: str | None = None
    request_timeout: float = Field(default=60.0, gt=0)
    stream_timeout: float = Field(default=300.0, gt=0)
    max_input_tokens: int = Field(default=12000, gt=0)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Settings with every unset variable left at its default.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        simple = {
            "LLM_PROVIDER": "llm_provider",
            "LLM_API_KEY": "llm_api_key",
            "LLM_BASE_URL": "llm_base_url",
            "LLM_MODEL": "llm_model",
            "GITHUB_API_URL": "github_api_url",
            "GITHUB_TOKEN": "github_token",
            "REQUEST_TIMEOUT": "request_timeout",
            "STREAM_TIMEOUT": "stream_timeout",
            "MAX_INPUT_TOKENS": "max_input_tokens",
            "LOG_LEVEL": "log_level",
        }
        for var, field_name in simple.items():
            raw = env.get(var)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()

        origins = env.get("CORS_ORIGINS")
        if origins and origins.strip():
            values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

        return cls.model_validate(values)
