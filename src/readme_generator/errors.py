"""Error taxonomy shared by the server, the LLM gateway and the client."""

from __future__ import annotations


class ReadmeGeneratorError(Exception):
    """Base error carrying an HTTP status and a user-facing message."""

    status_code: int = 500
    default_message = "Failed to generate README"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidReference(ReadmeGeneratorError):
    """The repository locator matched neither a URL nor owner/repo."""

    status_code = 400
    default_message = "Invalid GitHub URL format"


class UpstreamFetchError(ReadmeGeneratorError):
    """The hosting provider could not return repository metadata."""

    status_code = 502

    def __init__(self, upstream_status: int | None = None, message: str | None = None):
        self.upstream_status = upstream_status
        if message is None:
            if upstream_status is None:
                message = "Failed to fetch repository"
            else:
                message = f"Failed to fetch repository: {upstream_status}"
        # 4xx/5xx from the provider pass through, anything else is a gateway error
        status = upstream_status if upstream_status and 400 <= upstream_status < 600 else None
        super().__init__(message, status)


class AuthConfigurationError(ReadmeGeneratorError):
    """The LLM provider credential is missing from the configuration."""

    status_code = 500
    default_message = "LLM API key is not configured"


class RateLimited(ReadmeGeneratorError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class QuotaExhausted(ReadmeGeneratorError):
    status_code = 402
    default_message = "AI credits exhausted. Please add credits to continue."


class GenerationFailed(ReadmeGeneratorError):
    """Opaque failure from the model provider."""

    status_code = 500

    def __init__(self, upstream_status: int | None = None, message: str | None = None):
        self.upstream_status = upstream_status
        if message is None:
            if upstream_status is None:
                message = "AI generation failed"
            else:
                message = f"AI generation failed: {upstream_status}"
        super().__init__(message)


class StreamInterrupted(ReadmeGeneratorError):
    """The stream ended with an error event; partial content is kept."""

    status_code = 500
    default_message = "Stream interrupted"


class RegenerationInProgress(ReadmeGeneratorError):
    status_code = 409
    default_message = "A section is already being regenerated"


def error_for_status(status_code: int, message: str | None = None) -> ReadmeGeneratorError:
    """Map an HTTP status returned by a generation endpoint to an error."""
    if status_code == 429:
        return RateLimited(message)
    if status_code == 402:
        return QuotaExhausted(message)
    if status_code == 400 and message == InvalidReference.default_message:
        return InvalidReference(message)
    return ReadmeGeneratorError(message, status_code)
