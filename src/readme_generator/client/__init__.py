"""Client-side stream consumption and document editing."""

from readme_generator.client.api import ReadmeApiClient
from readme_generator.client.consumer import ConsumerState, FlushScheduler, StreamConsumer
from readme_generator.client.document import BulkItem, GenerationSession, ReadmeDocument, generate_many

__all__ = [
    "BulkItem",
    "ConsumerState",
    "FlushScheduler",
    "GenerationSession",
    "ReadmeApiClient",
    "ReadmeDocument",
    "StreamConsumer",
    "generate_many",
]
