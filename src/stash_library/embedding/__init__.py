"""Text embeddings for saved content.

Public API:
    EmbeddingService(backends).embed(text) -> list[float]
        First non-empty vector from an ordered list of models, [] if none.
    build_embedding_service(settings) -> EmbeddingService | None
"""

from stash_library.embedding.client import get_gemini_client, reset_client
from stash_library.embedding.service import (
    EmbeddingBackend,
    EmbeddingService,
    GeminiEmbeddingBackend,
    build_embedding_service,
)

__all__ = [
    "EmbeddingBackend",
    "EmbeddingService",
    "GeminiEmbeddingBackend",
    "build_embedding_service",
    "get_gemini_client",
    "reset_client",
]
