"""Text embeddings with an ordered model fallback.

The service asks each backend in turn and keeps the first non-empty vector:
the multilingual model is configured first, an English-only model second.
A backend that has nothing for the text (unsupported language, permanent
API error) returns an empty list rather than raising.
"""

import logging
from typing import Protocol

from google import genai
from google.genai.errors import APIError, ClientError, ServerError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from stash_library.config import Settings
from stash_library.embedding.client import get_gemini_client

logger = logging.getLogger(__name__)


class EmbeddingBackend(Protocol):
    """One embedding model. Returns [] when it cannot embed the text."""

    async def embed(self, text: str) -> list[float]: ...


def _is_retryable(error: BaseException) -> bool:
    """Server errors (5xx) and rate limits (429) are worth retrying."""
    if isinstance(error, ServerError):
        return True
    if isinstance(error, ClientError) and error.code == 429:
        return True
    return False


class GeminiEmbeddingBackend:
    """Embedding backend backed by a Gemini embedding model."""

    def __init__(self, client: genai.Client, model: str):
        self.client = client
        self.model = model

    @retry(
        retry=retry_if_exception(_is_retryable),
        wait=wait_exponential_jitter(initial=1, max=20, jitter=2),
        stop=stop_after_attempt(3),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call(self, text: str) -> object:
        return await self.client.aio.models.embed_content(model=self.model, contents=text)

    async def embed(self, text: str) -> list[float]:
        try:
            response = await self._call(text)
        except APIError as exc:
            logger.warning("Embedding model %s failed: %s", self.model, exc)
            return []

        embeddings = getattr(response, "embeddings", None) or []
        if not embeddings:
            return []
        return list(embeddings[0].values or [])


class EmbeddingService:
    """Tries each backend in order; the first non-empty vector wins."""

    def __init__(self, backends: list[EmbeddingBackend]):
        self.backends = backends

    async def embed(self, text: str) -> list[float]:
        if not text.strip():
            return []
        for backend in self.backends:
            vector = await backend.embed(text)
            if vector:
                return vector
        logger.info("No embedding model produced a vector (%d chars)", len(text))
        return []


def build_embedding_service(settings: Settings) -> EmbeddingService | None:
    """Build the Gemini-backed service, or None when no API key is configured."""
    if not settings.gemini_api_key:
        return None

    client = get_gemini_client()
    return EmbeddingService(
        [
            GeminiEmbeddingBackend(client, settings.embedding_model),
            GeminiEmbeddingBackend(client, settings.embedding_fallback_model),
        ]
    )
