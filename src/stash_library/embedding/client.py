"""Gemini client singleton for embedding calls.

Creates a cached genai.Client configured with the API key from application
settings and a 30-second HTTP timeout. Retries are handled by tenacity in
``embedding.service``, not by the SDK.
"""

from google import genai
from google.genai import types

from stash_library.config import get_settings

_client: genai.Client | None = None


def get_gemini_client() -> genai.Client:
    """Return a cached Gemini client instance.

    Creates the client on first call using gemini_api_key from settings.
    Subsequent calls return the cached instance.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=30_000),
        )
    return _client


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None
