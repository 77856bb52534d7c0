"""Page metadata fetching via httpx and trafilatura."""

import asyncio
import logging
from typing import Protocol
from urllib.parse import urlsplit

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from trafilatura import extract_metadata

from stash_library.errors import EnrichmentItemFailed
from stash_library.models.content import ContentMetadata

logger = logging.getLogger(__name__)

_USER_AGENT = "Mozilla/5.0 (compatible; StashLibrary/0.1)"


class MetadataFetcher(Protocol):
    """Fetches page metadata for one URL. Raises on failure."""

    async def fetch(self, url: str) -> ContentMetadata: ...


@retry(
    retry=retry_if_exception_type(httpx.TransportError),
    wait=wait_exponential_jitter(initial=0.5, max=5, jitter=1),
    stop=stop_after_attempt(3),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def download_page(url: str) -> str:
    """GET a page following redirects, retrying transient transport errors."""
    async with httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=5,
        timeout=httpx.Timeout(10.0),
        headers={"User-Agent": _USER_AGENT},
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.text


def build_metadata(url: str, doc: object) -> ContentMetadata:
    """Map a trafilatura Document to ContentMetadata.

    Title falls back to the URL host; description falls back to "".
    """
    title = getattr(doc, "title", None) or urlsplit(url).hostname or url
    description = getattr(doc, "description", None) or ""
    image_url = getattr(doc, "image", None) or None
    site_name = getattr(doc, "sitename", None) or None
    return ContentMetadata(
        title=title,
        description=description,
        image_url=image_url,
        site_name=site_name,
    )


class TrafilaturaMetadataFetcher:
    """Live MetadataFetcher: download with httpx, parse meta tags with trafilatura.

    The whole fetch runs inside one wall-clock timeout. Every failure is
    reported as EnrichmentItemFailed.
    """

    def __init__(self, timeout_seconds: float = 15.0):
        self.timeout_seconds = timeout_seconds

    async def fetch(self, url: str) -> ContentMetadata:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                html = await download_page(url)
                # trafilatura is sync, keep it off the event loop
                doc = await asyncio.to_thread(extract_metadata, html, default_url=url)
        except TimeoutError as exc:
            raise EnrichmentItemFailed(url, f"timed out after {self.timeout_seconds:.1f}s") from exc
        except httpx.HTTPError as exc:
            raise EnrichmentItemFailed(url, str(exc) or type(exc).__name__) from exc

        if doc is None:
            raise EnrichmentItemFailed(url, "no metadata found")
        return build_metadata(url, doc)
