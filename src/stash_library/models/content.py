"""Saved content model, content category enum, and fetched page metadata."""

import re
from array import array
from datetime import datetime, timezone
from enum import Enum
from urllib.parse import quote, urlsplit
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

_WHITESPACE = re.compile(r"\s")


def is_valid_url(value: str | None) -> bool:
    """True for a non-empty URL string with no whitespace that ``urlsplit`` accepts."""
    if not value or _WHITESPACE.search(value):
        return False
    try:
        urlsplit(value)
    except ValueError:
        return False
    return True


def normalize_url(url: str) -> str:
    """Strip surrounding whitespace and percent-encode any left inside the URL."""
    return _WHITESPACE.sub(lambda m: quote(m.group()), url.strip())


def as_float32(values: list[float]) -> list[float]:
    """Round a vector to float32 precision, the precision it is stored at."""
    return array("f", values).tolist()


class ContentCategory(str, Enum):
    """Closed set of content categories, assigned once at save time.

    Values are the category codes written to storage and shared with the
    quick-save writer, so they must never change.
    """

    WEB = "web"
    VIDEO = "youtube"
    SOCIAL_POST = "instagram"
    MAP_PLACE_A = "naverMap"  # Naver Map
    MAP_PLACE_B = "googleMap"  # Google Maps
    SHOPPING_LISTING = "coupang"


class SavedContent(BaseModel):
    """A saved link. Identity, source URL, category and creation time are frozen."""

    id: UUID = Field(frozen=True)
    title: str
    source_url: str = Field(frozen=True)
    category: ContentCategory = Field(frozen=True)
    created_at: datetime = Field(frozen=True)
    thumbnail_url: str | None = None  # Set by enrichment only
    summary: str | None = None  # Set by enrichment only
    metadata: dict[str, str] = Field(default_factory=dict)
    embedding_vector: list[float] | None = None

    @field_validator("embedding_vector")
    @classmethod
    def _round_to_float32(cls, value: list[float] | None) -> list[float] | None:
        return None if value is None else as_float32(value)

    @property
    def needs_enrichment(self) -> bool:
        """True while nothing has been merged in from a metadata fetch."""
        return not self.metadata and self.thumbnail_url is None and self.summary is None


class ContentMetadata(BaseModel):
    """Page metadata returned by a fetch. Consumed by the enrichment merge, never stored."""

    title: str
    description: str
    image_url: str | None = None
    site_name: str | None = None


def new_content(url: str, now: datetime | None = None) -> SavedContent:
    """Create a fresh SavedContent for a URL being saved.

    The URL is normalized first (see ``normalize_url``) so that the stored
    string always decodes back unchanged. Raises ValueError when nothing
    usable is left. The category is computed here and only here. The title
    starts as the URL host (or the URL itself when it has none) until
    enrichment replaces it.
    """
    # Lazy import: classification.router imports ContentCategory from this module
    from stash_library.classification.router import classify

    url = normalize_url(url)
    if not is_valid_url(url):
        raise ValueError(f"Not a storable URL: {url!r}")
    host = urlsplit(url).hostname

    return SavedContent(
        id=uuid4(),
        title=host or url,
        source_url=url,
        category=classify(url),
        created_at=now or datetime.now(timezone.utc),
    )
