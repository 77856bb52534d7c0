"""Bidirectional mapping between SavedContent and its persisted record.

Both directions are total: bad stored data degrades to safe defaults instead
of raising, so one corrupt row never breaks a library load.

Encodings (shared with the quick-save writer, must stay bit-exact):
- metadata: compact JSON object string, keys sorted; empty map -> None
- embedding: float32 values in native byte order, back to back, no length
  prefix; empty or missing vector -> None
- URLs: their string form; missing optional URL -> None. A stored URL that
  fails ``is_valid_url`` (the same rule ``new_content`` enforces) decodes to
  ``INVALID_URL``
"""

import json
import logging
from array import array

from stash_library.models.content import ContentCategory, SavedContent, is_valid_url
from stash_library.models.record import PersistedRecord

logger = logging.getLogger(__name__)

# Stands in for a stored URL string that can no longer be parsed
INVALID_URL = "https://invalid.url"

_FLOAT32_TYPECODE = "f"


def encode_metadata(metadata: dict[str, str]) -> str | None:
    """Encode metadata as a compact JSON object. Empty metadata has no value."""
    if not metadata:
        return None
    return json.dumps(metadata, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def decode_metadata(metadata_json: str | None) -> dict[str, str]:
    """Decode stored metadata JSON. Missing or malformed values decode to {}."""
    if not metadata_json:
        return {}
    try:
        decoded = json.loads(metadata_json)
    except ValueError:
        logger.warning("Discarding malformed metadata JSON")
        return {}
    if not isinstance(decoded, dict):
        return {}
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in decoded.items()):
        return {}
    return decoded


def encode_embedding(vector: list[float] | None) -> bytes | None:
    """Pack an embedding vector as raw native-endian float32 bytes."""
    if not vector:
        return None
    return array(_FLOAT32_TYPECODE, vector).tobytes()


def decode_embedding(data: bytes | None) -> list[float] | None:
    """Unpack raw float32 bytes. Empty or truncated buffers decode to None."""
    if not data:
        return None
    values = array(_FLOAT32_TYPECODE)
    try:
        values.frombytes(data)
    except ValueError:
        logger.warning("Discarding embedding buffer of %d bytes (not float32 aligned)", len(data))
        return None
    return values.tolist()


def to_domain(record: PersistedRecord) -> SavedContent:
    """Decode a persisted record into a SavedContent."""
    url = record.url_string if is_valid_url(record.url_string) else INVALID_URL
    try:
        category = ContentCategory(record.category_code)
    except ValueError:
        category = ContentCategory.WEB
    thumbnail = (
        record.thumbnail_url_string if is_valid_url(record.thumbnail_url_string) else None
    )

    return SavedContent(
        id=record.id,
        title=record.title,
        source_url=url,
        category=category,
        created_at=record.created_at,
        thumbnail_url=thumbnail,
        summary=record.summary,
        metadata=decode_metadata(record.metadata_json),
        embedding_vector=decode_embedding(record.embedding_bytes),
    )


def to_persisted(content: SavedContent) -> PersistedRecord:
    """Encode a SavedContent into its persisted record layout."""
    return PersistedRecord(
        id=content.id,
        title=content.title,
        url_string=content.source_url,
        category_code=content.category.value,
        created_at=content.created_at,
        thumbnail_url_string=content.thumbnail_url,
        summary=content.summary,
        metadata_json=encode_metadata(content.metadata),
        embedding_bytes=encode_embedding(content.embedding_vector),
    )
