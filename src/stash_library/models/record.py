"""Persisted record layout shared by every writer of the content store.

Field names and encodings are the interchange contract with the
out-of-process quick-save writer; see ``stash_library.storage.mapper``.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class PersistedRecord(BaseModel):
    """One stored row. Optional fields hold None for "no value"."""

    id: UUID
    title: str
    url_string: str
    category_code: str
    created_at: datetime
    thumbnail_url_string: str | None = None
    summary: str | None = None
    metadata_json: str | None = None  # Compact JSON object, never "{}"
    embedding_bytes: bytes | None = None  # Native-endian float32, no length prefix
