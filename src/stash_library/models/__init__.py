"""Data models and enums for the Stash library."""

from stash_library.models.content import (
    ContentCategory,
    ContentMetadata,
    SavedContent,
    is_valid_url,
    new_content,
    normalize_url,
)
from stash_library.models.record import PersistedRecord

__all__ = [
    "ContentCategory",
    "ContentMetadata",
    "SavedContent",
    "PersistedRecord",
    "is_valid_url",
    "new_content",
    "normalize_url",
]
