"""Content persistence: record mapping, store contract and backends."""

from stash_library.storage.gateway import ContentStore, InMemoryContentStore
from stash_library.storage.mapper import (
    INVALID_URL,
    decode_embedding,
    decode_metadata,
    encode_embedding,
    encode_metadata,
    to_domain,
    to_persisted,
)
from stash_library.storage.sqlite import SQLiteContentStore

__all__ = [
    "ContentStore",
    "InMemoryContentStore",
    "SQLiteContentStore",
    "INVALID_URL",
    "decode_embedding",
    "decode_metadata",
    "encode_embedding",
    "encode_metadata",
    "to_domain",
    "to_persisted",
]
