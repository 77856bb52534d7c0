"""Content store contract and an in-memory implementation.

The session and the enrichment orchestrator depend only on ``ContentStore``.
Every method is async and may fail independently:

- save(content)       idempotent upsert by id; StorageFailure on I/O error
- fetch_all()         every stored record, order unspecified; StorageFailure
- update(content)     overwrite by id; NotFound if absent; StorageFailure
- delete(content_id)  NotFound if absent; StorageFailure

There is no multi-record transaction. Bulk operations loop over single calls.
"""

from typing import Protocol
from uuid import UUID

from stash_library.errors import NotFound
from stash_library.models.content import SavedContent
from stash_library.models.record import PersistedRecord
from stash_library.storage.mapper import to_domain, to_persisted


class ContentStore(Protocol):
    """Narrow async persistence contract."""

    async def save(self, content: SavedContent) -> None: ...

    async def fetch_all(self) -> list[SavedContent]: ...

    async def update(self, content: SavedContent) -> None: ...

    async def delete(self, content_id: UUID) -> None: ...


class InMemoryContentStore:
    """Dict-backed store holding persisted records.

    Records go through the mapper in both directions so this store behaves
    like a real backend with respect to encoding.
    """

    def __init__(self, records: list[PersistedRecord] | None = None):
        self._records: dict[UUID, PersistedRecord] = {r.id: r for r in records or []}

    async def save(self, content: SavedContent) -> None:
        self._records[content.id] = to_persisted(content)

    async def fetch_all(self) -> list[SavedContent]:
        return [to_domain(r) for r in self._records.values()]

    async def update(self, content: SavedContent) -> None:
        if content.id not in self._records:
            raise NotFound(content.id)
        self._records[content.id] = to_persisted(content)

    async def delete(self, content_id: UUID) -> None:
        if content_id not in self._records:
            raise NotFound(content_id)
        del self._records[content_id]

    def records(self) -> list[PersistedRecord]:
        """Return the raw stored records. Used for testing."""
        return list(self._records.values())
