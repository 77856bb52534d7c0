"""SQLite-backed content store.

One ``contents`` table whose columns are exactly the persisted record
fields. All sqlite3 calls are synchronous and run in ``asyncio.to_thread``
so they never block the event loop. The sync helpers (``connect``,
``ensure_schema``, ``insert_record``) are shared with the quick-save writer,
which writes to the same file from outside the main process.
"""

import asyncio
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from uuid import UUID

from stash_library.errors import NotFound, StorageFailure
from stash_library.models.content import SavedContent
from stash_library.models.record import PersistedRecord
from stash_library.storage.mapper import to_domain, to_persisted

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id",
    "title",
    "url_string",
    "category_code",
    "created_at",
    "thumbnail_url_string",
    "summary",
    "metadata_json",
    "embedding_bytes",
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS contents (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    url_string TEXT NOT NULL,
    category_code TEXT NOT NULL,
    created_at TEXT NOT NULL,
    thumbnail_url_string TEXT,
    summary TEXT,
    metadata_json TEXT,
    embedding_bytes BLOB
)
"""

_UPSERT = (
    f"INSERT OR REPLACE INTO contents ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)})"
)
_UPDATE = (
    "UPDATE contents SET "
    + ", ".join(f"{c} = ?" for c in _COLUMNS[1:])
    + " WHERE id = ?"
)
_SELECT_ALL = f"SELECT {', '.join(_COLUMNS)} FROM contents"
_DELETE = "DELETE FROM contents WHERE id = ?"


@contextmanager
def connect(database_path: str | Path) -> Iterator[sqlite3.Connection]:
    """Open a connection, commit on success, always close."""
    conn = sqlite3.connect(database_path)
    try:
        with conn:
            yield conn
    finally:
        conn.close()


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create the contents table if it does not exist."""
    conn.execute(_SCHEMA)


def _row_values(record: PersistedRecord) -> tuple:
    return (
        str(record.id),
        record.title,
        record.url_string,
        record.category_code,
        record.created_at.isoformat(),
        record.thumbnail_url_string,
        record.summary,
        record.metadata_json,
        record.embedding_bytes,
    )


def _record_from_row(row: tuple) -> PersistedRecord:
    values = dict(zip(_COLUMNS, row))
    values["id"] = UUID(values["id"])
    values["created_at"] = datetime.fromisoformat(values["created_at"])
    return PersistedRecord(**values)


def insert_record(conn: sqlite3.Connection, record: PersistedRecord) -> None:
    """Insert or replace one record by id."""
    conn.execute(_UPSERT, _row_values(record))


class SQLiteContentStore:
    """ContentStore implementation on a single SQLite file."""

    def __init__(self, database_path: str | Path):
        self.database_path = str(database_path)
        self._initialized = False

    def _init_schema(self) -> None:
        if self._initialized:
            return
        with connect(self.database_path) as conn:
            ensure_schema(conn)
        self._initialized = True

    def _save_sync(self, record: PersistedRecord) -> None:
        self._init_schema()
        with connect(self.database_path) as conn:
            insert_record(conn, record)

    def _fetch_all_sync(self) -> list[PersistedRecord]:
        self._init_schema()
        with connect(self.database_path) as conn:
            rows = conn.execute(_SELECT_ALL).fetchall()
        records = []
        for row in rows:
            try:
                records.append(_record_from_row(row))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable contents row %r: %s", row[0], exc)
        return records

    def _update_sync(self, record: PersistedRecord) -> int:
        self._init_schema()
        values = _row_values(record)
        with connect(self.database_path) as conn:
            return conn.execute(_UPDATE, (*values[1:], values[0])).rowcount

    def _delete_sync(self, content_id: UUID) -> int:
        self._init_schema()
        with connect(self.database_path) as conn:
            return conn.execute(_DELETE, (str(content_id),)).rowcount

    async def _run(self, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except (sqlite3.Error, ValueError) as exc:
            logger.error("SQLite operation %s failed: %s", func.__name__, exc)
            raise StorageFailure(str(exc)) from exc

    async def save(self, content: SavedContent) -> None:
        await self._run(self._save_sync, to_persisted(content))

    async def fetch_all(self) -> list[SavedContent]:
        records = await self._run(self._fetch_all_sync)
        return [to_domain(r) for r in records]

    async def update(self, content: SavedContent) -> None:
        updated = await self._run(self._update_sync, to_persisted(content))
        if updated == 0:
            raise NotFound(content.id)

    async def delete(self, content_id: UUID) -> None:
        deleted = await self._run(self._delete_sync, content_id)
        if deleted == 0:
            raise NotFound(content_id)
