"""Tests for the SQLite-backed ContentStore."""

import sqlite3
from uuid import uuid4

import pytest

from stash_library.errors import NotFound, StorageFailure
from stash_library.storage.sqlite import SQLiteContentStore


@pytest.fixture
def sqlite_store(tmp_path) -> SQLiteContentStore:
    return SQLiteContentStore(tmp_path / "stash.sqlite")


async def test_fetch_all_on_fresh_database(sqlite_store: SQLiteContentStore):
    assert await sqlite_store.fetch_all() == []


async def test_save_and_fetch_round_trip(sqlite_store: SQLiteContentStore, make_content):
    content = make_content(
        url="https://maps.app.goo.gl/abc",
        metadata={"siteName": "Google Maps"},
        embedding_vector=[0.5, 0.25],
        summary="A place",
        thumbnail_url="https://example.com/t.png",
    )
    await sqlite_store.save(content)

    [stored] = await sqlite_store.fetch_all()
    assert stored == content


async def test_save_upserts(sqlite_store: SQLiteContentStore, make_content):
    content = make_content()
    await sqlite_store.save(content)
    await sqlite_store.save(content.model_copy(update={"title": "Second"}))

    stored = await sqlite_store.fetch_all()
    assert [c.title for c in stored] == ["Second"]


async def test_update(sqlite_store: SQLiteContentStore, make_content):
    content = make_content()
    await sqlite_store.save(content)
    await sqlite_store.update(content.model_copy(update={"summary": "Updated"}))

    [stored] = await sqlite_store.fetch_all()
    assert stored.summary == "Updated"


async def test_update_missing_raises_not_found(sqlite_store: SQLiteContentStore, make_content):
    with pytest.raises(NotFound):
        await sqlite_store.update(make_content())


async def test_delete(sqlite_store: SQLiteContentStore, make_content):
    keep, drop = make_content(), make_content(url="https://youtu.be/x")
    await sqlite_store.save(keep)
    await sqlite_store.save(drop)

    await sqlite_store.delete(drop.id)

    assert [c.id for c in await sqlite_store.fetch_all()] == [keep.id]


async def test_delete_missing_raises_not_found(sqlite_store: SQLiteContentStore):
    with pytest.raises(NotFound):
        await sqlite_store.delete(uuid4())


async def test_columns_match_record_layout(sqlite_store: SQLiteContentStore, make_content):
    await sqlite_store.save(make_content())
    conn = sqlite3.connect(sqlite_store.database_path)
    try:
        columns = [row[1] for row in conn.execute("PRAGMA table_info(contents)")]
    finally:
        conn.close()
    assert columns == [
        "id",
        "title",
        "url_string",
        "category_code",
        "created_at",
        "thumbnail_url_string",
        "summary",
        "metadata_json",
        "embedding_bytes",
    ]


async def test_sqlite_errors_become_storage_failure(tmp_path):
    # A directory cannot be opened as a database file
    store = SQLiteContentStore(tmp_path)
    with pytest.raises(StorageFailure):
        await store.fetch_all()


@pytest.mark.parametrize(
    "bad_id, bad_created_at",
    [("not-a-uuid", "2026-01-15T12:00:00+00:00"), (str(uuid4()), "yesterday")],
)
async def test_unreadable_row_is_skipped(
    sqlite_store: SQLiteContentStore, make_content, bad_id, bad_created_at
):
    good = make_content()
    await sqlite_store.save(good)
    conn = sqlite3.connect(sqlite_store.database_path)
    try:
        with conn:
            conn.execute(
                "INSERT INTO contents (id, title, url_string, category_code, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (bad_id, "broken", "https://example.com/broken", "web", bad_created_at),
            )
    finally:
        conn.close()

    assert await sqlite_store.fetch_all() == [good]
