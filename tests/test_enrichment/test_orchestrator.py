"""Tests for the metadata enrichment orchestrator."""

import asyncio

from stash_library.enrichment.orchestrator import (
    MetadataEnricher,
    merge_metadata,
    select_for_enrichment,
)
from stash_library.errors import EnrichmentItemFailed, StorageFailure
from stash_library.models.content import ContentMetadata


def _meta(**overrides) -> ContentMetadata:
    values = {
        "title": "Fetched title",
        "description": "Fetched description",
        "image_url": "https://example.com/image.png",
        "site_name": "Example",
    }
    values.update(overrides)
    return ContentMetadata(**values)


class FakeEmbedder:
    def __init__(self, vector=None, error: Exception | None = None):
        self.vector = vector or [0.5, 0.25]
        self.error = error
        self.texts: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.texts.append(text)
        if self.error:
            raise self.error
        return self.vector


# --- merge ---


def test_merge_overwrites_title_and_summary(make_content):
    merged = merge_metadata(make_content(), _meta())
    assert merged.title == "Fetched title"
    assert merged.summary == "Fetched description"
    assert merged.thumbnail_url == "https://example.com/image.png"
    assert merged.metadata == {"siteName": "Example"}


def test_merge_keeps_identity_fields(make_content):
    content = make_content()
    merged = merge_metadata(content, _meta())
    assert merged.id == content.id
    assert merged.source_url == content.source_url
    assert merged.category == content.category
    assert merged.created_at == content.created_at


def test_merge_without_image_or_site_name(make_content):
    merged = merge_metadata(make_content(), _meta(image_url=None, site_name=None))
    assert merged.thumbnail_url is None
    assert merged.metadata == {}


def test_merge_is_additive_for_metadata(make_content):
    content = make_content(metadata={"author": "Kim"})
    merged = merge_metadata(content, _meta())
    assert merged.metadata == {"author": "Kim", "siteName": "Example"}
    assert content.metadata == {"author": "Kim"}


def test_select_for_enrichment(make_content):
    sparse = make_content()
    done = [
        make_content(metadata={"siteName": "x"}),
        make_content(thumbnail_url="https://example.com/t.png"),
        make_content(summary="s"),
    ]
    assert select_for_enrichment([done[0], sparse, *done[1:]]) == [sparse]


# --- run ---


async def test_run_with_nothing_to_do_does_no_work(store, fetcher, make_content):
    enricher = MetadataEnricher(store, fetcher)
    report = await enricher.run([make_content(summary="done")])
    assert report.attempted == 0
    assert fetcher.calls == []


async def test_enriched_records_are_never_fetched(store, fetcher, make_content):
    sparse = make_content(url="https://example.com/a")
    enriched = make_content(url="https://example.com/b", thumbnail_url="https://example.com/t.png")
    await store.save(sparse)
    await store.save(enriched)

    await MetadataEnricher(store, fetcher).run([sparse, enriched])

    assert fetcher.calls == ["https://example.com/a"]


async def test_failure_of_one_item_is_isolated(store, fetcher, make_content):
    items = [make_content(url=f"https://example.com/{i}") for i in (1, 2, 3)]
    for item in items:
        await store.save(item)
    fetcher.responses["https://example.com/2"] = EnrichmentItemFailed(
        "https://example.com/2", "boom"
    )
    merged = []

    report = await MetadataEnricher(store, fetcher).run(items, on_merged=merged.append)

    assert sorted(report.succeeded) == sorted([items[0].id, items[2].id])
    assert report.failed == [items[1].id]
    assert sorted(c.id for c in merged) == sorted([items[0].id, items[2].id])

    stored = {c.id: c for c in await store.fetch_all()}
    assert stored[items[0].id].title == "Title for https://example.com/1"
    assert stored[items[2].id].summary == "A description"
    assert stored[items[1].id] == items[1]


async def test_write_back_failure_leaves_item_unmerged(fetcher, make_content):
    class FailingUpdateStore:
        async def update(self, content):
            raise StorageFailure("disk full")

    merged = []
    content = make_content()
    report = await MetadataEnricher(FailingUpdateStore(), fetcher).run(
        [content], on_merged=merged.append
    )

    assert report.failed == [content.id]
    assert merged == []


async def test_update_of_deleted_record_is_isolated(store, fetcher, make_content):
    # Never saved, so update raises NotFound
    report = await MetadataEnricher(store, fetcher).run([make_content()])
    assert len(report.failed) == 1


async def test_slow_item_does_not_block_others(store, make_content):
    release = asyncio.Event()
    merged = []

    class SlowFirstFetcher:
        async def fetch(self, url):
            if url.endswith("/slow"):
                await release.wait()
            return _meta(title=url)

    slow = make_content(url="https://example.com/slow")
    fast = make_content(url="https://example.com/fast")
    for item in (slow, fast):
        await store.save(item)

    enricher = MetadataEnricher(store, SlowFirstFetcher(), max_concurrency=2)
    task = asyncio.create_task(enricher.run([slow, fast], on_merged=merged.append))
    for _ in range(20):
        await asyncio.sleep(0)
        if merged:
            break

    assert [c.id for c in merged] == [fast.id]
    assert not task.done()

    release.set()
    report = await task
    assert report.attempted == 2


async def test_embedding_added_when_embedder_configured(store, fetcher, make_content):
    content = make_content()
    await store.save(content)
    embedder = FakeEmbedder(vector=[0.5, -0.5])

    await MetadataEnricher(store, fetcher, embedder=embedder).run([content])

    [stored] = await store.fetch_all()
    assert stored.embedding_vector == [0.5, -0.5]
    assert embedder.texts == [f"Title for {content.source_url}\nA description"]


async def test_embedding_failure_does_not_fail_item(store, fetcher, make_content):
    content = make_content()
    await store.save(content)
    embedder = FakeEmbedder(error=RuntimeError("model unavailable"))

    report = await MetadataEnricher(store, fetcher, embedder=embedder).run([content])

    assert report.succeeded == [content.id]
    [stored] = await store.fetch_all()
    assert stored.embedding_vector is None
    assert stored.summary == "A description"


async def test_embedding_is_kept_at_stored_precision(store, fetcher, make_content):
    content = make_content()
    await store.save(content)
    merged = []
    embedder = FakeEmbedder(vector=[0.1, 0.2])

    await MetadataEnricher(store, fetcher, embedder=embedder).run([content], on_merged=merged.append)

    [stored] = await store.fetch_all()
    assert merged[0].embedding_vector == stored.embedding_vector
    assert stored.embedding_vector == [0.10000000149011612, 0.20000000298023224]


async def test_failing_merge_callback_is_isolated(store, fetcher, make_content):
    items = [make_content(url=f"https://example.com/{i}", age_minutes=i) for i in (1, 2)]
    for item in items:
        await store.save(item)
    seen = []

    def _callback(content):
        seen.append(content.id)
        raise RuntimeError("listener crashed")

    report = await MetadataEnricher(store, fetcher).run(items, on_merged=_callback)

    assert sorted(report.succeeded) == sorted(c.id for c in items)
    assert sorted(seen) == sorted(c.id for c in items)
