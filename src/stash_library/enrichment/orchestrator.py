"""Metadata enrichment for sparse saved content.

Fetches page metadata for every record that still needs it, merges it in,
writes the record back, and reports each merged record to the caller.
Items run concurrently (bounded by a semaphore) and independently: one
failed fetch or write-back leaves that record untouched and never aborts
the rest of the batch.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import UUID

from stash_library.embedding.service import EmbeddingService
from stash_library.enrichment.fetcher import MetadataFetcher
from stash_library.models.content import ContentMetadata, SavedContent, as_float32
from stash_library.storage.gateway import ContentStore

logger = logging.getLogger(__name__)

SITE_NAME_KEY = "siteName"


@dataclass
class EnrichmentReport:
    """Outcome of one enrichment batch."""

    succeeded: list[UUID] = field(default_factory=list)
    failed: list[UUID] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.succeeded) + len(self.failed)


def select_for_enrichment(contents: list[SavedContent]) -> list[SavedContent]:
    """Keep only the records that still need enrichment, in input order."""
    return [c for c in contents if c.needs_enrichment]


def merge_metadata(content: SavedContent, meta: ContentMetadata) -> SavedContent:
    """Return a copy of content with fetched metadata merged in.

    Title and summary are overwritten, the thumbnail is set only when the
    fetch found an image, and the metadata map gains ``siteName`` without
    losing existing keys.
    """
    metadata = dict(content.metadata)
    if meta.site_name:
        metadata[SITE_NAME_KEY] = meta.site_name

    update: dict = {
        "title": meta.title,
        "summary": meta.description,
        "metadata": metadata,
    }
    if meta.image_url:
        update["thumbnail_url"] = meta.image_url
    return content.model_copy(update=update)


class MetadataEnricher:
    """Runs enrichment batches against a store and a metadata fetcher."""

    def __init__(
        self,
        store: ContentStore,
        fetcher: MetadataFetcher,
        embedder: EmbeddingService | None = None,
        max_concurrency: int = 4,
    ):
        self.store = store
        self.fetcher = fetcher
        self.embedder = embedder
        self.max_concurrency = max(1, max_concurrency)

    async def _embed(self, content: SavedContent) -> SavedContent:
        text = "\n".join(part for part in (content.title, content.summary) if part)
        try:
            vector = await self.embedder.embed(text)
        except Exception as exc:
            logger.warning("Embedding failed for %s: %s", content.source_url, exc)
            return content
        if not vector:
            return content
        # model_copy skips validation, so round here like the model validator does
        return content.model_copy(update={"embedding_vector": as_float32(vector)})

    async def enrich_one(self, content: SavedContent) -> SavedContent:
        """Fetch, merge and write back one record. Raises on fetch or write failure."""
        meta = await self.fetcher.fetch(content.source_url)
        updated = merge_metadata(content, meta)
        if self.embedder is not None:
            updated = await self._embed(updated)
        await self.store.update(updated)
        return updated

    async def run(
        self,
        items: list[SavedContent],
        on_merged: Callable[[SavedContent], None] | None = None,
    ) -> EnrichmentReport:
        """Enrich every item that needs it and return once all have been attempted.

        ``on_merged`` is called with each successfully written record as soon
        as it is ready. Records that no longer need enrichment are skipped.
        """
        report = EnrichmentReport()
        pending = select_for_enrichment(items)
        if not pending:
            return report

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _attempt(content: SavedContent) -> None:
            async with semaphore:
                try:
                    updated = await self.enrich_one(content)
                except Exception as exc:
                    logger.warning(
                        "Enrichment skipped for %s (%s): %s",
                        content.source_url,
                        content.id,
                        exc,
                        exc_info=True,
                    )
                    report.failed.append(content.id)
                    return
            report.succeeded.append(updated.id)
            if on_merged is None:
                return
            try:
                on_merged(updated)
            except Exception as exc:
                logger.warning(
                    "Merged-record callback failed for %s: %s", updated.id, exc, exc_info=True
                )

        await asyncio.gather(*[_attempt(c) for c in pending])

        logger.info(
            "Enrichment batch complete: %d succeeded, %d failed",
            len(report.succeeded),
            len(report.failed),
        )
        return report
