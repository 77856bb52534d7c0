"""Metadata enrichment: fetch page metadata and merge it into saved content.

Public API:
    MetadataEnricher(store, fetcher, embedder=None, max_concurrency=4).run(items, on_merged)
        Enriches every item that needs it, isolating per-item failures.
    TrafilaturaMetadataFetcher(timeout_seconds).fetch(url) -> ContentMetadata
"""

from stash_library.enrichment.fetcher import MetadataFetcher, TrafilaturaMetadataFetcher
from stash_library.enrichment.orchestrator import (
    EnrichmentReport,
    MetadataEnricher,
    merge_metadata,
    select_for_enrichment,
)

__all__ = [
    "EnrichmentReport",
    "MetadataEnricher",
    "MetadataFetcher",
    "TrafilaturaMetadataFetcher",
    "merge_metadata",
    "select_for_enrichment",
]
