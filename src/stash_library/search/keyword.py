"""Local keyword search over the content store."""

import logging
from typing import Protocol

from stash_library.models.content import SavedContent
from stash_library.storage.gateway import ContentStore

logger = logging.getLogger(__name__)


class SearchService(Protocol):
    """Returns matching contents in relevance order. May raise."""

    async def search(self, query: str) -> list[SavedContent]: ...


def _haystack(content: SavedContent) -> str:
    parts = [content.title, content.summary or "", content.source_url, *content.metadata.values()]
    return "\n".join(parts).casefold()


def score(content: SavedContent, terms: list[str]) -> int:
    """Total occurrences of all terms, or 0 unless every term occurs."""
    haystack = _haystack(content)
    counts = [haystack.count(t) for t in terms]
    if not counts or not all(counts):
        return 0
    return sum(counts)


class KeywordSearch:
    """SearchService over the store's records.

    Every whitespace-separated term must appear (case-insensitively) in the
    title, summary, URL or a metadata value. Results are ranked by total
    term occurrences, newest first on ties. Store errors propagate.
    """

    def __init__(self, store: ContentStore):
        self.store = store

    async def search(self, query: str) -> list[SavedContent]:
        terms = query.casefold().split()
        if not terms:
            return []
        contents = await self.store.fetch_all()
        scored = [(score(c, terms), c) for c in contents]
        matches = [(s, c) for s, c in scored if s > 0]
        matches.sort(key=lambda pair: (pair[0], pair[1].created_at), reverse=True)
        logger.debug("Search %r matched %d of %d", query, len(matches), len(contents))
        return [c for _, c in matches]
