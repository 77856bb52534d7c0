"""Library session runtime: owns the state and runs effects.

``dispatch`` is the single point where state changes. It runs the reducer
synchronously, notifies subscribers, then starts the requested effects as
asyncio tasks. Effect results come back through ``dispatch`` as ordinary
events, so concurrent enrichment fetches never touch the state directly.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from uuid import UUID

from stash_library.embedding.service import EmbeddingService
from stash_library.enrichment.fetcher import MetadataFetcher
from stash_library.enrichment.orchestrator import EnrichmentReport, MetadataEnricher
from stash_library.models.content import SavedContent, new_content
from stash_library.search.filters import ContentFilter
from stash_library.search.keyword import SearchService
from stash_library.session import bulk
from stash_library.session.bulk import BulkDeleteResult
from stash_library.session.events import (
    Appeared,
    CancelSearch,
    ContentEnriched,
    ContentSaved,
    ContentsDeleted,
    ContentsLoaded,
    Effect,
    Enrich,
    EnrichmentFinished,
    Event,
    FetchAll,
    FilterChanged,
    LoadFailed,
    QueryChanged,
    Search,
    SearchCompleted,
)
from stash_library.session.reducer import reduce
from stash_library.session.state import LibraryState
from stash_library.storage.gateway import ContentStore

logger = logging.getLogger(__name__)

Subscriber = Callable[[LibraryState], None]


class LibrarySession:
    """The single owner of the in-memory library state.

    Collaborators are injected: the content store, the metadata fetcher, the
    search service and (optionally) the embedding service. Must be used from
    within a running event loop.
    """

    def __init__(
        self,
        store: ContentStore,
        fetcher: MetadataFetcher,
        search: SearchService,
        embedder: EmbeddingService | None = None,
        max_concurrency: int = 4,
    ):
        self.store = store
        self.search_service = search
        self.enricher = MetadataEnricher(store, fetcher, embedder, max_concurrency)
        self._state = LibraryState()
        self._subscribers: list[Subscriber] = []
        self._tasks: set[asyncio.Task] = set()
        self._search_task: asyncio.Task | None = None

    @property
    def state(self) -> LibraryState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback`` with every new state. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def dispatch(self, event: Event) -> None:
        """Apply an event, publish the new state, and start its effects.

        A failing subscriber is logged and skipped; it never blocks the
        other subscribers or the effects of the event.
        """
        self._state, effects = reduce(self._state, event)
        for callback in list(self._subscribers):
            try:
                callback(self._state)
            except Exception as exc:
                logger.warning("Subscriber %r failed: %s", callback, exc, exc_info=True)
        for effect in effects:
            self._start(effect)

    # --- Effects ---

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _start(self, effect: Effect) -> None:
        if isinstance(effect, FetchAll):
            self._spawn(self._fetch_all())
        elif isinstance(effect, Enrich):
            self._spawn(self._enrich(effect.items))
        elif isinstance(effect, Search):
            self._search_task = self._spawn(self._search(effect.generation, effect.query))
        elif isinstance(effect, CancelSearch):
            if self._search_task is not None and not self._search_task.done():
                self._search_task.cancel()
            self._search_task = None

    async def _fetch_all(self) -> None:
        try:
            contents = await self.store.fetch_all()
        except Exception as exc:
            logger.error("Library load failed: %s", exc, exc_info=True)
            self.dispatch(LoadFailed(str(exc)))
            return
        logger.info("Loaded %d saved item(s)", len(contents))
        self.dispatch(ContentsLoaded(contents))

    async def _enrich(self, items: list[SavedContent]) -> None:
        logger.info("Enriching %d item(s)", len(items))
        report = EnrichmentReport()
        try:
            report = await self.enricher.run(
                items, on_merged=lambda content: self.dispatch(ContentEnriched(content))
            )
        finally:
            # Clears the enriching flag even when the batch raises
            self.dispatch(EnrichmentFinished(report))

    async def _search(self, generation: int, query: str) -> None:
        try:
            results = await self.search_service.search(query)
        except Exception as exc:
            logger.warning("Search failed for %r, showing no results: %s", query, exc)
            results = []
        self.dispatch(SearchCompleted(generation, results))

    # --- Commands ---

    def appear(self) -> None:
        self.dispatch(Appeared())

    def select_filter(self, selected: ContentFilter) -> None:
        self.dispatch(FilterChanged(selected))

    def change_query(self, query: str) -> None:
        self.dispatch(QueryChanged(query))

    async def save_url(self, url: str) -> SavedContent:
        """Classify and persist a new URL, then add it to the library.

        Raises ValueError for a URL that cannot be stored (see ``new_content``).
        Storage errors propagate to the caller and leave the state unchanged.
        """
        content = new_content(url)
        await self.store.save(content)
        logger.info("Saved %s as %s", content.source_url, content.category.value)
        self.dispatch(ContentSaved(content))
        return content

    async def delete(self, ids: list[UUID]) -> BulkDeleteResult:
        """Delete the given ids one by one; see ``session.bulk``."""
        result = await bulk.delete_contents(self.store, ids)
        self.dispatch(ContentsDeleted(result))
        return result

    async def delete_all(self) -> BulkDeleteResult:
        result = await bulk.delete_all(self.store)
        self.dispatch(ContentsDeleted(result))
        return result

    async def wait_idle(self) -> None:
        """Wait until no effect task is running, including ones started meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Cancel all running effects, including any started while cancelling."""
        while self._tasks:
            for task in list(self._tasks):
                task.cancel()
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
