"""FastAPI application with lifespan and health endpoint."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from stash_library import __version__
from stash_library.api import router as library_router
from stash_library.config import Settings, get_settings
from stash_library.embedding import build_embedding_service
from stash_library.enrichment import TrafilaturaMetadataFetcher
from stash_library.logging_config import configure_logging
from stash_library.search import KeywordSearch
from stash_library.session import LibrarySession
from stash_library.storage import ContentStore, InMemoryContentStore, SQLiteContentStore


def build_session(settings: Settings) -> LibrarySession:
    """Wire the session with live collaborators from settings."""
    store: ContentStore
    if settings.database_path:
        store = SQLiteContentStore(settings.database_path)
    else:
        store = InMemoryContentStore()

    return LibrarySession(
        store=store,
        fetcher=TrafilaturaMetadataFetcher(settings.fetch_timeout_seconds),
        search=KeywordSearch(store),
        embedder=build_embedding_service(settings),
        max_concurrency=settings.enrichment_concurrency,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging, load config, build the session."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    app.state.session = build_session(settings)
    yield
    await app.state.session.close()


app = FastAPI(
    title="Stash Library",
    lifespan=lifespan,
)
app.include_router(library_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "stash-library",
        "version": __version__,
    }
