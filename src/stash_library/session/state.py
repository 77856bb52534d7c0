"""Library session state snapshot."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from stash_library.models.content import SavedContent
from stash_library.search.composer import visible_contents
from stash_library.search.filters import ContentFilter
from stash_library.session.bulk import BulkDeleteResult


class SessionPhase(str, Enum):
    """Top-level load state of the library."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    LOAD_FAILED = "load_failed"


class LibraryState(BaseModel):
    """The single authoritative session state. Views derive from it."""

    model_config = ConfigDict(frozen=True)

    phase: SessionPhase = SessionPhase.IDLE
    contents: list[SavedContent] = []  # Newest first
    selected_filter: ContentFilter = ContentFilter.ALL
    query: str = ""
    search_generation: int = 0
    search_results: list[SavedContent] | None = None  # Live results for `query`
    enriching: bool = False
    enrich_again: bool = False  # A load finished while a batch was running
    last_bulk_delete: BulkDeleteResult | None = None

    @property
    def visible(self) -> list[SavedContent]:
        return visible_contents(
            self.contents, self.selected_filter, self.query, self.search_results
        )

    @property
    def is_loading(self) -> bool:
        return self.phase == SessionPhase.LOADING
