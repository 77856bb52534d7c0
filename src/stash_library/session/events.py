"""Events fed into the session and effects it asks the runtime to perform."""

from dataclasses import dataclass, field

from stash_library.enrichment.orchestrator import EnrichmentReport
from stash_library.models.content import SavedContent
from stash_library.search.filters import ContentFilter
from stash_library.session.bulk import BulkDeleteResult

# --- Events ---


@dataclass(frozen=True)
class Appeared:
    """The library view appeared; (re)load everything."""


@dataclass(frozen=True)
class ContentsLoaded:
    contents: list[SavedContent]


@dataclass(frozen=True)
class LoadFailed:
    reason: str


@dataclass(frozen=True)
class ContentEnriched:
    content: SavedContent


@dataclass(frozen=True)
class EnrichmentFinished:
    report: EnrichmentReport = field(default_factory=EnrichmentReport)


@dataclass(frozen=True)
class FilterChanged:
    selected: ContentFilter


@dataclass(frozen=True)
class QueryChanged:
    query: str


@dataclass(frozen=True)
class SearchCompleted:
    generation: int
    results: list[SavedContent]


@dataclass(frozen=True)
class ContentSaved:
    content: SavedContent


@dataclass(frozen=True)
class ContentsDeleted:
    result: BulkDeleteResult


Event = (
    Appeared
    | ContentsLoaded
    | LoadFailed
    | ContentEnriched
    | EnrichmentFinished
    | FilterChanged
    | QueryChanged
    | SearchCompleted
    | ContentSaved
    | ContentsDeleted
)

# --- Effects ---


@dataclass(frozen=True)
class FetchAll:
    """Load every record from the store."""


@dataclass(frozen=True)
class Enrich:
    items: list[SavedContent]


@dataclass(frozen=True)
class Search:
    generation: int
    query: str


@dataclass(frozen=True)
class CancelSearch:
    """Cancel the in-flight search, if any."""


Effect = FetchAll | Enrich | Search | CancelSearch
