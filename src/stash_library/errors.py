"""Error taxonomy for the library core.

Only ``StorageFailure`` raised by ``fetch_all`` during a load ever changes the
session phase. The others are isolated to their unit of work: a failed
enrichment item is logged and skipped, a failed search yields no results.
A URL with no recognized host is not an error; it classifies as ``web``.
An empty or unparseable URL is rejected with ValueError when saving.
"""

from uuid import UUID


class LibraryError(Exception):
    """Base class for library errors."""


class StorageFailure(LibraryError):
    """The persistence layer failed (I/O, corrupt database, ...)."""


class NotFound(LibraryError):
    """An operation referenced an id that is not stored."""

    def __init__(self, content_id: UUID):
        super().__init__(f"No saved content with id {content_id}")
        self.content_id = content_id


class EnrichmentItemFailed(LibraryError):
    """Metadata could not be fetched or written back for one item."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Enrichment failed for {url}: {reason}")
        self.url = url
        self.reason = reason


class SearchFailed(LibraryError):
    """The search service could not answer a query."""
