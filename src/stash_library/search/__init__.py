"""Search and filter composition for the visible set."""

from stash_library.search.composer import is_blank, is_current, replace_by_id, visible_contents
from stash_library.search.filters import ContentFilter, apply_filter
from stash_library.search.keyword import KeywordSearch, SearchService

__all__ = [
    "ContentFilter",
    "KeywordSearch",
    "SearchService",
    "apply_filter",
    "is_blank",
    "is_current",
    "replace_by_id",
    "visible_contents",
]
