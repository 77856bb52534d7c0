"""Visible-set composition from the category filter and the search query.

The two axes are stored independently and combined here:

- blank query: the category-filtered loaded contents
- non-blank query with live results: the results in relevance order,
  filtered by category
- non-blank query before any results have arrived: the category-filtered
  loaded contents

Search results are tagged with the generation of the query that produced
them. Each query change starts a new generation, and only results from the
current generation are ever applied.
"""

from stash_library.models.content import SavedContent
from stash_library.search.filters import ContentFilter, apply_filter


def is_blank(query: str) -> bool:
    return not query.strip()


def is_current(result_generation: int, current_generation: int) -> bool:
    """True when a search result belongs to the latest issued query."""
    return result_generation == current_generation


def visible_contents(
    contents: list[SavedContent],
    selected_filter: ContentFilter,
    query: str,
    search_results: list[SavedContent] | None,
) -> list[SavedContent]:
    """Derive the visible set from loaded contents, filter, query and live results."""
    if is_blank(query) or search_results is None:
        return apply_filter(selected_filter, contents)
    return apply_filter(selected_filter, search_results)


def replace_by_id(contents: list[SavedContent], updated: SavedContent) -> list[SavedContent]:
    """Swap in an updated record wherever its id appears, keeping positions."""
    return [updated if c.id == updated.id else c for c in contents]
