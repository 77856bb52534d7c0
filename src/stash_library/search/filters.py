"""Category filter groupings for the library view."""

from enum import Enum

from stash_library.models.content import ContentCategory, SavedContent


class ContentFilter(str, Enum):
    """User-selectable category groupings."""

    ALL = "all"
    VIDEO = "video"
    PLACE = "place"
    SHOPPING = "shopping"
    ARTICLE = "article"
    SOCIAL = "social"

    @property
    def categories(self) -> frozenset[ContentCategory]:
        """The categories this grouping shows."""
        return _FILTER_CATEGORIES[self]

    def matches(self, content: SavedContent) -> bool:
        return content.category in self.categories


_FILTER_CATEGORIES: dict[ContentFilter, frozenset[ContentCategory]] = {
    ContentFilter.ALL: frozenset(ContentCategory),
    ContentFilter.VIDEO: frozenset({ContentCategory.VIDEO}),
    ContentFilter.PLACE: frozenset({ContentCategory.MAP_PLACE_A, ContentCategory.MAP_PLACE_B}),
    ContentFilter.SHOPPING: frozenset({ContentCategory.SHOPPING_LISTING}),
    ContentFilter.ARTICLE: frozenset({ContentCategory.WEB}),
    ContentFilter.SOCIAL: frozenset({ContentCategory.SOCIAL_POST}),
}


def apply_filter(selected: ContentFilter, contents: list[SavedContent]) -> list[SavedContent]:
    """Filter contents by category, preserving order."""
    if selected == ContentFilter.ALL:
        return list(contents)
    return [c for c in contents if selected.matches(c)]
