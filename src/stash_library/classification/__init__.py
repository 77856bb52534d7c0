"""Content classification: map a saved URL to its content category.

Public API:
    classify(url) -> ContentCategory
        Pure, total host-based classifier. Runs once per URL at save time.
"""

from stash_library.classification.router import classify
from stash_library.models.content import ContentCategory

__all__ = [
    "classify",
    "ContentCategory",
]
