"""URL host matching and content category detection."""

import logging
from urllib.parse import urlsplit

from stash_library.models.content import ContentCategory

logger = logging.getLogger(__name__)

# (category, exact hosts, parent domains matched with any subdomain)
# Evaluated top to bottom, first match wins. Host sets are disjoint.
HOST_RULES: tuple[tuple[ContentCategory, frozenset[str], tuple[str, ...]], ...] = (
    (ContentCategory.VIDEO, frozenset({"youtube.com", "youtu.be"}), ("youtube.com",)),
    (ContentCategory.SOCIAL_POST, frozenset({"instagram.com"}), ("instagram.com",)),
    (ContentCategory.MAP_PLACE_A, frozenset({"map.naver.com", "naver.me"}), ()),
    (ContentCategory.MAP_PLACE_B, frozenset({"maps.google.com", "maps.app.goo.gl"}), ()),
    (ContentCategory.SHOPPING_LISTING, frozenset({"coupang.com", "coupa.ng"}), ("coupang.com",)),
)

# goo.gl is a general shortener; only its /maps links belong to Google Maps
SHARED_SHORTENER_HOST = "goo.gl"
SHARED_SHORTENER_MAPS_PREFIX = "/maps"


def _host_matches(host: str, exact: frozenset[str], domains: tuple[str, ...]) -> bool:
    if host in exact:
        return True
    return any(host == d or host.endswith("." + d) for d in domains)


def classify(url: str) -> ContentCategory:
    """Classify a URL by its host. Host-less or unparseable URLs default to WEB."""
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname  # already lower-cased
    except ValueError:
        logger.debug("Unparseable URL classified as web: %s", url)
        return ContentCategory.WEB

    if not host:
        return ContentCategory.WEB

    for category, exact, domains in HOST_RULES:
        if _host_matches(host, exact, domains):
            return category

    if host == SHARED_SHORTENER_HOST and parts.path.startswith(SHARED_SHORTENER_MAPS_PREFIX):
        return ContentCategory.MAP_PLACE_B

    return ContentCategory.WEB
