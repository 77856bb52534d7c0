"""Quick-save writer: store a shared URL straight into the database file.

Runs outside the main process (e.g. from a share sheet hook or a shell),
with no session or event loop involved. It shares nothing with the main
process but the record encoding: rows written here decode through
``SQLiteContentStore`` exactly like rows the session saved itself.
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path

from stash_library.config import get_settings
from stash_library.logging_config import configure_logging
from stash_library.models.content import SavedContent, new_content
from stash_library.storage.mapper import to_persisted
from stash_library.storage.sqlite import connect, ensure_schema, insert_record

logger = logging.getLogger(__name__)


def quick_save(url: str, database_path: str | Path, now: datetime | None = None) -> SavedContent:
    """Classify and persist a URL with empty metadata, ready for later enrichment."""
    content = new_content(url, now=now)
    with connect(database_path) as conn:
        ensure_schema(conn)
        insert_record(conn, to_persisted(content))
    logger.info("Quick-saved %s as %s (%s)", url, content.category.value, content.id)
    return content


def main(argv: list[str] | None = None) -> int:
    """Console entry point: ``stash-quick-save URL [--db PATH]``."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Save a URL into the Stash library database.")
    parser.add_argument("url", help="URL to save")
    parser.add_argument(
        "--db",
        default=settings.database_path or "stash.sqlite",
        help="SQLite database file (default: DATABASE_PATH or stash.sqlite)",
    )
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    try:
        content = quick_save(args.url, args.db)
    except ValueError as exc:
        parser.error(str(exc))
    print(content.id)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
