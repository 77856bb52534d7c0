"""Bulk delete as a client-side loop over single deletes.

There is no transaction across items. Every id is attempted even when an
earlier one fails, and the overall result is a failure if any single delete
failed. The ids that failed are reported with their error, and ids that
were not stored at all are also listed in ``missing``.
"""

import logging
from uuid import UUID

from pydantic import BaseModel

from stash_library.errors import NotFound
from stash_library.storage.gateway import ContentStore

logger = logging.getLogger(__name__)


class BulkDeleteResult(BaseModel):
    """Per-id outcome of a bulk delete."""

    deleted: list[UUID] = []
    failed: dict[UUID, str] = {}
    missing: list[UUID] = []  # Failed because the id was not stored

    @property
    def succeeded(self) -> bool:
        return not self.failed


async def delete_contents(store: ContentStore, ids: list[UUID]) -> BulkDeleteResult:
    """Delete each id in order, continuing past failures."""
    result = BulkDeleteResult()
    for content_id in ids:
        try:
            await store.delete(content_id)
        except NotFound as exc:
            logger.warning("Delete skipped for %s: %s", content_id, exc)
            result.failed[content_id] = str(exc)
            result.missing.append(content_id)
            continue
        except Exception as exc:
            logger.warning("Delete failed for %s: %s", content_id, exc)
            result.failed[content_id] = str(exc)
            continue
        result.deleted.append(content_id)

    logger.info(
        "Bulk delete finished: %d deleted, %d failed",
        len(result.deleted),
        len(result.failed),
    )
    return result


async def delete_all(store: ContentStore) -> BulkDeleteResult:
    """Delete every stored record. A failing fetch_all propagates as StorageFailure."""
    contents = await store.fetch_all()
    return await delete_contents(store, [c.id for c in contents])
