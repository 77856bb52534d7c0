"""HTTP routes over the library session.

Each request dispatches to the session and waits for the resulting async
work (load, enrichment, search) to settle before returning the snapshot.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from stash_library.errors import StorageFailure
from stash_library.models.content import SavedContent
from stash_library.search.filters import ContentFilter
from stash_library.session.bulk import BulkDeleteResult
from stash_library.session.machine import LibrarySession
from stash_library.session.state import LibraryState, SessionPhase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["library"])


class SaveRequest(BaseModel):
    url: str


class FilterRequest(BaseModel):
    filter: ContentFilter


class QueryRequest(BaseModel):
    query: str


class DeleteRequest(BaseModel):
    ids: list[UUID] | None = None  # None deletes everything


class LibrarySnapshot(BaseModel):
    """What a client needs to render the library."""

    phase: SessionPhase
    is_loading: bool
    enriching: bool
    selected_filter: ContentFilter
    query: str
    total: int
    visible: list[SavedContent]

    @classmethod
    def from_state(cls, state: LibraryState) -> "LibrarySnapshot":
        return cls(
            phase=state.phase,
            is_loading=state.is_loading,
            enriching=state.enriching,
            selected_filter=state.selected_filter,
            query=state.query,
            total=len(state.contents),
            visible=state.visible,
        )


def get_session(request: Request) -> LibrarySession:
    """Return the session created in the app lifespan."""
    return request.app.state.session


async def _snapshot(session: LibrarySession) -> LibrarySnapshot:
    await session.wait_idle()
    return LibrarySnapshot.from_state(session.state)


@router.get("/library")
async def library(session: LibrarySession = Depends(get_session)) -> LibrarySnapshot:
    return LibrarySnapshot.from_state(session.state)


@router.post("/library/load")
async def load_library(session: LibrarySession = Depends(get_session)) -> LibrarySnapshot:
    """Load (or reload) the library and run enrichment for sparse items."""
    session.appear()
    return await _snapshot(session)


@router.put("/library/filter")
async def set_filter(
    body: FilterRequest, session: LibrarySession = Depends(get_session)
) -> LibrarySnapshot:
    session.select_filter(body.filter)
    return await _snapshot(session)


@router.put("/library/query")
async def set_query(
    body: QueryRequest, session: LibrarySession = Depends(get_session)
) -> LibrarySnapshot:
    session.change_query(body.query)
    return await _snapshot(session)


@router.post("/contents", status_code=201)
async def save_content(
    body: SaveRequest, session: LibrarySession = Depends(get_session)
) -> SavedContent:
    try:
        return await session.save_url(body.url)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StorageFailure as exc:
        logger.error("Save failed for %s: %s", body.url, exc)
        raise HTTPException(status_code=503, detail="Storage unavailable") from exc


@router.post("/contents/delete")
async def delete_contents(
    body: DeleteRequest, session: LibrarySession = Depends(get_session)
) -> BulkDeleteResult:
    """Delete the given ids, or every saved item when no ids are given."""
    if body.ids is None:
        try:
            return await session.delete_all()
        except StorageFailure as exc:
            raise HTTPException(status_code=503, detail="Storage unavailable") from exc
    return await session.delete(body.ids)


@router.delete("/contents/{content_id}")
async def delete_content(
    content_id: UUID, session: LibrarySession = Depends(get_session)
) -> BulkDeleteResult:
    result = await session.delete([content_id])
    if content_id in result.missing:
        raise HTTPException(status_code=404, detail=result.failed[content_id])
    if not result.succeeded:
        logger.error("Delete failed for %s: %s", content_id, result.failed[content_id])
        raise HTTPException(status_code=503, detail="Storage unavailable")
    return result
