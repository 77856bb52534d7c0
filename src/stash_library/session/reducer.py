"""Session transition function.

``reduce(state, event)`` is pure: it returns the next state plus the effects
the runtime must start. All async work happens outside, and its results come
back in as new events, so the reducer is the only place state changes.

Transitions:
    IDLE / LOAD_FAILED / READY --Appeared--> LOADING        [FetchAll]
    LOADING --ContentsLoaded--> READY                        [Enrich?, Search?]
    LOADING --LoadFailed--> LOAD_FAILED
    READY --ContentEnriched / EnrichmentFinished--> READY     [Enrich? after a load mid-batch]
    any --FilterChanged / QueryChanged / SearchCompleted--> same phase
"""

from stash_library.enrichment.orchestrator import select_for_enrichment
from stash_library.search.composer import is_blank, is_current, replace_by_id
from stash_library.session.events import (
    Appeared,
    CancelSearch,
    ContentEnriched,
    ContentSaved,
    ContentsDeleted,
    ContentsLoaded,
    Effect,
    Enrich,
    EnrichmentFinished,
    Event,
    FetchAll,
    FilterChanged,
    LoadFailed,
    QueryChanged,
    Search,
    SearchCompleted,
)
from stash_library.session.state import LibraryState, SessionPhase


def _newest_first(contents):
    return sorted(contents, key=lambda c: (c.created_at, str(c.id)), reverse=True)


def reduce(state: LibraryState, event: Event) -> tuple[LibraryState, list[Effect]]:
    """Apply one event to the state."""
    if isinstance(event, Appeared):
        if state.phase == SessionPhase.LOADING:
            return state, []
        return state.model_copy(update={"phase": SessionPhase.LOADING}), [FetchAll()]

    if isinstance(event, ContentsLoaded):
        update: dict = {"phase": SessionPhase.READY, "contents": _newest_first(event.contents)}
        effects: list[Effect] = []

        # One batch at a time; a load during a batch queues a follow-up batch
        pending = select_for_enrichment(update["contents"])
        if pending and not state.enriching:
            update["enriching"] = True
            effects.append(Enrich(pending))
        elif pending:
            update["enrich_again"] = True

        # Refresh live results against the reloaded library
        if not is_blank(state.query):
            generation = state.search_generation + 1
            update["search_generation"] = generation
            effects += [CancelSearch(), Search(generation, state.query)]

        return state.model_copy(update=update), effects

    if isinstance(event, LoadFailed):
        return state.model_copy(update={"phase": SessionPhase.LOAD_FAILED}), []

    if isinstance(event, ContentEnriched):
        update = {"contents": replace_by_id(state.contents, event.content)}
        if state.search_results is not None:
            update["search_results"] = replace_by_id(state.search_results, event.content)
        return state.model_copy(update=update), []

    if isinstance(event, EnrichmentFinished):
        if state.enrich_again:
            # Items this batch just failed wait for the next load
            failed = set(event.report.failed)
            pending = [c for c in select_for_enrichment(state.contents) if c.id not in failed]
            if pending:
                return state.model_copy(update={"enrich_again": False}), [Enrich(pending)]
        return state.model_copy(update={"enriching": False, "enrich_again": False}), []

    if isinstance(event, FilterChanged):
        return state.model_copy(update={"selected_filter": event.selected}), []

    if isinstance(event, QueryChanged):
        generation = state.search_generation + 1
        if is_blank(event.query):
            next_state = state.model_copy(
                update={
                    "query": event.query,
                    "search_generation": generation,
                    "search_results": None,
                }
            )
            return next_state, [CancelSearch()]
        next_state = state.model_copy(
            update={"query": event.query, "search_generation": generation}
        )
        return next_state, [CancelSearch(), Search(generation, event.query)]

    if isinstance(event, SearchCompleted):
        if not is_current(event.generation, state.search_generation):
            return state, []
        return state.model_copy(update={"search_results": list(event.results)}), []

    if isinstance(event, ContentSaved):
        others = [c for c in state.contents if c.id != event.content.id]
        return state.model_copy(update={"contents": [event.content, *others]}), []

    if isinstance(event, ContentsDeleted):
        removed = set(event.result.deleted)
        update = {
            "contents": [c for c in state.contents if c.id not in removed],
            "last_bulk_delete": event.result,
        }
        if state.search_results is not None:
            update["search_results"] = [c for c in state.search_results if c.id not in removed]
        return state.model_copy(update=update), []

    raise TypeError(f"Unhandled session event: {type(event).__name__}")
