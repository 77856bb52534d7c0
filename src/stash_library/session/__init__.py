"""Library session: the state machine tying load, enrichment and search together.

Public API:
    LibrarySession(store, fetcher, search, embedder=None, max_concurrency=4)
        appear(), select_filter(f), change_query(q), save_url(url),
        delete(ids), delete_all(), state, subscribe(cb), wait_idle()
    reduce(state, event) -> (state, effects)
        The pure transition function behind the session.
"""

from stash_library.session.bulk import BulkDeleteResult, delete_all, delete_contents
from stash_library.session.machine import LibrarySession
from stash_library.session.reducer import reduce
from stash_library.session.state import LibraryState, SessionPhase

__all__ = [
    "BulkDeleteResult",
    "LibrarySession",
    "LibraryState",
    "SessionPhase",
    "delete_all",
    "delete_contents",
    "reduce",
]
