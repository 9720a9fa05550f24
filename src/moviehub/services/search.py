"""Search state: query, results, loading flag and inline error."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from moviehub.clients import (
    CancellationToken,
    CatalogError,
    MovieCatalog,
    MovieNotFound,
    RequestCancelled,
    RequestSlot,
)
from moviehub.models import SearchResultSummary

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3


class SearchController:
    """Runs a catalog search whenever the query changes.

    Only the newest request may touch state. Starting a new search, or clearing
    the query, cancels the task of the one in flight so its HTTP exchange is
    aborted; anything it still delivers is dropped, whatever the outcome.
    """

    def __init__(
        self,
        catalog: MovieCatalog,
        *,
        min_query_length: int = MIN_QUERY_LENGTH,
        on_search: Callable[[], None] | None = None,
    ) -> None:
        self._catalog = catalog
        self._min_query_length = min_query_length
        self._on_search = on_search
        self._slot = RequestSlot("search")
        self._task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[None]] = set()

        self.query = ""
        self.results: list[SearchResultSummary] = []
        self.is_loading = False
        self.error: str | None = None

    @property
    def result_count(self) -> int:
        return len(self.results)

    def set_query(self, query: str) -> None:
        """Update the query and start a search if it is long enough.

        Must be called from inside the running event loop.
        """
        self.query = query
        term = query.strip()

        if len(term) < self._min_query_length:
            self._abort_in_flight()
            self.results = []
            self.error = None
            self.is_loading = False
            return

        if self._on_search is not None:
            self._on_search()

        self._abort_in_flight()
        token = self._slot.issue()
        self.error = None
        self.is_loading = True
        logger.info(f"[SEARCH] Searching for {query!r}")
        self._task = asyncio.get_running_loop().create_task(self._run(query, token))
        self._pending.add(self._task)
        self._task.add_done_callback(self._pending.discard)

    async def wait(self) -> None:
        """Block until the latest search has settled."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def _abort_in_flight(self) -> None:
        self._slot.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def aclose(self) -> None:
        self._slot.cancel()
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.wait(set(self._pending))

    async def _run(self, query: str, token: CancellationToken) -> None:
        try:
            results = await self._catalog.search(query, token)
        except RequestCancelled:
            logger.debug(f"[SEARCH] Dropped superseded search for {query!r}")
            return
        except MovieNotFound as exc:
            if self._slot.is_current(token):
                self._fail(str(exc))
            return
        except CatalogError as exc:
            if self._slot.is_current(token):
                logger.warning(f"[SEARCH] Search for {query!r} failed: {exc}")
                self._fail(str(exc))
            return

        if not self._slot.is_current(token):
            logger.debug(f"[SEARCH] Discarded stale results for {query!r}")
            return
        self.results = results
        self.is_loading = False
        logger.info(f"[SEARCH] {len(results)} results for {query!r}")

    def _fail(self, message: str) -> None:
        self.error = message
        self.results = []
        self.is_loading = False


__all__ = ["MIN_QUERY_LENGTH", "SearchController"]
