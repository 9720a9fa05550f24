from __future__ import annotations

import asyncio
import logging

from moviehub.clients import CancellationToken, CatalogError, MovieCatalog, RequestCancelled, RequestSlot
from moviehub.models import MovieDetail, WatchedItem
from moviehub.services.watchlist import WatchlistManager

logger = logging.getLogger(__name__)

APP_TITLE = "MovieHub"
MAX_RATING = 10


class DetailError(RuntimeError):
    """Raised when a detail-panel action is not available in the current state."""


class DetailController:
    """Tracks the selected movie, its fetched detail and the rating being entered."""

    def __init__(self, catalog: MovieCatalog, watchlist: WatchlistManager) -> None:
        self._catalog = catalog
        self._watchlist = watchlist
        self._slot = RequestSlot("detail")
        self._task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[None]] = set()

        self.selected_id: str | None = None
        self.detail: MovieDetail | None = None
        self.is_loading = False
        self.error: str | None = None
        self.pending_rating = 0

    @property
    def is_open(self) -> bool:
        return self.selected_id is not None

    @property
    def watched_rating(self) -> int | None:
        """User rating stored for the selected movie, if it is already watched."""
        if self.selected_id is None:
            return None
        item = self._watchlist.get(self.selected_id)
        return item.user_rating if item else None

    @property
    def is_watched(self) -> bool:
        return self.watched_rating is not None

    @property
    def can_add(self) -> bool:
        return (
            self.detail is not None
            and self.pending_rating > 0
            and self.selected_id is not None
            and not self._watchlist.contains(self.selected_id)
        )

    @property
    def page_title(self) -> str:
        if self.detail is not None and self.detail.title:
            return f"Movie | {self.detail.title}"
        return APP_TITLE

    def select(self, imdb_id: str) -> None:
        """Open ``imdb_id``, or close the panel if it is already open."""
        if not imdb_id:
            self.close()
            return
        if imdb_id == self.selected_id:
            self.close()
            return

        self._abort_in_flight()
        token = self._slot.issue()
        self.selected_id = imdb_id
        self.detail = None
        self.pending_rating = 0
        self.error = None
        self.is_loading = True
        logger.info(f"[DETAIL] Loading {imdb_id}")
        self._task = asyncio.get_running_loop().create_task(self._run(imdb_id, token))
        self._pending.add(self._task)
        self._task.add_done_callback(self._pending.discard)

    def close(self) -> None:
        self._abort_in_flight()
        self.selected_id = None
        self.detail = None
        self.error = None
        self.pending_rating = 0
        self.is_loading = False

    def set_rating(self, rating: int) -> None:
        if self.detail is None:
            raise DetailError("Open a movie before rating it.")
        if self.is_watched:
            raise DetailError("This movie is already on your list.")
        if not 1 <= rating <= MAX_RATING:
            raise ValueError(f"Rating must be between 1 and {MAX_RATING}, got {rating}")
        self.pending_rating = rating

    def add_to_watchlist(self) -> WatchedItem:
        """Add the open movie with the pending rating, then close the panel."""
        if not self.can_add:
            raise DetailError("Rate the movie before adding it to your list.")
        assert self.selected_id is not None and self.detail is not None

        item = WatchedItem.from_detail(
            self.selected_id, self.detail, user_rating=self.pending_rating
        )
        self._watchlist.add(item)
        self.close()
        return item

    async def wait(self) -> None:
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

    async def _run(self, imdb_id: str, token: CancellationToken) -> None:
        try:
            detail = await self._catalog.fetch_detail(imdb_id, token)
        except RequestCancelled:
            logger.debug(f"[DETAIL] Dropped superseded fetch for {imdb_id}")
            return
        except CatalogError as exc:
            if self._slot.is_current(token):
                logger.warning(f"[DETAIL] Fetch for {imdb_id} failed: {exc}")
                self.error = str(exc)
                self.is_loading = False
            return

        if not self._slot.is_current(token):
            return
        self.detail = detail
        self.is_loading = False


__all__ = ["APP_TITLE", "DetailController", "DetailError"]
