"""Application shell: wires the controllers together and routes user actions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from moviehub.clients import MovieCatalog
from moviehub.models import WatchedItem
from moviehub.services import DetailController, SearchController, WatchlistManager
from moviehub.services.search import MIN_QUERY_LENGTH
from moviehub.storage import PersistentListStore
from moviehub.ui import views
from moviehub.ui.views import Line

logger = logging.getLogger(__name__)

ESCAPE = "escape"
BOXES = ("results", "watched")


class KeyBindings:
    """Global key handlers. Key names are matched case-insensitively."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[[], None]]] = {}

    def bind(self, key: str, action: Callable[[], None]) -> Callable[[], None]:
        """Register ``action`` for ``key`` and return a function that unbinds it."""
        normalized = key.lower()
        self._handlers.setdefault(normalized, []).append(action)

        def unbind() -> None:
            handlers = self._handlers.get(normalized, [])
            if action in handlers:
                handlers.remove(action)

        return unbind

    def dispatch(self, key: str) -> bool:
        handlers = list(self._handlers.get(key.lower(), []))
        for handler in handlers:
            handler()
        return bool(handlers)


class MovieHubApp:
    """Owns the controllers and exposes one method per user action."""

    def __init__(
        self,
        catalog: MovieCatalog,
        store: PersistentListStore,
        *,
        min_query_length: int = MIN_QUERY_LENGTH,
    ) -> None:
        self.watchlist = WatchlistManager(store)
        self.detail = DetailController(catalog, self.watchlist)
        self.search = SearchController(
            catalog,
            min_query_length=min_query_length,
            on_search=self.detail.close,
        )
        self.keys = KeyBindings()
        self.keys.bind(ESCAPE, self.on_close)
        self.open_boxes: dict[str, bool] = {name: True for name in BOXES}

    @property
    def page_title(self) -> str:
        return self.detail.page_title

    def on_query_change(self, query: str) -> None:
        self.search.set_query(query)

    def on_select(self, imdb_id: str) -> None:
        self.detail.select(imdb_id)

    def on_select_result(self, position: int) -> None:
        """Select the ``position``-th (1-based) entry of the results list."""
        if not 1 <= position <= len(self.search.results):
            raise IndexError(f"No search result at position {position}")
        self.on_select(self.search.results[position - 1].imdb_id)

    def on_rate(self, rating: int) -> None:
        self.detail.set_rating(rating)

    def on_add(self) -> WatchedItem:
        return self.detail.add_to_watchlist()

    def on_close(self) -> None:
        self.detail.close()

    def on_remove(self, imdb_id: str) -> None:
        self.watchlist.remove(imdb_id)

    def on_key(self, key: str) -> bool:
        return self.keys.dispatch(key)

    def toggle_box(self, name: str) -> bool:
        if name not in self.open_boxes:
            raise KeyError(f"Unknown box {name!r}; expected one of {', '.join(BOXES)}")
        self.open_boxes[name] = not self.open_boxes[name]
        return self.open_boxes[name]

    async def settle(self) -> None:
        """Wait for the in-flight search and detail requests to finish."""
        await asyncio.gather(self.search.wait(), self.detail.wait())

    async def aclose(self) -> None:
        await asyncio.gather(self.search.aclose(), self.detail.aclose())

    def render(self) -> list[Line]:
        lines = views.nav_bar(self.search)
        lines.extend(
            views.box("Results", views.search_panel(self.search), is_open=self.open_boxes["results"])
        )
        if self.detail.is_open:
            right = views.movie_details(self.detail)
        else:
            right = views.watched_summary(self.watchlist.summary_statistics())
            right.extend(views.watched_movies_list(self.watchlist))
        lines.extend(views.box("Watched", right, is_open=self.open_boxes["watched"]))
        return lines


__all__ = ["BOXES", "ESCAPE", "KeyBindings", "MovieHubApp"]
