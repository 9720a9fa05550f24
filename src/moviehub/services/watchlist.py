from __future__ import annotations

import logging
from collections.abc import Iterator

from moviehub.models import WatchedItem, WatchlistSummary, round_half_up
from moviehub.storage import WATCHED_KEY, PersistentListStore

logger = logging.getLogger(__name__)


class WatchlistManager:
    """Owns the ordered watched list and writes it through on every change."""

    def __init__(self, store: PersistentListStore, *, key: str = WATCHED_KEY) -> None:
        self._store = store
        self._key = key
        self._items: list[WatchedItem] = store.load(key)
        logger.info(f"[WATCHLIST] Loaded {len(self._items)} watched movies")

    @property
    def items(self) -> tuple[WatchedItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[WatchedItem]:
        return iter(self.items)

    def contains(self, imdb_id: str) -> bool:
        return self.get(imdb_id) is not None

    def get(self, imdb_id: str) -> WatchedItem | None:
        for item in self._items:
            if item.imdb_id == imdb_id:
                return item
        return None

    def add(self, item: WatchedItem) -> None:
        """Append ``item``. Uniqueness is the caller's job; duplicates are kept."""
        if self.contains(item.imdb_id):
            logger.warning(f"[WATCHLIST] {item.imdb_id} is already on the list, adding anyway")
        self._items.append(item)
        self._flush()
        logger.info(f"[WATCHLIST] Added {item.title} ({item.imdb_id}) rated {item.user_rating}")

    def remove(self, imdb_id: str) -> None:
        remaining = [item for item in self._items if item.imdb_id != imdb_id]
        removed = len(self._items) - len(remaining)
        self._items = remaining
        self._flush()
        if removed:
            logger.info(f"[WATCHLIST] Removed {imdb_id}")

    def summary_statistics(self) -> WatchlistSummary:
        imdb_ratings = [item.imdb_rating for item in self._items if item.imdb_rating]
        user_ratings = [item.user_rating for item in self._items]
        runtimes = [item.runtime for item in self._items if item.runtime]
        return WatchlistSummary(
            count=len(self._items),
            avg_imdb_rating=_mean(imdb_ratings),
            avg_user_rating=_mean(user_ratings),
            avg_runtime=_mean(runtimes),
        )

    def _flush(self) -> None:
        self._store.save(self._key, self._items)


def _mean(values: list[float] | list[int]) -> float:
    if not values:
        return 0.0
    return round_half_up(sum(values) / len(values))


__all__ = ["WatchlistManager"]
