from .detail import DetailController, DetailError
from .search import SearchController
from .watchlist import WatchlistManager

__all__ = [
    "DetailController",
    "DetailError",
    "SearchController",
    "WatchlistManager",
]
