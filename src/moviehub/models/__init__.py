from .movie import (
    MovieDetail,
    SearchResultSummary,
    WatchedItem,
    WatchlistSummary,
    parse_rating,
    parse_runtime_minutes,
    poster_or_placeholder,
    round_half_up,
)

__all__ = [
    "MovieDetail",
    "SearchResultSummary",
    "WatchedItem",
    "WatchlistSummary",
    "parse_rating",
    "parse_runtime_minutes",
    "poster_or_placeholder",
    "round_half_up",
]
