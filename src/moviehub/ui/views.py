"""Plain-text rendering of application state.

Every view returns a list of ``Line`` objects; the CLI decides how to print
them. Views never mutate state.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from moviehub.models import (
    MovieDetail,
    SearchResultSummary,
    WatchedItem,
    WatchlistSummary,
    poster_or_placeholder,
)
from moviehub.services import DetailController, SearchController
from moviehub.services.detail import APP_TITLE, MAX_RATING


@dataclass(frozen=True)
class Line:
    text: str
    color: str | None = None
    bold: bool = False


def loader() -> list[Line]:
    return [Line("Loading...", color="cyan")]


def error_message(message: str) -> list[Line]:
    return [Line(f"⛔ {message}", color="red")]


def nav_bar(search: SearchController) -> list[Line]:
    query = search.query or "Search movies..."
    return [
        Line(f"🎬 {APP_TITLE}", bold=True),
        Line(f"Search: {query}"),
        Line(f"Found {search.result_count} results"),
    ]


def box(title: str, body: Iterable[Line], *, is_open: bool) -> list[Line]:
    toggle = "–" if is_open else "+"
    lines = [Line(f"[{toggle}] {title}", color="cyan", bold=True)]
    if is_open:
        lines.extend(body)
    return lines


def movie_list(results: Iterable[SearchResultSummary]) -> list[Line]:
    lines: list[Line] = []
    for idx, movie in enumerate(results, start=1):
        lines.append(Line(f"{idx}. {movie.title} ({movie.year})  [{movie.imdb_id}]"))
        lines.append(Line(f"   poster: {poster_or_placeholder(movie.poster)}"))
    return lines


def search_panel(search: SearchController) -> list[Line]:
    if search.is_loading:
        return loader()
    if search.error:
        return error_message(search.error)
    return movie_list(search.results)


def movie_details(controller: DetailController) -> list[Line]:
    lines: list[Line] = []
    if controller.error:
        lines.extend(error_message(controller.error))
    if controller.is_loading:
        lines.extend(loader())
    if controller.is_loading or controller.error or controller.detail is None:
        return lines

    detail = controller.detail
    lines.append(Line("← back"))
    lines.extend(_detail_header(detail))
    lines.extend(_rating_section(controller))
    lines.append(Line(detail.plot))
    lines.append(Line(f"Starring {detail.actors}"))
    lines.append(Line(f"Directed by {detail.director}"))
    return lines


def _detail_header(detail: MovieDetail) -> list[Line]:
    return [
        Line(f"poster: {poster_or_placeholder(detail.poster)}"),
        Line(detail.title, bold=True),
        Line(f"{detail.released} • {detail.runtime}"),
        Line(detail.genre),
        Line(f"⭐ {detail.imdb_rating} IMDB rating"),
    ]


def _rating_section(controller: DetailController) -> list[Line]:
    watched_rating = controller.watched_rating
    if watched_rating is not None:
        return [Line(f"Your rating: 🌟 {watched_rating}", color="yellow")]

    stars = "★" * controller.pending_rating + "☆" * (MAX_RATING - controller.pending_rating)
    current = controller.pending_rating or ""
    lines = [Line(f"{stars} {current}".rstrip(), color="yellow")]
    if controller.can_add:
        lines.append(Line("+ Add to list", color="green", bold=True))
    return lines


def watched_summary(summary: WatchlistSummary) -> list[Line]:
    return [
        Line("Movies you watched", bold=True),
        Line(f"#️⃣ {summary.count} movies"),
        Line(f"⭐️ {summary.imdb_rating_display}"),
        Line(f"🌟 {summary.user_rating_display}"),
        Line(f"⏳ {summary.runtime_display} min"),
    ]


def watched_movies_list(items: Iterable[WatchedItem]) -> list[Line]:
    lines: list[Line] = []
    for movie in items:
        imdb_rating = movie.imdb_rating or "N/A"
        runtime = movie.runtime or "N/A"
        lines.append(Line(f"{movie.title}  [{movie.imdb_id}]", bold=True))
        lines.append(
            Line(f"   ⭐️ {imdb_rating}  🌟 {movie.user_rating}  ⏳ {runtime} min  (x remove)")
        )
    return lines


__all__ = [
    "Line",
    "box",
    "error_message",
    "loader",
    "movie_details",
    "movie_list",
    "nav_bar",
    "search_panel",
    "watched_movies_list",
    "watched_summary",
]
