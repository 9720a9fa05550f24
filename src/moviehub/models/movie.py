from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

MISSING_VALUE = "N/A"
POSTER_PLACEHOLDER = "./no-image.png"


def parse_runtime_minutes(raw: Any) -> int:
    """Return the leading integer token of a runtime string such as ``"142 min"``.

    Anything that does not start with a whole number (``"N/A"``, blanks,
    ``None``) yields 0.
    """
    if raw is None:
        return 0
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return max(raw, 0)
    tokens = str(raw).split()
    if not tokens or not tokens[0].isdigit():
        return 0
    return int(tokens[0])


def round_half_up(value: float, places: int = 2) -> float:
    """Round to ``places`` decimals with exact halves going up, as in ``7.125 -> 7.13``."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def parse_rating(raw: Any) -> float:
    """Parse a provider rating such as ``"7.5"``; unparsable values yield 0.0."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value) or value < 0:
        return 0.0
    return value


def poster_or_placeholder(poster: str | None) -> str:
    if not poster or poster == MISSING_VALUE:
        return POSTER_PLACEHOLDER
    return poster


class SearchResultSummary(BaseModel):
    """One entry of a catalog search response."""

    imdb_id: str = Field(alias="imdbID")
    title: str = Field(default="", alias="Title")
    poster: str = Field(default="", alias="Poster")
    year: str = Field(default="", alias="Year")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "frozen": True,
    }


class MovieDetail(BaseModel):
    """Full catalog record for a single title, fetched fresh on every selection."""

    imdb_id: str = Field(default="", alias="imdbID")
    title: str = Field(default="", alias="Title")
    poster: str = Field(default="", alias="Poster")
    runtime: str = Field(default="", alias="Runtime")
    imdb_rating: str = Field(default="", alias="imdbRating")
    plot: str = Field(default="", alias="Plot")
    released: str = Field(default="", alias="Released")
    director: str = Field(default="", alias="Director")
    genre: str = Field(default="", alias="Genre")
    actors: str = Field(default="", alias="Actors")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "frozen": True,
    }

    @property
    def runtime_minutes(self) -> int:
        return parse_runtime_minutes(self.runtime)

    @property
    def rating_value(self) -> float:
        return parse_rating(self.imdb_rating)


class WatchedItem(BaseModel):
    """A rated movie on the watchlist.

    Field aliases match the stored JSON layout, so ``model_dump(by_alias=True)``
    is the persisted form.
    """

    imdb_id: str = Field(alias="imdbID")
    title: str = Field(default="", alias="Title")
    poster: str = Field(default="", alias="Poster")
    user_rating: int = Field(alias="userRating", ge=1, le=10)
    imdb_rating: float = Field(default=0.0, alias="imdbRating")
    runtime: int = Field(default=0, alias="Runtime")
    year: str = Field(default="", alias="Year")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "frozen": True,
    }

    @field_validator("imdb_rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> float:
        return parse_rating(value)

    @field_validator("runtime", mode="before")
    @classmethod
    def _coerce_runtime(cls, value: Any) -> int:
        if isinstance(value, float) and math.isfinite(value) and value > 0:
            return int(value)
        return parse_runtime_minutes(value)

    @classmethod
    def from_detail(cls, imdb_id: str, detail: MovieDetail, *, user_rating: int) -> WatchedItem:
        return cls(
            imdb_id=imdb_id,
            title=detail.title,
            poster=detail.poster,
            user_rating=user_rating,
            imdb_rating=detail.rating_value,
            runtime=detail.runtime_minutes,
            year=detail.released,
        )


class WatchlistSummary(BaseModel):
    """Aggregate statistics over the watchlist."""

    count: int = 0
    avg_imdb_rating: float = 0.0
    avg_user_rating: float = 0.0
    avg_runtime: float = 0.0

    @property
    def imdb_rating_display(self) -> str:
        return f"{round_half_up(self.avg_imdb_rating):.2f}"

    @property
    def user_rating_display(self) -> str:
        return f"{round_half_up(self.avg_user_rating):.2f}"

    @property
    def runtime_display(self) -> str:
        return f"{round_half_up(self.avg_runtime, 0):.0f}"
