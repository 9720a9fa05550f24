"""Tests for catalog and watchlist models."""

import pytest
from pydantic import ValidationError

from moviehub.models import (
    MovieDetail,
    SearchResultSummary,
    WatchedItem,
    WatchlistSummary,
    parse_rating,
    parse_runtime_minutes,
    poster_or_placeholder,
    round_half_up,
)
from tests.fixtures.omdb_responses import DETAIL_MISSING_FIELDS_RESPONSE, DETAIL_RESPONSE


class TestParseRuntimeMinutes:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("142 min", 142),
            ("90", 90),
            ("  75 min", 75),
            ("N/A", 0),
            ("", 0),
            (None, 0),
            ("min 90", 0),
            ("1h 30min", 0),
            (120, 120),
        ],
    )
    def test_parses_leading_integer_token(self, raw, expected):
        assert parse_runtime_minutes(raw) == expected


class TestParseRating:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("7.5", 7.5),
            ("10", 10.0),
            (8.1, 8.1),
            ("N/A", 0.0),
            ("", 0.0),
            (None, 0.0),
            ("nan", 0.0),
            ("-3", 0.0),
        ],
    )
    def test_falls_back_to_zero(self, raw, expected):
        assert parse_rating(raw) == expected


def test_poster_placeholder_for_missing_poster():
    assert poster_or_placeholder("N/A") == "./no-image.png"
    assert poster_or_placeholder("") == "./no-image.png"
    assert poster_or_placeholder("https://img/x.jpg") == "https://img/x.jpg"


def test_search_summary_reads_provider_fields():
    summary = SearchResultSummary.model_validate(
        {"Title": "Inception", "Year": "2010", "imdbID": "tt1375666", "Poster": "N/A", "Type": "movie"}
    )

    assert summary.imdb_id == "tt1375666"
    assert summary.title == "Inception"
    assert summary.year == "2010"


def test_movie_detail_derived_values():
    detail = MovieDetail.model_validate(DETAIL_RESPONSE)

    assert detail.runtime == "148 min"
    assert detail.runtime_minutes == 148
    assert detail.rating_value == 8.8
    assert detail.actors.startswith("Leonardo DiCaprio")


def test_movie_detail_with_missing_values():
    detail = MovieDetail.model_validate(DETAIL_MISSING_FIELDS_RESPONSE)

    assert detail.runtime_minutes == 0
    assert detail.rating_value == 0.0


class TestWatchedItem:
    def test_from_detail(self):
        detail = MovieDetail.model_validate(DETAIL_RESPONSE)

        item = WatchedItem.from_detail("tt1375666", detail, user_rating=9)

        assert item.imdb_id == "tt1375666"
        assert item.title == "Inception"
        assert item.user_rating == 9
        assert item.imdb_rating == 8.8
        assert item.runtime == 148
        assert item.year == "16 Jul 2010"

    def test_from_detail_with_unparsable_fields(self):
        detail = MovieDetail.model_validate(DETAIL_MISSING_FIELDS_RESPONSE)

        item = WatchedItem.from_detail("tt5295894", detail, user_rating=4)

        assert item.imdb_rating == 0.0
        assert item.runtime == 0

    def test_dump_uses_stored_field_names(self):
        item = WatchedItem(imdb_id="tt1", title="A", poster="N/A", user_rating=7, imdb_rating=6.5, runtime=100, year="2001")

        dumped = item.model_dump(by_alias=True)

        assert dumped == {
            "imdbID": "tt1",
            "Title": "A",
            "Poster": "N/A",
            "userRating": 7,
            "imdbRating": 6.5,
            "Runtime": 100,
            "Year": "2001",
        }

    def test_accepts_null_numbers_from_older_blobs(self):
        item = WatchedItem.model_validate(
            {"imdbID": "tt1", "Title": "A", "userRating": 5, "imdbRating": None, "Runtime": None}
        )

        assert item.imdb_rating == 0.0
        assert item.runtime == 0

    @pytest.mark.parametrize("rating", [0, 11])
    def test_rejects_out_of_range_rating(self, rating):
        with pytest.raises(ValidationError):
            WatchedItem(imdb_id="tt1", user_rating=rating)

    def test_is_immutable(self):
        item = WatchedItem(imdb_id="tt1", user_rating=5)

        with pytest.raises(ValidationError):
            item.user_rating = 6


def test_summary_display_rounding():
    summary = WatchlistSummary(count=3, avg_imdb_rating=7.456, avg_user_rating=7.0, avg_runtime=119.5)

    assert summary.imdb_rating_display == "7.46"
    assert summary.user_rating_display == "7.00"
    assert summary.runtime_display == "120"


def test_summary_display_rounds_exact_halves_up():
    summary = WatchlistSummary(count=8, avg_imdb_rating=8.375, avg_user_rating=7.125, avg_runtime=122.5)

    assert summary.imdb_rating_display == "8.38"
    assert summary.user_rating_display == "7.13"
    assert summary.runtime_display == "123"


@pytest.mark.parametrize(
    ("value", "places", "expected"),
    [
        (7.125, 2, 7.13),
        (0.125, 2, 0.13),
        (7.124, 2, 7.12),
        (122.5, 0, 123.0),
        (2.5, 0, 3.0),
        (0.0, 2, 0.0),
    ],
)
def test_round_half_up(value, places, expected):
    assert round_half_up(value, places) == expected
