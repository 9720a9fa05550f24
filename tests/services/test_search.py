"""Tests for the search controller state machine."""

import pytest

from moviehub.clients import CatalogTransportError, MovieNotFound
from moviehub.services import SearchController
from tests.fixtures.fake_catalog import ControlledCatalog, drain, summaries


@pytest.fixture
def catalog():
    return ControlledCatalog()


@pytest.fixture
def controller(catalog):
    return SearchController(catalog)


class TestSearchController:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "a", "ab", "  ab  ", "   "])
    async def test_short_query_clears_without_network(self, controller, catalog, query):
        controller.results = summaries("Stale")
        controller.error = "old error"

        controller.set_query(query)
        await drain()

        assert controller.query == query
        assert controller.results == []
        assert controller.error is None
        assert controller.is_loading is False
        assert catalog.search_calls == []

    @pytest.mark.asyncio
    async def test_search_success(self, controller, catalog):
        controller.set_query("inception")

        assert controller.is_loading is True
        assert controller.error is None

        await drain()
        assert [call.argument for call in catalog.search_calls] == ["inception"]

        catalog.search_calls[0].resolve(summaries("Inception", "Inception 2"))
        await controller.wait()

        assert controller.is_loading is False
        assert controller.result_count == 2
        assert controller.results[0].title == "Inception"

    @pytest.mark.asyncio
    async def test_not_found(self, controller, catalog):
        controller.results = summaries("Stale")
        controller.set_query("zzzzzz")
        await drain()

        catalog.search_calls[0].fail(MovieNotFound())
        await controller.wait()

        assert controller.error == "Movie not found."
        assert controller.results == []
        assert controller.is_loading is False

    @pytest.mark.asyncio
    async def test_transport_error(self, controller, catalog):
        controller.set_query("inception")
        await drain()

        catalog.search_calls[0].fail(CatalogTransportError())
        await controller.wait()

        assert controller.error == "Something went wrong with fetching movies."
        assert controller.results == []
        assert controller.is_loading is False

    @pytest.mark.asyncio
    async def test_new_query_clears_previous_error(self, controller, catalog):
        controller.set_query("zzzzzz")
        await drain()
        catalog.search_calls[0].fail(MovieNotFound())
        await controller.wait()

        controller.set_query("inception")

        assert controller.error is None
        assert controller.is_loading is True

    @pytest.mark.asyncio
    async def test_new_query_aborts_previous_request(self, controller, catalog):
        controller.set_query("inc")
        await drain()
        controller.set_query("ince")
        await drain()

        first, second = catalog.search_calls
        assert first.token.cancelled is True
        assert first.future.cancelled() is True
        assert first.abandoned is True
        assert second.token.cancelled is False
        assert second.future.done() is False

    @pytest.mark.asyncio
    async def test_request_superseded_before_it_starts_never_reaches_catalog(self, controller, catalog):
        controller.set_query("inc")
        controller.set_query("inception")
        await drain()

        assert [call.argument for call in catalog.search_calls] == ["inception"]

        catalog.search_calls[0].resolve(summaries("Inception"))
        await controller.wait()
        assert controller.result_count == 1

    @pytest.mark.asyncio
    async def test_out_of_order_resolution_keeps_latest_results(self):
        catalog = ControlledCatalog(detached=True)
        controller = SearchController(catalog)
        for query in ("inc", "incep", "inception"):
            controller.set_query(query)
            await drain()
        first, second, third = catalog.search_calls

        third.resolve(summaries("Inception"))
        await drain()
        first.resolve(summaries("Incendies", "Incredibles"))
        second.resolve(summaries("Inception", "Inception 2"))
        await drain()

        assert first.abandoned is True
        assert second.abandoned is True
        assert [movie.title for movie in controller.results] == ["Inception"]
        assert controller.is_loading is False
        assert controller.error is None

    @pytest.mark.asyncio
    async def test_superseded_failure_is_ignored(self):
        catalog = ControlledCatalog(detached=True)
        controller = SearchController(catalog)
        controller.set_query("inc")
        await drain()
        controller.set_query("inception")
        await drain()
        first, second = catalog.search_calls

        first.fail(MovieNotFound())
        await drain()

        assert controller.error is None
        assert controller.is_loading is True

        second.resolve(summaries("Inception"))
        await controller.wait()
        assert controller.result_count == 1

    @pytest.mark.asyncio
    async def test_clearing_query_aborts_in_flight_search(self, controller, catalog):
        controller.set_query("inception")
        await drain()
        catalog.search_calls[0].resolve(summaries("Inception"))
        await controller.wait()

        controller.set_query("matrix")
        await drain()
        controller.set_query("ma")
        await drain()

        assert catalog.search_calls[1].future.cancelled() is True
        assert controller.results == []
        assert controller.is_loading is False
        assert controller.error is None

    @pytest.mark.asyncio
    async def test_late_response_after_clearing_does_not_touch_state(self):
        catalog = ControlledCatalog(detached=True)
        controller = SearchController(catalog)

        controller.set_query("matrix")
        await drain()
        controller.set_query("ma")
        catalog.search_calls[0].resolve(summaries("The Matrix"))
        await drain()

        assert controller.results == []
        assert controller.is_loading is False
        assert controller.error is None

    @pytest.mark.asyncio
    async def test_on_search_hook_runs_for_real_searches_only(self, catalog):
        calls = []
        controller = SearchController(catalog, on_search=lambda: calls.append("close"))

        controller.set_query("ab")
        controller.set_query("abc")

        assert calls == ["close"]

    @pytest.mark.asyncio
    async def test_custom_minimum_length(self, catalog):
        controller = SearchController(catalog, min_query_length=5)

        controller.set_query("dune")
        await drain()
        assert catalog.search_calls == []

        controller.set_query("dunes")
        await drain()
        assert len(catalog.search_calls) == 1

    @pytest.mark.asyncio
    async def test_query_is_sent_untrimmed(self, controller, catalog):
        controller.set_query(" dune ")
        await drain()

        assert catalog.search_calls[0].argument == " dune "

    @pytest.mark.asyncio
    async def test_aclose_cancels_pending_searches(self, controller, catalog):
        controller.set_query("inception")
        await drain()

        await controller.aclose()

        assert catalog.search_calls[0].token.cancelled is True
        assert catalog.search_calls[0].future.cancelled() is True
