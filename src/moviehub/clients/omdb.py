from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

import httpx
from pydantic import ValidationError

from moviehub import __version__
from moviehub.clients.cancellation import CancellationToken
from moviehub.models import MovieDetail, SearchResultSummary

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.omdbapi.com/"
DEFAULT_TIMEOUT = 20.0
USER_AGENT = f"moviehub/{__version__}"

FETCH_FAILED_MESSAGE = "Something went wrong with fetching movies."
NOT_FOUND_MESSAGE = "Movie not found."


class CatalogError(RuntimeError):
    """Raised when the catalog cannot produce a usable answer."""


class MovieNotFound(CatalogError):
    """The provider answered, but flagged the search as having no matches."""

    def __init__(self, message: str = NOT_FOUND_MESSAGE) -> None:
        super().__init__(message)


class CatalogTransportError(CatalogError):
    """Network failure, non-success status, or an unreadable payload."""

    def __init__(self, message: str = FETCH_FAILED_MESSAGE) -> None:
        super().__init__(message)


class OmdbClient:
    """Thin asynchronous wrapper around the OMDb API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        normalized_url = base_url.rstrip("/") + "/"
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        }
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=normalized_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def search(
        self, term: str, token: CancellationToken | None = None
    ) -> list[SearchResultSummary]:
        """Search titles matching ``term``.

        Raises:
            MovieNotFound: the provider reported ``Response: "False"``.
            CatalogTransportError: non-2xx status, network error or bad payload.
            RequestCancelled: ``token`` was cancelled before the answer arrived.
        """
        payload = await self._get_json({"s": term}, token)
        if _is_false(payload.get("Response")):
            logger.info(f"[OMDB] No matches for {term!r}: {payload.get('Error')}")
            raise MovieNotFound()

        raw_results = payload.get("Search") or []
        try:
            return [SearchResultSummary.model_validate(entry) for entry in raw_results]
        except (ValidationError, TypeError) as exc:
            raise CatalogTransportError() from exc

    async def fetch_detail(
        self, imdb_id: str, token: CancellationToken | None = None
    ) -> MovieDetail:
        payload = await self._get_json({"i": imdb_id}, token)
        if _is_false(payload.get("Response")):
            raise CatalogTransportError(str(payload.get("Error") or FETCH_FAILED_MESSAGE))

        try:
            return MovieDetail.model_validate({"imdbID": imdb_id, **payload})
        except ValidationError as exc:
            raise CatalogTransportError() from exc

    async def _get_json(
        self, params: dict[str, str], token: CancellationToken | None
    ) -> dict[str, Any]:
        if token is not None:
            token.raise_if_cancelled()

        query = {"apikey": self._api_key, **params}
        try:
            response = await self._client.get("", params=query)
        except httpx.HTTPError as exc:
            if token is not None:
                token.raise_if_cancelled()
            logger.warning(f"[OMDB] Request failed: {exc}")
            raise CatalogTransportError() from exc

        if token is not None:
            token.raise_if_cancelled()

        if not response.is_success:
            logger.warning(f"[OMDB] Unexpected status {response.status_code}")
            raise CatalogTransportError()

        try:
            payload = response.json()
        except ValueError as exc:  # body was not JSON
            raise CatalogTransportError() from exc
        if not isinstance(payload, dict):
            raise CatalogTransportError()
        return payload

    async def __aenter__(self) -> OmdbClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()


@asynccontextmanager
async def omdb_client(
    api_key: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
):
    client = OmdbClient(api_key, base_url=base_url, timeout=timeout)
    try:
        yield client
    finally:
        await client.close()


def _is_false(value: Any) -> bool:
    return str(value).lower() == "false"


__all__ = [
    "CatalogError",
    "CatalogTransportError",
    "MovieNotFound",
    "OmdbClient",
    "omdb_client",
]
