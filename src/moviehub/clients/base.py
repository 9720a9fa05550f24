from __future__ import annotations

from typing import Protocol

from moviehub.clients.cancellation import CancellationToken
from moviehub.models import MovieDetail, SearchResultSummary


class MovieCatalog(Protocol):
    """Protocol for catalog backends that answer searches and detail lookups."""

    async def search(
        self, term: str, token: CancellationToken | None = None
    ) -> list[SearchResultSummary]:
        """Return summaries matching ``term``."""

    async def fetch_detail(
        self, imdb_id: str, token: CancellationToken | None = None
    ) -> MovieDetail:
        """Return the full record for ``imdb_id``."""


__all__ = ["MovieCatalog"]
