from .base import MovieCatalog
from .cancellation import CancellationToken, RequestCancelled, RequestSlot
from .omdb import CatalogError, CatalogTransportError, MovieNotFound, OmdbClient, omdb_client

__all__ = [
    "CancellationToken",
    "CatalogError",
    "CatalogTransportError",
    "MovieCatalog",
    "MovieNotFound",
    "OmdbClient",
    "RequestCancelled",
    "RequestSlot",
    "omdb_client",
]
