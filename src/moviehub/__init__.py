"""Movie search and personal watchlist."""

__version__ = "0.1.0"

__all__ = ["__version__"]
