"""
Query helpers over the catalog store.
"""

from portfolio_backend.repositories.albums import list_albums
from portfolio_backend.repositories.entertainment import list_entertainment_items
from portfolio_backend.repositories.movies import (
    list_movies,
    list_recently_released,
    list_recently_watched,
    sort_movies_for_category,
)

__all__ = [
    "list_albums",
    "list_entertainment_items",
    "list_movies",
    "list_recently_released",
    "list_recently_watched",
    "sort_movies_for_category",
]
