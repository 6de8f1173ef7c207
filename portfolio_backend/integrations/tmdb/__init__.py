"""
TMDb integration clients.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_backend.integrations.tmdb.client import (
        TmdbClientError,
        TmdbSearchResult,
        find_poster_url,
        search_title,
    )

__all__ = [
    "TmdbClientError",
    "TmdbSearchResult",
    "find_poster_url",
    "search_title",
]


def __getattr__(name: str):
    if name in __all__:
        from portfolio_backend.integrations.tmdb import client

        return getattr(client, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
