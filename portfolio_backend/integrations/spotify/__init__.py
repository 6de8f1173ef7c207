"""
Spotify Web API integration (client-credentials search).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_backend.integrations.spotify.client import (
        SpotifyAlbum,
        SpotifyClient,
        SpotifyClientError,
    )

__all__ = [
    "SpotifyAlbum",
    "SpotifyClient",
    "SpotifyClientError",
]


def __getattr__(name: str):
    if name in __all__:
        from portfolio_backend.integrations.spotify import client

        return getattr(client, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
