from __future__ import annotations

from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.models.catalog import FAVORITES, AlbumRecord


def list_albums(store: CatalogStore, *, genre: str | None = None) -> list[AlbumRecord]:
    """
    List albums, optionally filtered by genre.

    The `favorites` pseudo-genre selects albums flagged as favorites; any other value
    matches the primary genre or one of the secondary genres.
    """

    albums = store.albums()
    if not genre:
        return albums
    if genre == FAVORITES:
        return [album for album in albums if album.is_favorite]
    return [album for album in albums if album.has_genre(genre)]
