from __future__ import annotations

from datetime import date

from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.models.catalog import (
    FAVORITES,
    LEAST_FAVORITE,
    RECENTLY_RELEASED,
    RECENTLY_WATCHED,
    MovieRecord,
)
from portfolio_backend.utils.dates import months_before

RECENT_VIEW_LIMIT = 20
RECENT_VIEW_MONTHS = 6


def _title_key(movie: MovieRecord) -> str:
    return movie.title.casefold()


def _watched_ordinal(movie: MovieRecord) -> int:
    return movie.watched_date.toordinal() if movie.watched_date else 0


def sort_movies_for_category(movies: list[MovieRecord], category: str) -> list[MovieRecord]:
    """
    Apply the display order for a category bucket.

    - favorites: rating high to low, then title
    - least-favorite: rating low to high
    - recently-watched: most recently watched first
    - recently-released: newest release year first, then most recently watched
    - anything else: title
    """

    if category == FAVORITES:
        return sorted(movies, key=lambda m: (-(m.rating or 0), _title_key(m)))
    if category == LEAST_FAVORITE:
        return sorted(movies, key=lambda m: m.rating or 0)
    if category == RECENTLY_WATCHED:
        return sorted(movies, key=_watched_ordinal, reverse=True)
    if category == RECENTLY_RELEASED:
        return sorted(movies, key=lambda m: (m.year or 0, _watched_ordinal(m)), reverse=True)
    return sorted(movies, key=_title_key)


def list_movies(store: CatalogStore, *, category: str | None = None) -> list[MovieRecord]:
    movies = store.movies()
    if not category:
        return movies
    return sort_movies_for_category([m for m in movies if m.category == category], category)


def list_recently_watched(
    store: CatalogStore,
    *,
    today: date | None = None,
    limit: int = RECENT_VIEW_LIMIT,
) -> list[MovieRecord]:
    """
    Diary-derived bucket computed at startup (already newest first), minus entries that
    have aged out of the six-month window since then.
    """

    today = today or date.today()
    cutoff = months_before(today, RECENT_VIEW_MONTHS)
    rows = [m for m in store.recently_watched() if m.watched_date is not None and m.watched_date >= cutoff]
    return rows[: max(0, limit)]


def list_recently_released(
    store: CatalogStore,
    *,
    today: date | None = None,
    limit: int = RECENT_VIEW_LIMIT,
) -> list[MovieRecord]:
    """
    Movies released this year or last year that were also watched in the last six months.
    """

    today = today or date.today()
    cutoff = months_before(today, RECENT_VIEW_MONTHS)
    rows = [
        m
        for m in store.movies()
        if m.year is not None
        and m.year >= today.year - 1
        and m.watched_date is not None
        and m.watched_date >= cutoff
    ]
    rows.sort(key=_watched_ordinal, reverse=True)
    return rows[: max(0, limit)]
