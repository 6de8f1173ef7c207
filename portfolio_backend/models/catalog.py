from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

FAVORITES = "favorites"
LEAST_FAVORITE = "least-favorite"
RECENTLY_WATCHED = "recently-watched"
RECENTLY_RELEASED = "recently-released"
OTHER = "other"

MOVIE_CATEGORIES = (FAVORITES, LEAST_FAVORITE, RECENTLY_WATCHED, RECENTLY_RELEASED, OTHER)

MEDIA_TYPES = ("image", "gif")


@dataclass
class AlbumRecord:
    """
    Album in the collection.

    `image_url` starts empty and is filled by the cover enrichment pass, which may
    also correct `title`/`artist` spelling from Spotify.
    """

    id: str
    title: str
    artist: str
    genre: str
    created_at: datetime
    genres: list[str] = field(default_factory=list)
    is_favorite: bool = False
    image_url: str | None = None

    def has_genre(self, genre: str) -> bool:
        return self.genre == genre or genre in self.genres


@dataclass
class MovieRecord:
    """
    Movie derived from the Letterboxd exports.

    `watched_date` is the rating date from the ratings export, replaced by the logged
    date when the movie also appears in the recent diary.
    """

    id: str
    title: str
    category: str
    created_at: datetime
    year: int | None = None
    rating: float | None = None
    letterboxd_url: str | None = None
    review: str | None = None
    watched_date: date | None = None
    image_url: str | None = None


@dataclass
class EntertainmentItemRecord:
    id: str
    category: str
    media_url: str
    media_type: str
    created_at: datetime
    title: str | None = None
