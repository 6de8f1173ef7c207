"""
In-process catalog store.

One `CatalogStore` is built at startup and shared by every request handler. Records
are only ever appended, and the enrichment passes mutate a few fields of existing
album/movie records in place; readers may observe a record before or after that
happens.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Iterable
from uuid import uuid4

from portfolio_backend.models.catalog import AlbumRecord, EntertainmentItemRecord, MovieRecord
from portfolio_backend.models.submissions import ContactSubmissionRecord, RecommendationRecord


def _new_id() -> str:
    return str(uuid4())


def _now_utc() -> datetime:
    return datetime.now(UTC)


class CatalogStore:
    def __init__(self) -> None:
        self._albums: dict[str, AlbumRecord] = {}
        self._movies: dict[str, MovieRecord] = {}
        self._entertainment_items: dict[str, EntertainmentItemRecord] = {}
        self._contact_submissions: dict[str, ContactSubmissionRecord] = {}
        self._recommendations: dict[str, RecommendationRecord] = {}
        self._recently_watched_ids: list[str] = []

    # --- Albums ---

    def add_album(
        self,
        *,
        title: str,
        artist: str,
        genre: str,
        genres: Iterable[str] = (),
        is_favorite: bool = False,
        image_url: str | None = None,
    ) -> AlbumRecord:
        album = AlbumRecord(
            id=_new_id(),
            title=title,
            artist=artist,
            genre=genre,
            genres=list(genres),
            is_favorite=bool(is_favorite),
            image_url=image_url or None,
            created_at=_now_utc(),
        )
        self._albums[album.id] = album
        return album

    def albums(self) -> list[AlbumRecord]:
        return list(self._albums.values())

    # --- Movies ---

    def add_movie(
        self,
        *,
        title: str,
        category: str,
        year: int | None = None,
        rating: float | None = None,
        letterboxd_url: str | None = None,
        review: str | None = None,
        watched_date: date | None = None,
        image_url: str | None = None,
    ) -> MovieRecord:
        movie = MovieRecord(
            id=_new_id(),
            title=title,
            category=category,
            year=year,
            rating=rating,
            letterboxd_url=letterboxd_url or None,
            review=review or None,
            watched_date=watched_date,
            image_url=image_url or None,
            created_at=_now_utc(),
        )
        self._movies[movie.id] = movie
        return movie

    def movies(self) -> list[MovieRecord]:
        return list(self._movies.values())

    def find_movie(self, title: str, year: int | None) -> MovieRecord | None:
        """Exact (title, year) lookup; first inserted match wins."""
        for movie in self._movies.values():
            if movie.title == title and movie.year == year:
                return movie
        return None

    def set_recently_watched(self, movie_ids: Iterable[str]) -> None:
        self._recently_watched_ids = [movie_id for movie_id in movie_ids if movie_id in self._movies]

    def recently_watched(self) -> list[MovieRecord]:
        return [self._movies[movie_id] for movie_id in self._recently_watched_ids]

    # --- Entertainment ---

    def add_entertainment_item(
        self,
        *,
        category: str,
        media_url: str,
        media_type: str,
        title: str | None = None,
    ) -> EntertainmentItemRecord:
        item = EntertainmentItemRecord(
            id=_new_id(),
            title=title or None,
            category=category,
            media_url=media_url,
            media_type=media_type,
            created_at=_now_utc(),
        )
        self._entertainment_items[item.id] = item
        return item

    def entertainment_items(self) -> list[EntertainmentItemRecord]:
        return list(self._entertainment_items.values())

    # --- Submissions ---

    def add_contact_submission(self, *, name: str, email: str, message: str | None = None) -> ContactSubmissionRecord:
        submission = ContactSubmissionRecord(
            id=_new_id(),
            name=name,
            email=email,
            message=message or None,
            created_at=_now_utc(),
        )
        self._contact_submissions[submission.id] = submission
        return submission

    def contact_submissions(self) -> list[ContactSubmissionRecord]:
        return list(self._contact_submissions.values())

    def add_recommendation(
        self,
        *,
        type: str,
        title: str,
        description: str | None = None,
        submitter_name: str | None = None,
        submitter_email: str | None = None,
    ) -> RecommendationRecord:
        recommendation = RecommendationRecord(
            id=_new_id(),
            type=type,
            title=title,
            description=description or None,
            submitter_name=submitter_name or None,
            submitter_email=submitter_email or None,
            created_at=_now_utc(),
        )
        self._recommendations[recommendation.id] = recommendation
        return recommendation

    def recommendations(self) -> list[RecommendationRecord]:
        return list(self._recommendations.values())
