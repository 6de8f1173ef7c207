"""
Letterboxd export ingestion (ratings + diary CSVs).

The ratings export seeds the movie collection and assigns each movie a category bucket.
The diary export independently decides which movies count as recently watched.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.models.catalog import (
    FAVORITES,
    LEAST_FAVORITE,
    OTHER,
    RECENTLY_RELEASED,
    RECENTLY_WATCHED,
    MovieRecord,
)
from portfolio_backend.utils.dates import months_before, parse_iso_date

logger = logging.getLogger(__name__)

MAX_RATING = 5.0
LEAST_FAVORITE_MAX_RATING = 1.5
RECENT_RELEASE_YEARS = 2
RECENTLY_WATCHED_MONTHS = 6
RECENTLY_WATCHED_LIMIT = 20


class LetterboxdCsvError(RuntimeError):
    pass


@dataclass(frozen=True)
class RatedMovie:
    name: str
    year: int
    rating: float
    letterboxd_url: str
    category: str
    rated_on: date | None = None
    review: str | None = None


@dataclass(frozen=True)
class DiaryEntry:
    name: str
    logged_on: date
    year: int | None = None
    rating: float | None = None
    letterboxd_url: str | None = None
    watched_on: date | None = None


def _normalize_header(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", (value or "").strip().lower())


def _header_index_map(headers: list[str]) -> dict[str, int]:
    return {_normalize_header(h): idx for idx, h in enumerate(headers)}


def _cell(row: list[str], idx: int | None) -> str:
    if idx is None or idx >= len(row):
        return ""
    return (row[idx] or "").strip()


def _as_int(value: str) -> int | None:
    raw = (value or "").strip()
    try:
        return int(raw)
    except ValueError:
        return None


def _as_float(value: str) -> float | None:
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def read_csv_rows(text: str) -> tuple[dict[str, int], list[list[str]]]:
    """
    Split CSV text into a normalized header index map and data rows.

    Quoted fields may contain commas. Blank lines are dropped.
    """

    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    try:
        headers = next(reader)
    except StopIteration as exc:
        raise LetterboxdCsvError("CSV is empty (no header row).") from exc
    except csv.Error as exc:
        raise LetterboxdCsvError(f"CSV header could not be parsed: {exc}") from exc

    rows: list[list[str]] = []
    try:
        for row in reader:
            if not row or not any(cell.strip() for cell in row):
                continue
            rows.append(row)
    except csv.Error as exc:
        raise LetterboxdCsvError(f"CSV could not be parsed: {exc}") from exc
    return _header_index_map(headers), rows


def _require_columns(header_map: dict[str, int], names: tuple[str, ...]) -> None:
    missing = [name for name in names if name not in header_map]
    if missing:
        raise LetterboxdCsvError(f"CSV is missing required columns: {', '.join(missing)}")


def categorize_rating(rating: float, year: int | None, *, today: date | None = None) -> str:
    """
    Category bucket for a rated movie; the first rule that applies wins.

    1. perfect rating -> favorites
    2. rating at or below the low threshold -> least-favorite
    3. released within the recent window -> recently-released
    4. otherwise -> other
    """

    today = today or date.today()
    if rating == MAX_RATING:
        return FAVORITES
    if rating <= LEAST_FAVORITE_MAX_RATING:
        return LEAST_FAVORITE
    if year is not None and year >= today.year - RECENT_RELEASE_YEARS:
        return RECENTLY_RELEASED
    return OTHER


def parse_ratings_csv(text: str, *, today: date | None = None) -> list[RatedMovie]:
    header_map, rows = read_csv_rows(text)
    _require_columns(header_map, ("name", "year", "rating", "letterboxduri"))

    name_idx = header_map["name"]
    year_idx = header_map["year"]
    rating_idx = header_map["rating"]
    uri_idx = header_map["letterboxduri"]
    date_idx = header_map.get("date")
    review_idx = header_map.get("review")

    movies: list[RatedMovie] = []
    for row in rows:
        name = _cell(row, name_idx)
        year = _as_int(_cell(row, year_idx))
        rating = _as_float(_cell(row, rating_idx))
        letterboxd_url = _cell(row, uri_idx)
        if not name or not year or not rating or not letterboxd_url:
            continue
        movies.append(
            RatedMovie(
                name=name,
                year=year,
                rating=rating,
                letterboxd_url=letterboxd_url,
                category=categorize_rating(rating, year, today=today),
                rated_on=parse_iso_date(_cell(row, date_idx)),
                review=_cell(row, review_idx) or None,
            )
        )
    return movies


def parse_diary_csv(text: str) -> list[DiaryEntry]:
    header_map, rows = read_csv_rows(text)
    _require_columns(header_map, ("date", "name"))

    date_idx = header_map["date"]
    name_idx = header_map["name"]
    year_idx = header_map.get("year")
    rating_idx = header_map.get("rating")
    uri_idx = header_map.get("letterboxduri")
    watched_idx = header_map.get("watcheddate")

    entries: list[DiaryEntry] = []
    for row in rows:
        name = _cell(row, name_idx)
        logged_on = parse_iso_date(_cell(row, date_idx))
        if not name or logged_on is None:
            continue
        entries.append(
            DiaryEntry(
                name=name,
                logged_on=logged_on,
                year=_as_int(_cell(row, year_idx)) or None,
                rating=_as_float(_cell(row, rating_idx)) or None,
                letterboxd_url=_cell(row, uri_idx) or None,
                watched_on=parse_iso_date(_cell(row, watched_idx)),
            )
        )
    return entries


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LetterboxdCsvError(f"Unable to read {path}: {exc}") from exc


def load_rated_movies(path: Path, *, today: date | None = None) -> list[RatedMovie]:
    """Ratings export rows with categories; a missing or malformed file yields []."""
    try:
        movies = parse_ratings_csv(_read_text(path), today=today)
    except LetterboxdCsvError as exc:
        logger.error(f"Error processing Letterboxd ratings CSV: {exc}")
        return []
    logger.info(f"Loaded {len(movies)} movies from Letterboxd CSV {path}")
    return movies


def load_diary_entries(path: Path) -> list[DiaryEntry]:
    try:
        return parse_diary_csv(_read_text(path))
    except LetterboxdCsvError as exc:
        logger.error(f"Error loading recently watched from diary: {exc}")
        return []


def seed_rated_movies(store: CatalogStore, movies: list[RatedMovie]) -> list[MovieRecord]:
    return [
        store.add_movie(
            title=movie.name,
            year=movie.year,
            rating=movie.rating,
            category=movie.category,
            letterboxd_url=movie.letterboxd_url,
            review=movie.review,
            watched_date=movie.rated_on,
        )
        for movie in movies
    ]


def apply_recently_watched(
    store: CatalogStore,
    entries: list[DiaryEntry],
    *,
    today: date | None = None,
    limit: int = RECENTLY_WATCHED_LIMIT,
) -> list[MovieRecord]:
    """
    Build the recently-watched bucket from diary entries.

    Entries logged within the last six months are matched to existing movies by exact
    (title, year); matches take the logged date as their watched date, and unmatched
    entries become new minimal movies in the recently-watched category. The result is
    de-duplicated, newest first, capped at `limit`, and recorded on the store.
    """

    today = today or date.today()
    cutoff = months_before(today, RECENTLY_WATCHED_MONTHS)

    recent = [entry for entry in entries if entry.logged_on >= cutoff]
    # Oldest first so the latest log of a repeated title wins.
    recent.sort(key=lambda e: e.logged_on)

    by_id: dict[str, MovieRecord] = {}
    for entry in recent:
        movie = store.find_movie(entry.name, entry.year)
        if movie is None:
            movie = store.add_movie(
                title=entry.name,
                year=entry.year,
                rating=entry.rating,
                category=RECENTLY_WATCHED,
                letterboxd_url=entry.letterboxd_url,
                watched_date=entry.logged_on,
            )
        else:
            movie.watched_date = entry.logged_on
        by_id[movie.id] = movie

    ordered = sorted(
        by_id.values(),
        key=lambda m: m.watched_date.toordinal() if m.watched_date else 0,
        reverse=True,
    )[: max(0, limit)]
    store.set_recently_watched(m.id for m in ordered)
    return ordered
