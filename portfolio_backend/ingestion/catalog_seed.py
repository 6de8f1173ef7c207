"""
Startup seeding of the catalog store.

Albums and entertainment items come from JSON files bundled with the package; movies
come from the Letterboxd exports configured in `CatalogSettings`.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from portfolio_backend.config import CatalogSettings
from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.ingestion.letterboxd import (
    apply_recently_watched,
    load_diary_entries,
    load_rated_movies,
    seed_rated_movies,
)
from portfolio_backend.models.catalog import MEDIA_TYPES

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
ALBUMS_PATH = DATA_DIR / "albums.json"
ENTERTAINMENT_PATH = DATA_DIR / "entertainment.json"

DEFAULT_GENRE = "other"

FAVORITE_ALBUM_TITLES: tuple[str, ...] = (
    "Bad Cameo",
    "Care Package",
    "Honestly, Nevermind",
    "Her Loss",
    "IGOR",
    "If You're Reading This It's Too Late",
    "Let's Start Here",
    "Nothing Was the Same",
    "Onepointfive",
    "Professional Rapper",
    "Piano Man",
    "Pet Sounds",
    "Revenge of the Dreamers III",
    "Renaissance",
    "The Stranger",
    "The Forever Story",
    "The Eminem Show",
    "The Blueprint",
    "The Blueprint 3",
    "Turnstiles",
    "The Velvet Underground & Nico",
    "Take Care",
    "Ultimate Sinatra",
    "What's Going On",
)

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class SeedSummary:
    albums: int
    movies: int
    recently_watched: int
    entertainment_items: int


def _normalize_favorite_title(value: str) -> str:
    return _WS_RE.sub(" ", _NON_WORD_RE.sub("", value.lower())).strip()


def is_favorite_album(title: str, favorites: tuple[str, ...] = FAVORITE_ALBUM_TITLES) -> bool:
    """Flexible favorite check: equal or contained either way after punctuation is dropped."""
    normalized_title = _normalize_favorite_title(title)
    for favorite in favorites:
        normalized_favorite = _normalize_favorite_title(favorite)
        if (
            normalized_favorite == normalized_title
            or normalized_favorite in normalized_title
            or normalized_title in normalized_favorite
        ):
            return True
    return False


def _load_json_list(path: Path) -> list[dict[str, Any]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON list.")
    return [item for item in payload if isinstance(item, dict)]


def seed_albums(store: CatalogStore, path: Path = ALBUMS_PATH) -> int:
    count = 0
    for item in _load_json_list(path):
        title = str(item.get("title") or "").strip()
        artist = str(item.get("artist") or "").strip()
        if not title or not artist:
            continue
        genres = [str(g) for g in item.get("genres") or [] if str(g).strip()]
        store.add_album(
            title=title,
            artist=artist,
            genre=genres[0] if genres else DEFAULT_GENRE,
            genres=genres,
            is_favorite=is_favorite_album(title),
        )
        count += 1
    logger.info(f"Loaded {count} albums from {path.name}")
    return count


def seed_entertainment_items(store: CatalogStore, path: Path = ENTERTAINMENT_PATH) -> int:
    count = 0
    for item in _load_json_list(path):
        media_url = str(item.get("media_url") or "").strip()
        category = str(item.get("category") or "").strip()
        media_type = str(item.get("media_type") or "").strip()
        if not media_url or not category or media_type not in MEDIA_TYPES:
            logger.warning(f"Skipping malformed entertainment item: {item!r}")
            continue
        store.add_entertainment_item(
            title=item.get("title") or None,
            category=category,
            media_url=media_url,
            media_type=media_type,
        )
        count += 1
    logger.info(f"Loaded {count} entertainment items from {path.name}")
    return count


def seed_catalog(
    store: CatalogStore,
    settings: CatalogSettings,
    *,
    today: date | None = None,
    albums_path: Path = ALBUMS_PATH,
    entertainment_path: Path = ENTERTAINMENT_PATH,
) -> SeedSummary:
    """
    Populate an empty store. Movie CSV problems are logged and leave the movie list short.
    """

    today = today or date.today()
    albums = seed_albums(store, albums_path)

    rated = load_rated_movies(settings.ratings_csv, today=today)
    seed_rated_movies(store, rated)
    recently_watched = apply_recently_watched(store, load_diary_entries(settings.diary_csv), today=today)

    entertainment = seed_entertainment_items(store, entertainment_path)

    summary = SeedSummary(
        albums=albums,
        movies=len(store.movies()),
        recently_watched=len(recently_watched),
        entertainment_items=entertainment,
    )
    logger.info(
        f"Catalog seeded: albums={summary.albums} movies={summary.movies} "
        f"recently_watched={summary.recently_watched} entertainment={summary.entertainment_items}"
    )
    return summary
