"""
Best-effort reconciliation of local album titles against Spotify search hits.

Matching is deliberately loose (two-way substring containment on normalized text) and
is tightened for a few albums whose search results are dominated by sequels, deluxe
editions or remasters.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from portfolio_backend.integrations.spotify.client import SpotifyAlbum, SpotifyClient, SpotifyClientError

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown Artist"
SEARCH_LIMIT = 5

_QUOTES_RE = re.compile(r"['\"]")
_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class AlbumMatch:
    title: str
    artist: str
    image_url: str | None
    spotify_id: str | None


def normalize_match_text(value: str) -> str:
    return _WS_RE.sub(" ", _QUOTES_RE.sub("", (value or "").lower())).strip()


def _contains_either_way(a: str, b: str) -> bool:
    left = normalize_match_text(a)
    right = normalize_match_text(b)
    return left in right or right in left


def titles_match(candidate_title: str, local_title: str) -> bool:
    return _contains_either_way(candidate_title, local_title)


def artists_match(candidate_artists: tuple[str, ...] | list[str], local_artist: str) -> bool:
    if local_artist == UNKNOWN_ARTIST:
        return True
    return any(_contains_either_way(name, local_artist) for name in candidate_artists)


# --- Per-album tie-breakers ---


def _prefer_original_release(album: SpotifyAlbum) -> bool:
    name = album.name.lower()
    return not any(marker in name for marker in ("mix", "deluxe", "remaster"))


def _carter_v_not_vi(album: SpotifyAlbum) -> bool:
    name = album.name.lower()
    return "carter v" in name and "carter vi" not in name


def _first_blueprint(album: SpotifyAlbum) -> bool:
    name = album.name.lower()
    if name == "the blueprint":
        return True
    return "blueprint" in name and "2" not in name and "3" not in name


def _dreamville_d_day(album: SpotifyAlbum) -> bool:
    name = album.name.lower()
    if "d-day" not in name:
        return False
    if "gangsta" not in name and "grillz" not in name:
        return False
    return any("dreamville" in a.lower() or "j. cole" in a.lower() for a in album.artists)


ALBUM_OVERRIDES: dict[tuple[str, str], Callable[[SpotifyAlbum], bool]] = {
    ("What's Going On", "Marvin Gaye"): _prefer_original_release,
    ("Tha Carter V", "Lil Wayne"): _carter_v_not_vi,
    ("The Blueprint", "Jay-Z"): _first_blueprint,
    ("D-Day: A Gangsta Grillz Mixtape", "Dreamville"): _dreamville_d_day,
}


def is_acceptable_album(candidate: SpotifyAlbum, *, title: str, artist: str) -> bool:
    if not titles_match(candidate.name, title):
        return False
    if not artists_match(candidate.artists, artist):
        return False
    override = ALBUM_OVERRIDES.get((title, artist))
    if override is not None:
        return override(candidate)
    return True


def build_search_queries(title: str, artist: str) -> list[str]:
    """Search strategies from most to least specific."""
    first_artist_token = artist.split(" ")[0] if artist else ""
    return [
        f'album:"{title}" artist:"{artist}"',
        f"{title} {artist}",
        f'"{title}"',
        f"{title} {first_artist_token}",
    ]


def pick_album_match(candidates: list[SpotifyAlbum], *, title: str, artist: str) -> AlbumMatch | None:
    for candidate in candidates:
        if is_acceptable_album(candidate, title=title, artist=artist):
            return AlbumMatch(
                title=candidate.name,
                artist=candidate.artists[0] if candidate.artists else artist,
                image_url=candidate.image_url,
                spotify_id=candidate.spotify_id or None,
            )
    return None


def find_album_match(client: SpotifyClient, title: str, artist: str) -> AlbumMatch | None:
    """
    Run the search strategies in order and return the first acceptable hit.

    A failed search for one strategy moves on to the next; a failed token exchange ends
    the lookup. Returns None when nothing acceptable turns up.
    """

    try:
        client.get_access_token()
    except SpotifyClientError as exc:
        logger.error(f"Error searching Spotify for {title!r} by {artist}: {exc}")
        return None

    for query in build_search_queries(title, artist):
        try:
            candidates = client.search_albums(query, limit=SEARCH_LIMIT)
        except SpotifyClientError as exc:
            logger.error(f"Spotify API error for {title!r} by {artist}: {exc}")
            continue
        match = pick_album_match(candidates, title=title, artist=artist)
        if match is not None:
            return match

    logger.info(f"No suitable Spotify results for {title!r} by {artist}")
    return None
