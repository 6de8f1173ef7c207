from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from threading import Event
from dataclasses import dataclass, field
from typing import Callable, Iterable, TypeVar

import requests

from portfolio_backend.config import CatalogSettings
from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.ingestion.manual_covers import get_manual_cover_url, is_collaboration, is_preserved
from portfolio_backend.ingestion.title_matching import AlbumMatch, find_album_match
from portfolio_backend.integrations.spotify.client import SpotifyClient, SpotifyClientError
from portfolio_backend.integrations.tmdb.client import TmdbClientError, find_poster_url, resolve_api_key
from portfolio_backend.models.catalog import AlbumRecord, MovieRecord

logger = logging.getLogger(__name__)

ALBUM_BATCH_SIZE = 3
ALBUM_BATCH_DELAY_SECONDS = 0.5
MOVIE_BATCH_SIZE = 10
MOVIE_CALL_DELAY_SECONDS = 0.1
MOVIE_BATCH_DELAY_SECONDS = 1.0

_RecordT = TypeVar("_RecordT")


@dataclass(frozen=True)
class EnrichFailure:
    record_id: str
    name: str
    message: str


@dataclass(frozen=True)
class EnrichSummary:
    attempted: int
    updated: int
    skipped: int
    failed: int
    manual: int = 0
    failures: list[EnrichFailure] = field(default_factory=list)


def _batches(rows: list[_RecordT], size: int) -> Iterable[list[_RecordT]]:
    size = max(1, int(size))
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


def _stop_requested(stop_event: Event | None) -> bool:
    return stop_event is not None and stop_event.is_set()


def apply_manual_covers(albums: Iterable[AlbumRecord]) -> int:
    """Set mapped local covers; no external calls. Returns how many albums were mapped."""
    applied = 0
    for album in albums:
        manual_url = get_manual_cover_url(album.title, album.artist)
        if manual_url:
            album.image_url = manual_url
            applied += 1
    return applied


def apply_album_match(album: AlbumRecord, match: AlbumMatch) -> bool:
    """
    Copy a Spotify match onto an album. Returns False when the match carries no image.

    Spotify's spelling replaces the local title unless the title is preserved, and the
    local artist unless it is preserved or a collaboration credit.
    """

    if not match.image_url:
        return False

    album.image_url = match.image_url

    if match.title != album.title and not is_preserved(album.title):
        logger.info(f"Updated {album.title!r} to {match.title!r}")
        album.title = match.title

    if match.artist != album.artist and not is_preserved(album.artist) and not is_collaboration(album.artist):
        logger.info(f"Updated {album.artist!r} to {match.artist!r}")
        album.artist = match.artist

    return True


def enrich_album_covers(
    store: CatalogStore,
    client: SpotifyClient,
    *,
    batch_size: int = ALBUM_BATCH_SIZE,
    batch_delay_seconds: float = ALBUM_BATCH_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    stop_event: Event | None = None,
) -> EnrichSummary:
    """
    Fill missing album covers: manual mappings first, then Spotify search in small batches.
    """

    albums = store.albums()
    manual = apply_manual_covers(albums)

    if not client.has_credentials:
        logger.warning("Spotify credentials not found; skipping Spotify cover lookup.")
        return EnrichSummary(attempted=0, updated=0, skipped=len(albums), failed=0, manual=manual)

    pending = [album for album in albums if not album.image_url]
    skipped = len(albums) - len(pending)
    logger.info(f"Starting Spotify cover fetching for {len(pending)} albums...")

    attempted = 0
    updated = 0
    failed = 0
    failures: list[EnrichFailure] = []

    def run_one(album: AlbumRecord) -> tuple[AlbumRecord, AlbumMatch | None, str | None]:
        try:
            return album, find_album_match(client, album.title, album.artist), None
        except (SpotifyClientError, requests.RequestException, RuntimeError, ValueError) as exc:
            return album, None, str(exc)

    total_batches = (len(pending) + max(1, batch_size) - 1) // max(1, batch_size)
    with ThreadPoolExecutor(max_workers=max(1, batch_size)) as pool:
        for batch_number, batch in enumerate(_batches(pending, batch_size), start=1):
            if _stop_requested(stop_event):
                logger.info(f"Spotify cover fetching stopped before batch {batch_number}/{total_batches}.")
                break
            for album, match, error in pool.map(run_one, batch):
                attempted += 1
                if error:
                    failed += 1
                    failures.append(EnrichFailure(record_id=album.id, name=album.title, message=error))
                    logger.error(f"Error fetching Spotify cover for {album.title!r} by {album.artist}: {error}")
                    continue
                if match is not None and apply_album_match(album, match):
                    updated += 1
                    logger.info(f"Found Spotify cover for: {album.title} by {album.artist}")
                else:
                    logger.info(f"No Spotify results for: {album.title} by {album.artist}")
            logger.info(f"Processed Spotify batch {batch_number}/{total_batches}")
            if batch_delay_seconds:
                sleep(batch_delay_seconds)

    covered = sum(1 for album in albums if album.image_url)
    logger.info(f"Spotify fetching complete. Found {covered} covers out of {len(albums)} albums.")
    missing = [album for album in albums if not album.image_url]
    if missing:
        logger.info("Albums missing covers:")
        for album in missing:
            logger.info(f"- {album.title!r} by {album.artist}")

    return EnrichSummary(
        attempted=attempted,
        updated=updated,
        skipped=skipped,
        failed=failed,
        manual=manual,
        failures=failures,
    )


def enrich_movie_posters(
    store: CatalogStore,
    *,
    api_key: str | None = None,
    batch_size: int = MOVIE_BATCH_SIZE,
    call_delay_seconds: float = MOVIE_CALL_DELAY_SECONDS,
    batch_delay_seconds: float = MOVIE_BATCH_DELAY_SECONDS,
    max_enrich: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
    stop_event: Event | None = None,
) -> EnrichSummary:
    """Fill missing movie posters from TMDb in batches; `max_enrich` caps the lookups."""

    movies = store.movies()
    api_key = resolve_api_key(api_key)
    if not api_key:
        logger.warning("TMDB_API_KEY not found; skipping poster fetching.")
        return EnrichSummary(attempted=0, updated=0, skipped=len(movies), failed=0)

    pending = [movie for movie in movies if not movie.image_url]
    if max_enrich is not None:
        pending = pending[: max(0, int(max_enrich))]
    skipped = len(movies) - len(pending)
    logger.info(f"Starting to fetch posters for {len(pending)} movies...")

    attempted = 0
    updated = 0
    failed = 0
    failures: list[EnrichFailure] = []

    def run_one(movie: MovieRecord) -> tuple[MovieRecord, str | None, str | None]:
        try:
            poster_url = find_poster_url(movie.title, movie.year, api_key=api_key, session=session)
            return movie, poster_url, None
        except (TmdbClientError, requests.RequestException, RuntimeError, ValueError) as exc:
            return movie, None, str(exc)
        finally:
            if call_delay_seconds:
                sleep(call_delay_seconds)

    batches = list(_batches(pending, batch_size))
    with requests.Session() as session, ThreadPoolExecutor(max_workers=max(1, batch_size)) as pool:
        for batch_number, batch in enumerate(batches, start=1):
            if _stop_requested(stop_event):
                logger.info(f"Poster fetching stopped before batch {batch_number}/{len(batches)}.")
                break
            for movie, poster_url, error in pool.map(run_one, batch):
                attempted += 1
                if error:
                    failed += 1
                    failures.append(EnrichFailure(record_id=movie.id, name=movie.title, message=error))
                    logger.error(f"Error fetching poster for {movie.title}: {error}")
                    continue
                if poster_url:
                    movie.image_url = poster_url
                    updated += 1
            logger.info(f"Processed batch {batch_number}/{len(batches)}")
            if batch_delay_seconds and batch_number < len(batches):
                sleep(batch_delay_seconds)

    found = sum(1 for movie in movies if movie.image_url)
    logger.info(f"Poster fetching complete. Found {found} posters out of {len(movies)} movies.")
    return EnrichSummary(attempted=attempted, updated=updated, skipped=skipped, failed=failed, failures=failures)


def run_enrichment(
    store: CatalogStore,
    settings: CatalogSettings,
    *,
    spotify_client: SpotifyClient | None = None,
    stop_event: Event | None = None,
) -> tuple[EnrichSummary, EnrichSummary]:
    """
    Album pass then movie pass. Progress is reported through logging only.

    Setting `stop_event` ends either pass at the next batch boundary.
    """

    client = spotify_client or SpotifyClient(settings.spotify_client_id, settings.spotify_client_secret)
    albums_summary = enrich_album_covers(store, client, stop_event=stop_event)
    movies_summary = enrich_movie_posters(store, api_key=settings.tmdb_api_key, stop_event=stop_event)
    return albums_summary, movies_summary
