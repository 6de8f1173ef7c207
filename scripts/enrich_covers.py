#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys

from portfolio_backend.config import CatalogSettings
from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.ingestion.catalog_seed import seed_catalog
from portfolio_backend.ingestion.cover_enrichment import enrich_album_covers, enrich_movie_posters
from portfolio_backend.integrations.spotify.client import SpotifyClient
from portfolio_backend.utils.env import load_env


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="enrich_covers",
        description="Seed the catalog and run the cover enrichment passes in the foreground.",
    )
    parser.add_argument("--albums-only", action="store_true", help="Only run the Spotify album cover pass.")
    parser.add_argument("--movies-only", action="store_true", help="Only run the TMDb movie poster pass.")
    parser.add_argument("--limit", type=int, default=None, help="Optional cap on movies to look up.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv or sys.argv[1:])
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.albums_only and args.movies_only:
        print("enrich_covers: --albums-only and --movies-only are mutually exclusive", file=sys.stderr)
        return 2

    load_env()
    settings = CatalogSettings.from_env()
    store = CatalogStore()
    seed = seed_catalog(store, settings)
    print(f"enrich_covers: albums={seed.albums} movies={seed.movies}")

    if not args.movies_only:
        client = SpotifyClient(settings.spotify_client_id, settings.spotify_client_secret)
        summary = enrich_album_covers(store, client)
        print(
            "enrich_covers albums: "
            f"manual={summary.manual} attempted={summary.attempted} updated={summary.updated} "
            f"skipped={summary.skipped} failed={summary.failed}"
        )
        for album in store.albums():
            if not album.image_url:
                print(f"  missing cover: {album.title!r} by {album.artist}")

    if not args.albums_only:
        summary = enrich_movie_posters(store, api_key=settings.tmdb_api_key, max_enrich=args.limit)
        print(
            "enrich_covers movies: "
            f"attempted={summary.attempted} updated={summary.updated} "
            f"skipped={summary.skipped} failed={summary.failed}"
        )

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
