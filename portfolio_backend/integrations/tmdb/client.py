from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping

import requests

TMDB_API_BASE_URL = "https://api.themoviedb.org/3"
TMDB_POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"

# Titles whose entry lives under TV series rather than movies: (lowercased title, year).
TV_SERIES_TITLES: frozenset[tuple[str, int]] = frozenset({("loki", 2021)})

logger = logging.getLogger(__name__)


class TmdbClientError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, body_snippet: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


@dataclass(frozen=True)
class TmdbSearchResult:
    """Normalized movie or TV search hit."""

    tmdb_id: int
    title: str
    poster_path: str | None
    release_date: str | None
    media_type: str

    @property
    def poster_url(self) -> str | None:
        return build_poster_url(self.poster_path)


def build_poster_url(poster_path: str | None) -> str | None:
    if not poster_path:
        return None
    return f"{TMDB_POSTER_BASE_URL}{poster_path}"


def _require_api_key(api_key: str | None) -> str:
    resolved = (api_key or os.getenv("TMDB_API_KEY") or "").strip()
    if not resolved:
        raise RuntimeError("TMDB_API_KEY is not set.")
    return resolved


def resolve_api_key(api_key: str | None = None) -> str | None:
    """
    Best-effort API key resolution for callers that want to continue when the key is missing.
    """

    resolved = (api_key or os.getenv("TMDB_API_KEY") or "").strip()
    return resolved or None


def _request_json(
    session: requests.Session,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    timeout_seconds: float = 20.0,
) -> dict[str, Any]:
    headers = {"accept": "application/json"}
    try:
        resp = session.get(url, params=params, headers=headers, timeout=timeout_seconds)
    except requests.RequestException as exc:
        raise TmdbClientError(f"TMDb request failed: {exc}") from exc

    if resp.status_code != 200:
        raise TmdbClientError(
            f"TMDb request failed with HTTP {resp.status_code}.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        )

    try:
        payload = resp.json()
    except ValueError as exc:
        raise TmdbClientError(
            "TMDb returned non-JSON response.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        ) from exc

    if not isinstance(payload, dict):
        raise TmdbClientError("TMDb returned unexpected JSON shape (not an object).")
    return payload


def _parse_search_results(payload: Mapping[str, Any], *, media_type: str) -> list[TmdbSearchResult]:
    results = payload.get("results")
    if not isinstance(results, list):
        return []

    title_key = "title" if media_type == "movie" else "name"
    date_key = "release_date" if media_type == "movie" else "first_air_date"
    parsed: list[TmdbSearchResult] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        tmdb_id = item.get("id")
        if not isinstance(tmdb_id, int):
            continue
        title = item.get(title_key) or item.get("title") or item.get("name") or ""
        poster_path = item.get("poster_path")
        release_date = item.get(date_key)
        parsed.append(
            TmdbSearchResult(
                tmdb_id=tmdb_id,
                title=str(title),
                poster_path=poster_path if isinstance(poster_path, str) and poster_path else None,
                release_date=release_date if isinstance(release_date, str) and release_date else None,
                media_type=media_type,
            )
        )
    return parsed


def search_movie(
    query: str,
    *,
    year: int | None = None,
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> list[TmdbSearchResult]:
    """Search `/search/movie`, narrowing by release year when known."""

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    params: dict[str, Any] = {"api_key": api_key, "query": query}
    if year:
        params["year"] = int(year)
    payload = _request_json(session, f"{TMDB_API_BASE_URL}/search/movie", params=params)
    return _parse_search_results(payload, media_type="movie")


def search_tv(
    query: str,
    *,
    first_air_date_year: int | None = None,
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> list[TmdbSearchResult]:
    """Search `/search/tv`, narrowing by first air year when known."""

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    params: dict[str, Any] = {"api_key": api_key, "query": query}
    if first_air_date_year:
        params["first_air_date_year"] = int(first_air_date_year)
    payload = _request_json(session, f"{TMDB_API_BASE_URL}/search/tv", params=params)
    return _parse_search_results(payload, media_type="tv")


def search_title(
    title: str,
    year: int | None = None,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> list[TmdbSearchResult]:
    """
    Movie search with a TV fallback.

    Titles listed in `TV_SERIES_TITLES` go straight to the TV search. Everything else is
    searched as a movie first and retried as a series only when the movie search is empty.
    """

    session = session or requests.Session()
    if year is not None and (title.strip().lower(), int(year)) in TV_SERIES_TITLES:
        return search_tv(title, first_air_date_year=year, api_key=api_key, session=session)

    results = search_movie(title, year=year, api_key=api_key, session=session)
    if results:
        return results

    try:
        return search_tv(title, first_air_date_year=year, api_key=api_key, session=session)
    except TmdbClientError as exc:
        logger.warning(f"TMDb TV fallback failed for {title!r}: {exc}")
        return []


def find_poster_url(
    title: str,
    year: int | None = None,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> str | None:
    """
    Poster URL of the first (most relevant) search hit, or None.

    Request failures are logged and reported as "no poster".
    """

    api_key = resolve_api_key(api_key)
    if not api_key:
        logger.error("TMDB_API_KEY not found")
        return None

    label = f"{title} ({year})" if year else title
    try:
        results = search_title(title, year, api_key=api_key, session=session)
    except TmdbClientError as exc:
        logger.error(f"TMDb API error for {label}: {exc}")
        return None

    if not results:
        logger.info(f"No TMDb results for: {label}")
        return None

    poster_url = results[0].poster_url
    if not poster_url:
        logger.info(f"No poster available for: {label}")
        return None

    logger.info(f"Found poster for: {title} -> {poster_url}")
    return poster_url
