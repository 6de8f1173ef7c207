from __future__ import annotations

import os
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Mapping

import requests

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"

# Refresh the cached token this long before Spotify says it expires.
TOKEN_REFRESH_MARGIN_SECONDS = 60.0


class SpotifyClientError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, body_snippet: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


@dataclass(frozen=True)
class SpotifyAlbum:
    """Normalized album hit from `/v1/search?type=album`."""

    spotify_id: str
    name: str
    artists: tuple[str, ...]
    image_url: str | None
    release_date: str | None = None


def _parse_album_items(payload: Mapping[str, Any]) -> list[SpotifyAlbum]:
    albums = payload.get("albums")
    if not isinstance(albums, dict):
        return []
    items = albums.get("items")
    if not isinstance(items, list):
        return []

    parsed: list[SpotifyAlbum] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        if not isinstance(name, str):
            continue
        artists: list[str] = []
        for artist in item.get("artists") or []:
            if isinstance(artist, dict) and isinstance(artist.get("name"), str):
                artists.append(artist["name"])
        image_url = None
        images = item.get("images")
        if isinstance(images, list) and images and isinstance(images[0], dict):
            url = images[0].get("url")
            image_url = url if isinstance(url, str) and url else None
        release_date = item.get("release_date")
        parsed.append(
            SpotifyAlbum(
                spotify_id=str(item.get("id") or ""),
                name=name,
                artists=tuple(artists),
                image_url=image_url,
                release_date=release_date if isinstance(release_date, str) else None,
            )
        )
    return parsed


class SpotifyClient:
    """
    Client-credentials Spotify client.

    The access token is cached in memory and refreshed shortly before it expires. The
    client is shared by the enrichment worker threads, so token refresh is serialized.
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = 20.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client_id = (client_id or os.getenv("SPOTIFY_CLIENT_ID") or "").strip() or None
        self.client_secret = (client_secret or os.getenv("SPOTIFY_CLIENT_SECRET") or "").strip() or None
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._access_token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = Lock()

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def get_access_token(self) -> str:
        with self._token_lock:
            if self._access_token and self._clock() < self._token_expires_at:
                return self._access_token

            if not self.has_credentials:
                raise SpotifyClientError("Spotify credentials not found (SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET).")

            try:
                resp = self.session.post(
                    SPOTIFY_TOKEN_URL,
                    data={"grant_type": "client_credentials"},
                    auth=(self.client_id, self.client_secret),
                    timeout=self.timeout_seconds,
                )
            except requests.RequestException as exc:
                raise SpotifyClientError(f"Spotify token request failed: {exc}") from exc

            if resp.status_code != 200:
                raise SpotifyClientError(
                    f"Failed to get Spotify access token (HTTP {resp.status_code}).",
                    status_code=resp.status_code,
                    body_snippet=(resp.text or "")[:400],
                )

            try:
                payload = resp.json()
            except ValueError as exc:
                raise SpotifyClientError("Spotify token endpoint returned non-JSON response.") from exc

            token = payload.get("access_token") if isinstance(payload, dict) else None
            if not isinstance(token, str) or not token:
                raise SpotifyClientError("Spotify token response missing access_token.")
            expires_in = payload.get("expires_in")
            expires_in_seconds = float(expires_in) if isinstance(expires_in, (int, float)) else 3600.0

            self._access_token = token
            self._token_expires_at = self._clock() + expires_in_seconds - TOKEN_REFRESH_MARGIN_SECONDS
            return token

    def search_albums(self, query: str, *, limit: int = 5) -> list[SpotifyAlbum]:
        token = self.get_access_token()
        try:
            resp = self.session.get(
                f"{SPOTIFY_API_BASE_URL}/search",
                params={"q": query, "type": "album", "limit": int(limit)},
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise SpotifyClientError(f"Spotify search failed: {exc}") from exc

        if resp.status_code != 200:
            raise SpotifyClientError(
                f"Spotify search failed with HTTP {resp.status_code}.",
                status_code=resp.status_code,
                body_snippet=(resp.text or "")[:400],
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise SpotifyClientError("Spotify search returned non-JSON response.") from exc
        if not isinstance(payload, dict):
            raise SpotifyClientError("Spotify search returned unexpected JSON shape (not an object).")
        return _parse_album_items(payload)
