from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from portfolio_backend.integrations.spotify.client import (
    SPOTIFY_TOKEN_URL,
    SpotifyClient,
    SpotifyClientError,
)


def _response(status_code: int = 200, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.text = json.dumps(payload)
    return resp


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _search_payload() -> dict:
    repo_root = Path(__file__).resolve().parents[3]
    return json.loads(
        (repo_root / "tests" / "fixtures" / "spotify" / "album_search_sample.json").read_text(encoding="utf-8")
    )


def test_token_is_cached_until_shortly_before_expiry() -> None:
    session = MagicMock()
    session.post.side_effect = [
        _response(payload={"access_token": "first", "expires_in": 3600}),
        _response(payload={"access_token": "second", "expires_in": 3600}),
    ]
    clock = _FakeClock()
    client = SpotifyClient("id", "secret", session=session, clock=clock)

    assert client.get_access_token() == "first"
    clock.now += 3000
    assert client.get_access_token() == "first"
    assert session.post.call_count == 1

    clock.now += 541
    assert client.get_access_token() == "second"
    assert session.post.call_count == 2

    args, kwargs = session.post.call_args
    assert args[0] == SPOTIFY_TOKEN_URL
    assert kwargs["data"] == {"grant_type": "client_credentials"}
    assert kwargs["auth"] == ("id", "secret")


def test_search_albums_sends_bearer_token_and_parses_items() -> None:
    session = MagicMock()
    session.post.return_value = _response(payload={"access_token": "tok", "expires_in": 3600})
    session.get.return_value = _response(payload=_search_payload())
    client = SpotifyClient("id", "secret", session=session)

    albums = client.search_albums('album:"The Blueprint" artist:"Jay-Z"', limit=5)
    client.search_albums("The Blueprint Jay-Z", limit=5)

    assert [a.spotify_id for a in albums] == ["bp3", "bp2", "bp1", "noimg"]
    assert albums[2].image_url == "https://i.scdn.co/image/bp1-640"
    assert albums[2].artists == ("JAY-Z",)
    assert albums[3].image_url is None
    assert session.post.call_count == 1

    _, kwargs = session.get.call_args_list[0]
    assert kwargs["headers"] == {"Authorization": "Bearer tok"}
    assert kwargs["params"] == {"q": 'album:"The Blueprint" artist:"Jay-Z"', "type": "album", "limit": 5}


def test_missing_credentials_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
    monkeypatch.delenv("SPOTIFY_CLIENT_SECRET", raising=False)
    session = MagicMock()
    client = SpotifyClient(session=session)

    assert not client.has_credentials
    with pytest.raises(SpotifyClientError):
        client.get_access_token()
    session.post.assert_not_called()


def test_credentials_fall_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "env-id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "env-secret")
    client = SpotifyClient(session=MagicMock())
    assert client.has_credentials
    assert client.client_id == "env-id"


def test_token_http_error_raises_with_status() -> None:
    session = MagicMock()
    session.post.return_value = _response(status_code=401, payload={"error": "invalid_client"})
    client = SpotifyClient("id", "secret", session=session)

    with pytest.raises(SpotifyClientError) as excinfo:
        client.get_access_token()
    assert excinfo.value.status_code == 401


def test_search_http_error_raises() -> None:
    session = MagicMock()
    session.post.return_value = _response(payload={"access_token": "tok", "expires_in": 3600})
    session.get.return_value = _response(status_code=429, payload={"error": "rate limited"})
    client = SpotifyClient("id", "secret", session=session)

    with pytest.raises(SpotifyClientError) as excinfo:
        client.search_albums("Blonde")
    assert excinfo.value.status_code == 429
