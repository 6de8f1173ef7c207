from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest
import requests

from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.ingestion import cover_enrichment as mod
from portfolio_backend.ingestion.title_matching import AlbumMatch


def _no_sleep(_seconds: float) -> None:
    return None


def _spotify_client(*, has_credentials: bool = True) -> MagicMock:
    client = MagicMock()
    client.has_credentials = has_credentials
    return client


def test_manual_cover_skips_external_lookup(monkeypatch: pytest.MonkeyPatch) -> None:
    store = CatalogStore()
    album = store.add_album(title="Charm", artist="Clairo", genre="indie")
    finder = MagicMock(return_value=None)
    monkeypatch.setattr(mod, "find_album_match", finder)

    summary = mod.enrich_album_covers(store, _spotify_client(), sleep=_no_sleep)

    assert album.image_url == "/covers/charm.png"
    assert summary.manual == 1
    assert summary.attempted == 0
    finder.assert_not_called()


def test_spotify_match_updates_cover_and_spelling(monkeypatch: pytest.MonkeyPatch) -> None:
    store = CatalogStore()
    album = store.add_album(title="blonde", artist="frank ocean", genre="r&b")
    monkeypatch.setattr(
        mod,
        "find_album_match",
        lambda client, title, artist: AlbumMatch(
            title="Blonde", artist="Frank Ocean", image_url="https://img/blonde.jpg", spotify_id="b1"
        ),
    )

    summary = mod.enrich_album_covers(store, _spotify_client(), sleep=_no_sleep)

    assert summary.updated == 1
    assert album.image_url == "https://img/blonde.jpg"
    assert album.title == "Blonde"
    assert album.artist == "Frank Ocean"


def test_preserved_title_and_collaboration_artist_keep_local_spelling() -> None:
    store = CatalogStore()
    preserved = store.add_album(title="Kaytramine", artist="Kaytramine Duo", genre="hip-hop")
    collab = store.add_album(title="Lets Start", artist="James Blake & Lil Yachty", genre="electronic")

    assert mod.apply_album_match(
        preserved, AlbumMatch(title="KAYTRAMINÉ", artist="KAYTRAMINÉ", image_url="https://img/k.jpg", spotify_id="k")
    )
    assert preserved.title == "Kaytramine"
    assert preserved.artist == "KAYTRAMINÉ"

    assert mod.apply_album_match(
        collab, AlbumMatch(title="Let's Start", artist="James Blake", image_url="https://img/l.jpg", spotify_id="l")
    )
    assert collab.title == "Let's Start"
    assert collab.artist == "James Blake & Lil Yachty"


def test_match_without_image_changes_nothing() -> None:
    store = CatalogStore()
    album = store.add_album(title="blonde", artist="frank ocean", genre="r&b")

    assert not mod.apply_album_match(
        album, AlbumMatch(title="Blonde", artist="Frank Ocean", image_url=None, spotify_id="b1")
    )
    assert album.title == "blonde"
    assert album.image_url is None


def test_one_failed_album_does_not_abort_the_batch(monkeypatch: pytest.MonkeyPatch) -> None:
    store = CatalogStore()
    broken = store.add_album(title="Broken", artist="Nobody", genre="rock")
    fine = store.add_album(title="Fine", artist="Somebody", genre="rock")

    def _finder(client, title, artist):
        if title == "Broken":
            raise RuntimeError("boom")
        return AlbumMatch(title=title, artist=artist, image_url="https://img/fine.jpg", spotify_id="f")

    monkeypatch.setattr(mod, "find_album_match", _finder)
    sleeps: list[float] = []

    summary = mod.enrich_album_covers(store, _spotify_client(), batch_delay_seconds=0.5, sleep=sleeps.append)

    assert summary.attempted == 2
    assert summary.updated == 1
    assert summary.failed == 1
    assert summary.failures[0].record_id == broken.id
    assert fine.image_url == "https://img/fine.jpg"
    assert broken.image_url is None
    assert sleeps == [0.5]


def test_albums_without_credentials_only_get_manual_covers(monkeypatch: pytest.MonkeyPatch) -> None:
    store = CatalogStore()
    store.add_album(title="Charm", artist="Clairo", genre="indie")
    store.add_album(title="Blonde", artist="Frank Ocean", genre="r&b")
    finder = MagicMock()
    monkeypatch.setattr(mod, "find_album_match", finder)

    summary = mod.enrich_album_covers(store, _spotify_client(has_credentials=False), sleep=_no_sleep)

    assert summary.manual == 1
    assert summary.attempted == 0
    finder.assert_not_called()


def test_movie_posters_fill_missing_images_in_batches(monkeypatch: pytest.MonkeyPatch) -> None:
    store = CatalogStore()
    titles = ["A", "B", "C", "D", "E"]
    for title in titles:
        store.add_movie(title=title, year=2020, rating=3.0, category="other")
    store.add_movie(title="Has Poster", year=2020, category="other", image_url="https://img/keep.jpg")

    looked_up: list[str] = []

    def _fake_find(title, year=None, *, api_key=None, session=None):
        looked_up.append(title)
        return None if title == "C" else f"https://image.tmdb.org/t/p/w500/{title}.jpg"

    monkeypatch.setattr(mod, "find_poster_url", _fake_find)
    sleeps: list[float] = []

    summary = mod.enrich_movie_posters(
        store,
        api_key="key",
        batch_size=2,
        call_delay_seconds=0.1,
        batch_delay_seconds=1.0,
        sleep=sleeps.append,
    )

    assert sorted(looked_up) == titles
    assert summary.attempted == 5
    assert summary.updated == 4
    assert summary.skipped == 1
    by_title = {m.title: m for m in store.movies()}
    assert by_title["A"].image_url == "https://image.tmdb.org/t/p/w500/A.jpg"
    assert by_title["C"].image_url is None
    assert by_title["Has Poster"].image_url == "https://img/keep.jpg"
    assert sleeps.count(0.1) == 5
    assert sleeps.count(1.0) == 2


def test_movie_posters_respect_max_enrich(monkeypatch: pytest.MonkeyPatch) -> None:
    store = CatalogStore()
    for title in ["A", "B", "C"]:
        store.add_movie(title=title, category="other")
    monkeypatch.setattr(mod, "find_poster_url", lambda title, year=None, **kwargs: f"https://img/{title}.jpg")

    summary = mod.enrich_movie_posters(store, api_key="key", max_enrich=2, sleep=_no_sleep)

    assert summary.attempted == 2
    assert [m.image_url for m in store.movies()] == ["https://img/A.jpg", "https://img/B.jpg", None]


def test_movie_posters_skip_without_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TMDB_API_KEY", raising=False)
    store = CatalogStore()
    store.add_movie(title="A", category="other")
    finder = MagicMock()
    monkeypatch.setattr(mod, "find_poster_url", finder)

    summary = mod.enrich_movie_posters(store, api_key=None, sleep=_no_sleep)

    assert summary.skipped == 1
    assert summary.attempted == 0
    finder.assert_not_called()


def test_movie_pass_shares_one_session_and_closes_it(monkeypatch: pytest.MonkeyPatch) -> None:
    store = CatalogStore()
    for title in ["A", "B", "C"]:
        store.add_movie(title=title, category="other")
    sessions: list[requests.Session] = []

    def _fake_find(title, year=None, *, api_key=None, session=None):
        sessions.append(session)
        return None

    closed: list[bool] = []
    real_close = requests.Session.close

    def _tracking_close(self):
        closed.append(True)
        real_close(self)

    monkeypatch.setattr(mod, "find_poster_url", _fake_find)
    monkeypatch.setattr(requests.Session, "close", _tracking_close)

    mod.enrich_movie_posters(store, api_key="key", batch_size=2, sleep=_no_sleep)

    assert len(sessions) == 3
    assert isinstance(sessions[0], requests.Session)
    assert all(session is sessions[0] for session in sessions)
    assert closed == [True]


def test_stop_event_ends_album_pass_at_batch_boundary(monkeypatch: pytest.MonkeyPatch) -> None:
    store = CatalogStore()
    for i in range(4):
        store.add_album(title=f"Album {i}", artist="Band", genre="rock")
    stop_event = threading.Event()

    def _finder(client, title, artist):
        stop_event.set()
        return AlbumMatch(title=title, artist=artist, image_url=f"https://img/{title}.jpg", spotify_id=None)

    monkeypatch.setattr(mod, "find_album_match", _finder)

    summary = mod.enrich_album_covers(
        store, _spotify_client(), batch_size=2, sleep=_no_sleep, stop_event=stop_event
    )

    assert summary.attempted == 2
    assert [a.image_url is not None for a in store.albums()] == [True, True, False, False]


def test_stop_event_set_before_movie_pass_skips_lookups(monkeypatch: pytest.MonkeyPatch) -> None:
    store = CatalogStore()
    store.add_movie(title="A", category="other")
    finder = MagicMock()
    monkeypatch.setattr(mod, "find_poster_url", finder)
    stop_event = threading.Event()
    stop_event.set()

    summary = mod.enrich_movie_posters(store, api_key="key", sleep=_no_sleep, stop_event=stop_event)

    assert summary.attempted == 0
    finder.assert_not_called()


def test_run_enrichment_passes_stop_event_to_both_passes(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, object]] = []
    empty = mod.EnrichSummary(attempted=0, updated=0, skipped=0, failed=0)

    def _albums(store, client, *, stop_event=None):
        calls.append(("albums", stop_event))
        return empty

    def _movies(store, *, api_key=None, stop_event=None):
        calls.append(("movies", stop_event))
        return empty

    monkeypatch.setattr(mod, "enrich_album_covers", _albums)
    monkeypatch.setattr(mod, "enrich_movie_posters", _movies)
    stop_event = threading.Event()

    mod.run_enrichment(CatalogStore(), mod.CatalogSettings(), spotify_client=_spotify_client(), stop_event=stop_event)

    assert calls == [("albums", stop_event), ("movies", stop_event)]
