from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.ingestion.letterboxd import (
    DiaryEntry,
    LetterboxdCsvError,
    apply_recently_watched,
    categorize_rating,
    load_diary_entries,
    load_rated_movies,
    parse_ratings_csv,
    read_csv_rows,
    seed_rated_movies,
)

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures" / "letterboxd"
TODAY = date(2025, 8, 1)


def _seeded_store() -> CatalogStore:
    store = CatalogStore()
    seed_rated_movies(store, load_rated_movies(FIXTURES / "ratings_sample.csv", today=TODAY))
    return store


def test_categorize_rating_rules_apply_in_priority_order() -> None:
    assert categorize_rating(5.0, 1994, today=TODAY) == "favorites"
    assert categorize_rating(5.0, 2025, today=TODAY) == "favorites"
    assert categorize_rating(1.0, 2025, today=TODAY) == "least-favorite"
    assert categorize_rating(1.5, 1990, today=TODAY) == "least-favorite"
    assert categorize_rating(3.0, 2023, today=TODAY) == "recently-released"
    assert categorize_rating(3.0, 2022, today=TODAY) == "other"
    assert categorize_rating(2.0, None, today=TODAY) == "other"


def test_parse_ratings_sample_skips_incomplete_rows_and_keeps_quoted_commas() -> None:
    movies = load_rated_movies(FIXTURES / "ratings_sample.csv", today=TODAY)

    by_name = {m.name: m for m in movies}
    assert list(by_name) == [
        "Whiplash",
        "Dune: Part Two",
        "Cats",
        "Everything, Everywhere",
        "Inception",
        "Challengers",
    ]
    assert by_name["Whiplash"].category == "favorites"
    assert by_name["Dune: Part Two"].category == "recently-released"
    assert by_name["Cats"].category == "least-favorite"
    assert by_name["Everything, Everywhere"].category == "least-favorite"
    assert by_name["Inception"].category == "other"
    assert by_name["Challengers"].rating == 3.5
    assert by_name["Challengers"].rated_on == date(2025, 5, 1)
    assert by_name["Whiplash"].letterboxd_url == "https://boxd.it/a1"


def test_header_lookup_ignores_case_and_column_order() -> None:
    text = "letterboxd uri,RATING,name,Year\nhttps://boxd.it/x,4,Heat,1995\n"
    movies = parse_ratings_csv(text, today=TODAY)
    assert len(movies) == 1
    assert movies[0].name == "Heat"
    assert movies[0].year == 1995
    assert movies[0].rated_on is None


def test_missing_required_column_raises() -> None:
    with pytest.raises(LetterboxdCsvError):
        parse_ratings_csv("Name,Year\nHeat,1995\n", today=TODAY)


def test_empty_csv_raises() -> None:
    with pytest.raises(LetterboxdCsvError):
        read_csv_rows("")


def test_missing_file_yields_empty_list(tmp_path: Path) -> None:
    assert load_rated_movies(tmp_path / "nope.csv", today=TODAY) == []
    assert load_diary_entries(tmp_path / "nope.csv") == []


def test_diary_sample_parses_logged_and_watched_dates() -> None:
    entries = load_diary_entries(FIXTURES / "diary_sample.csv")
    assert [e.name for e in entries] == ["Challengers", "Sinners", "Inception", "Old Log", "Anora, Again"]
    assert entries[0].logged_on == date(2025, 7, 28)
    assert entries[0].watched_on == date(2025, 7, 27)
    assert entries[1].year == 2025


def test_recently_watched_matches_existing_and_synthesizes_missing() -> None:
    store = _seeded_store()
    before = len(store.movies())

    recent = apply_recently_watched(store, load_diary_entries(FIXTURES / "diary_sample.csv"), today=TODAY)

    assert [m.title for m in recent] == ["Challengers", "Sinners", "Inception", "Anora, Again"]
    assert len(store.movies()) == before + 2

    challengers = store.find_movie("Challengers", 2024)
    assert challengers is not None
    assert challengers.watched_date == date(2025, 7, 28)
    assert challengers.category == "recently-released"

    sinners = store.find_movie("Sinners", 2025)
    assert sinners is not None
    assert sinners.category == "recently-watched"
    assert sinners.rating == 4.5

    assert store.find_movie("Old Log", 2019) is None
    assert [m.id for m in store.recently_watched()] == [m.id for m in recent]


def test_recently_watched_is_capped_and_deduplicated() -> None:
    store = CatalogStore()
    entries = [DiaryEntry(name=f"Film {i}", logged_on=date(2025, 7, 1 + i), year=2000 + i) for i in range(25)]
    entries.append(DiaryEntry(name="Film 0", logged_on=date(2025, 7, 31), year=2000))

    recent = apply_recently_watched(store, entries, today=TODAY, limit=20)

    assert len(recent) == 20
    assert recent[0].title == "Film 0"
    assert recent[0].watched_date == date(2025, 7, 31)
    assert len({m.id for m in recent}) == 20
    dates = [m.watched_date for m in recent]
    assert dates == sorted(dates, reverse=True)
