"""
Movie endpoints backed by the Letterboxd exports.
"""
from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Query
from pydantic import BaseModel

from api.deps import CatalogStoreDep, as_rows, server_error
from portfolio_backend.repositories.movies import (
    list_movies,
    list_recently_released,
    list_recently_watched,
)

router = APIRouter(prefix="/movies", tags=["movies"])


# --- Pydantic models ---

class Movie(BaseModel):
    id: str
    title: str
    year: int | None = None
    rating: float | None = None
    category: str
    letterboxd_url: str | None = None
    review: str | None = None
    watched_date: date | None = None
    image_url: str | None = None
    created_at: datetime


# --- Endpoints ---

@router.get("", response_model=list[Movie])
def get_movies(
    store: CatalogStoreDep,
    category: str | None = Query(default=None),
) -> list[dict]:
    """
    List all movies, or one category bucket in that bucket's display order.
    """
    try:
        return as_rows(list_movies(store, category=category))
    except Exception as exc:
        raise server_error("Failed to fetch movies", exc) from exc


@router.get("/recently-watched", response_model=list[Movie])
def get_recently_watched(store: CatalogStoreDep) -> list[dict]:
    """Up to 20 movies from the diary, most recently logged first."""
    try:
        return as_rows(list_recently_watched(store))
    except Exception as exc:
        raise server_error("Failed to fetch recently watched movies", exc) from exc


@router.get("/recently-released", response_model=list[Movie])
def get_recently_released(store: CatalogStoreDep) -> list[dict]:
    """Up to 20 new releases watched in the last six months, most recent first."""
    try:
        return as_rows(list_recently_released(store))
    except Exception as exc:
        raise server_error("Failed to fetch recently released movies", exc) from exc
