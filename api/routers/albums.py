"""
Album collection endpoints.
"""
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Query
from pydantic import BaseModel

from api.deps import CatalogStoreDep, as_rows, server_error
from portfolio_backend.repositories.albums import list_albums

router = APIRouter(prefix="/albums", tags=["albums"])


# --- Pydantic models ---

class Album(BaseModel):
    id: str
    title: str
    artist: str
    genre: str
    genres: list[str] = []
    is_favorite: bool = False
    image_url: str | None = None
    created_at: datetime


# --- Endpoints ---

@router.get("", response_model=list[Album])
def get_albums(
    store: CatalogStoreDep,
    genre: str | None = Query(default=None),
) -> list[dict]:
    """List all albums, or only those in `genre` (`favorites` lists favorite albums)."""
    try:
        return as_rows(list_albums(store, genre=genre))
    except Exception as exc:
        raise server_error("Failed to fetch albums", exc) from exc


@router.get("/genre/{genre}", response_model=list[Album])
def get_albums_by_genre(store: CatalogStoreDep, genre: str) -> list[dict]:
    """List albums whose primary or secondary genres include `genre`."""
    try:
        return as_rows(list_albums(store, genre=genre))
    except Exception as exc:
        raise server_error("Failed to fetch albums by genre", exc) from exc
