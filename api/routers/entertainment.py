"""
Static entertainment media (images and GIFs).
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Query
from pydantic import BaseModel

from api.deps import CatalogStoreDep, as_rows, server_error
from portfolio_backend.repositories.entertainment import list_entertainment_items

router = APIRouter(prefix="/entertainment", tags=["entertainment"])


class EntertainmentItem(BaseModel):
    id: str
    title: str | None = None
    category: str
    media_url: str
    media_type: Literal["image", "gif"]
    created_at: datetime


@router.get("", response_model=list[EntertainmentItem])
def get_entertainment_items(
    store: CatalogStoreDep,
    category: str | None = Query(default=None),
) -> list[dict]:
    try:
        return as_rows(list_entertainment_items(store, category=category))
    except Exception as exc:
        raise server_error("Failed to fetch entertainment items", exc) from exc
