"""
Dependency injection for the catalog store and other shared resources.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from functools import lru_cache
from typing import Annotated, Any, Iterable

from fastapi import Depends, HTTPException, Request

from portfolio_backend.config import CatalogSettings
from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.utils.env import load_env

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> CatalogSettings:
    load_env()
    return CatalogSettings.from_env()


def get_store(request: Request) -> CatalogStore:
    """
    Returns the catalog store built during application startup.
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Catalog store is not initialized (application lifespan has not run).")
    return store


# Type aliases for dependency injection
CatalogStoreDep = Annotated[CatalogStore, Depends(get_store)]
SettingsDep = Annotated[CatalogSettings, Depends(get_settings)]


def as_rows(records: Iterable[Any]) -> list[dict[str, Any]]:
    """Convert record dataclasses into plain dicts for response models."""
    return [asdict(r) if is_dataclass(r) else dict(r) for r in records]


def server_error(detail: str, exc: BaseException) -> HTTPException:
    """
    Log an unexpected handler failure and build the generic 500 response for it.

    Internal error details are never sent to the client.
    """
    logger.error(f"{detail}: {exc}", exc_info=exc)
    return HTTPException(status_code=500, detail=detail)


def bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=400, detail=detail)
