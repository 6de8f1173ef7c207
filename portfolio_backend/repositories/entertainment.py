from __future__ import annotations

from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.models.catalog import EntertainmentItemRecord


def list_entertainment_items(store: CatalogStore, *, category: str | None = None) -> list[EntertainmentItemRecord]:
    items = store.entertainment_items()
    if not category:
        return items
    return [item for item in items if item.category == category]
