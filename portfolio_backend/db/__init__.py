"""
Storage backends for the catalog.
"""

from portfolio_backend.db.memory_store import CatalogStore

__all__ = ["CatalogStore"]
