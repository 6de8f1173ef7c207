"""
Ingestion helpers: seeding the catalog and enriching it from external catalogs.
"""

from portfolio_backend.ingestion.catalog_seed import SeedSummary, seed_catalog
from portfolio_backend.ingestion.cover_enrichment import (
    EnrichSummary,
    enrich_album_covers,
    enrich_movie_posters,
    run_enrichment,
)

__all__ = [
    "EnrichSummary",
    "SeedSummary",
    "enrich_album_covers",
    "enrich_movie_posters",
    "run_enrichment",
    "seed_catalog",
]
