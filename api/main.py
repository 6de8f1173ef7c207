"""
Portfolio Catalog API - FastAPI application.

Provides endpoints for:
- Browsing the album collection by genre
- Browsing movies by category bucket, plus recently watched/released views
- Entertainment media items
- Contact form and recommendation submissions
"""
from __future__ import annotations

import logging
import os
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.deps import get_settings
from api.routers import albums, contact, entertainment, movies, recommendations
from portfolio_backend.db.memory_store import CatalogStore
from portfolio_backend.ingestion.catalog_seed import seed_catalog
from portfolio_backend.ingestion.cover_enrichment import run_enrichment
from portfolio_backend.ingestion.manual_covers import COVERS_URL_PREFIX

logger = logging.getLogger(__name__)


def get_cors_origins() -> list[str]:
    """
    Get CORS allowed origins from environment.
    Set CORS_ALLOW_ORIGINS as comma-separated list of origins.
    Example: CORS_ALLOW_ORIGINS=https://example.com,https://www.example.com
    """
    origins_str = os.getenv("CORS_ALLOW_ORIGINS", "")
    if not origins_str:
        return []
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


def _run_enrichment_in_background(store: CatalogStore, stop_event: threading.Event) -> None:
    settings = get_settings()
    try:
        run_enrichment(store, settings, stop_event=stop_event)
    except Exception as e:
        logger.error(f"Cover enrichment failed: {e}", exc_info=e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    logger.info("Starting up Portfolio Catalog API...")
    settings = get_settings()
    store = CatalogStore()
    seed_catalog(store, settings)
    app.state.store = store

    # Daemon thread: handlers never wait on it, and it never holds up process exit.
    stop_event = threading.Event()
    enrichment_thread: threading.Thread | None = None
    if settings.enrich_on_startup:
        enrichment_thread = threading.Thread(
            target=_run_enrichment_in_background,
            args=(store, stop_event),
            name="cover-enrichment",
            daemon=True,
        )
        enrichment_thread.start()
    app.state.enrichment_thread = enrichment_thread
    app.state.enrichment_stop = stop_event
    yield
    # Shutdown
    logger.info("Shutting down Portfolio Catalog API...")
    stop_event.set()
    if enrichment_thread is not None and enrichment_thread.is_alive():
        logger.info("Cover enrichment still running at shutdown; abandoning it.")


app = FastAPI(
    title="Portfolio Catalog API",
    description="Backend API for a personal portfolio - albums, movies and entertainment",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
# If no origins configured, allows all origins but disables credentials
cors_origins = get_cors_origins()
allow_credentials = len(cors_origins) > 0  # Only allow credentials with explicit origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if cors_origins else ["*"],
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include routers
app.include_router(albums.router, prefix="/api")
app.include_router(movies.router, prefix="/api")
app.include_router(entertainment.router, prefix="/api")
app.include_router(contact.router, prefix="/api")
app.include_router(recommendations.router, prefix="/api")

# Locally hosted covers referenced by the manual cover mapping
covers_dir = get_settings().covers_dir
if covers_dir is not None and covers_dir.is_dir():
    app.mount(COVERS_URL_PREFIX, StaticFiles(directory=covers_dir), name="covers")


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "portfolio-catalog"}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}
