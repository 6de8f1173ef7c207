"""
Domain models shared across scripts and services.
"""

from portfolio_backend.models.catalog import (
    MOVIE_CATEGORIES,
    AlbumRecord,
    EntertainmentItemRecord,
    MovieRecord,
)
from portfolio_backend.models.submissions import ContactSubmissionRecord, RecommendationRecord

__all__ = [
    "MOVIE_CATEGORIES",
    "AlbumRecord",
    "ContactSubmissionRecord",
    "EntertainmentItemRecord",
    "MovieRecord",
    "RecommendationRecord",
]
