"""Environment-driven settings for the API and scripts."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_RATINGS_CSV = Path("attached_assets") / "ratings.csv"
DEFAULT_DIARY_CSV = Path("attached_assets") / "diary.csv"

_FALSEY = {"0", "false", "no", "off"}


def _env_str(name: str) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw not in _FALSEY


@dataclass(frozen=True)
class CatalogSettings:
    ratings_csv: Path = DEFAULT_RATINGS_CSV
    diary_csv: Path = DEFAULT_DIARY_CSV
    covers_dir: Path | None = None
    spotify_client_id: str | None = None
    spotify_client_secret: str | None = None
    tmdb_api_key: str | None = None
    enrich_on_startup: bool = True

    @classmethod
    def from_env(cls) -> CatalogSettings:
        covers_dir = _env_str("PORTFOLIO_COVERS_DIR")
        return cls(
            ratings_csv=Path(_env_str("PORTFOLIO_RATINGS_CSV") or DEFAULT_RATINGS_CSV),
            diary_csv=Path(_env_str("PORTFOLIO_DIARY_CSV") or DEFAULT_DIARY_CSV),
            covers_dir=Path(covers_dir) if covers_dir else None,
            spotify_client_id=_env_str("SPOTIFY_CLIENT_ID"),
            spotify_client_secret=_env_str("SPOTIFY_CLIENT_SECRET"),
            tmdb_api_key=_env_str("TMDB_API_KEY"),
            enrich_on_startup=_env_flag("PORTFOLIO_ENRICH_ON_STARTUP", True),
        )
