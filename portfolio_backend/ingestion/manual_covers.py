from __future__ import annotations

import re
import unicodedata

COVERS_URL_PREFIX = "/covers"

# "<title>-by-<artist>" (see `cover_mapping_key`) -> file under the covers directory.
MANUAL_COVER_MAPPINGS: dict[str, str] = {
    "jackboys-by-travis-scott": "jackboys.jpg",
    "how-do-you-sleep-at-night-by-teezo-touchdown": "how-do-you-sleep-at-night.jpg",
    "charm-by-clairo": "charm.png",
    "funk-wav-bounces-vol-1-by-calvin-harris": "funk-wav-bounces.png",
    "good-for-you-by-amine": "good-for-you.png",
    "lets-start-here-by-lil-yachty": "lets-start-here.png",
    "magna-carta-holy-grail-by-jay-z": "magna-carta-holy-grail.png",
    "kaytramine-by-kaytramine": "kaytramine.png",
}

# Local spellings Spotify must not "correct".
PRESERVE_LIST: frozenset[str] = frozenset(
    {
        "JACKBOYS",
        "How Do You Sleep At Night?",
        "Kaytramine",
    }
)

_NON_SLUG_RE = re.compile(r"[^A-Za-z0-9_\s-]")
_WS_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")


def normalize_for_mapping(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", (value or "").lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = _NON_SLUG_RE.sub("", stripped)
    slug = _WS_RE.sub("-", slug)
    slug = _HYPHENS_RE.sub("-", slug)
    return slug.strip()


def cover_mapping_key(title: str, artist: str) -> str:
    return f"{normalize_for_mapping(title)}-by-{normalize_for_mapping(artist)}"


def get_manual_cover_url(title: str, artist: str) -> str | None:
    filename = MANUAL_COVER_MAPPINGS.get(cover_mapping_key(title, artist))
    return f"{COVERS_URL_PREFIX}/{filename}" if filename else None


def has_manual_cover(title: str, artist: str) -> bool:
    return cover_mapping_key(title, artist) in MANUAL_COVER_MAPPINGS


def is_preserved(value: str) -> bool:
    return value in PRESERVE_LIST


def is_collaboration(artist: str) -> bool:
    return "&" in artist or "feat" in artist.lower()
