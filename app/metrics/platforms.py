"""Canonical platform names (twitter/x, case-insensitive)."""
from enum import Enum
from typing import Optional


class CanonicalPlatform(str, Enum):
    """Platforms the dashboard knows how to aggregate."""

    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    X = "x"
    LINKEDIN = "linkedin"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    THREADS = "threads"
    UNKNOWN = "unknown"


ALL_PLATFORMS = "all"

# Legacy names still stored by older integrations.
PLATFORM_ALIASES = {
    "twitter": CanonicalPlatform.X,
}

_KNOWN = {p.value: p for p in CanonicalPlatform}


def normalize(raw: Optional[str]) -> CanonicalPlatform:
    """
    Map a raw platform identifier to its canonical platform.
    None/empty and unrecognized names give UNKNOWN. Idempotent.
    """
    if raw is None:
        return CanonicalPlatform.UNKNOWN
    value = raw.value if isinstance(raw, CanonicalPlatform) else str(raw)
    key = value.strip().lower()
    if not key:
        return CanonicalPlatform.UNKNOWN
    if key in PLATFORM_ALIASES:
        return PLATFORM_ALIASES[key]
    return _KNOWN.get(key, CanonicalPlatform.UNKNOWN)


def normalize_filter(raw: Optional[str]) -> str:
    """Normalize a platform query value, keeping "all" (and empty) as "all"."""
    if raw is None or not str(raw).strip() or str(raw).strip().lower() == ALL_PLATFORMS:
        return ALL_PLATFORMS
    return normalize(raw).value
