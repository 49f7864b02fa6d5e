"""Music genres used to match campaigns with playlists.

Every raw genre string goes through ``match_genre`` or ``resolve_genre`` so
comparisons are always made between ``Genre`` members. Campaign genres that cannot
be mapped land in ``Genre.GENERAL``. Playlist tags that cannot be mapped match no
genre at all, so only playlists literally tagged General serve as the fallback.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Genre(str, Enum):
    """Known playlist genres plus the universal fallback bucket."""

    GENERAL = "General"
    ROCK = "Rock"
    POP = "Pop"
    HIP_HOP = "Hip-Hop/Rap"
    ELECTRONIC = "Electronic/Dance (EDM)"
    JAZZ = "Jazz"
    BLUES = "Blues"
    COUNTRY = "Country"
    FOLK = "Folk"
    CLASSICAL = "Classical"
    REGGAE = "Reggae"
    RNB = "R&B/Soul"
    METAL = "Metal"
    LATIN = "Latin"
    WORLD = "World"
    GOSPEL = "Gospel/Religious"
    PODCAST = "Podcast"


# Older intake-form labels that name the same bucket differently
_ALIASES: dict[str, Genre] = {
    "hip-hop": Genre.HIP_HOP,
    "hip hop": Genre.HIP_HOP,
    "rap": Genre.HIP_HOP,
    "electronic/edm": Genre.ELECTRONIC,
    "electronic": Genre.ELECTRONIC,
    "edm": Genre.ELECTRONIC,
    "dance": Genre.ELECTRONIC,
    "r&b": Genre.RNB,
    "rnb": Genre.RNB,
    "soul": Genre.RNB,
    "gospel": Genre.GOSPEL,
    "religious": Genre.GOSPEL,
}

_BY_VALUE: dict[str, Genre] = {genre.value.lower(): genre for genre in Genre}


def match_genre(raw: "str | Genre | None") -> Genre | None:
    """Look up the ``Genre`` a raw value names, or None when it names none.

    Matching is case-insensitive and ignores surrounding whitespace.
    """
    if isinstance(raw, Genre):
        return raw
    if raw is None:
        return None

    key = str(raw).strip().lower()
    if not key:
        return None
    return _BY_VALUE.get(key) or _ALIASES.get(key)


def resolve_genre(raw: "str | Genre | None") -> Genre:
    """Convert a raw genre value into a ``Genre``; empty and unmapped values become ``Genre.GENERAL``."""
    genre = match_genre(raw)
    if genre is None:
        if raw is not None and str(raw).strip():
            logger.debug(f"Unmapped genre {raw!r}, using {Genre.GENERAL.value}")
        return Genre.GENERAL
    return genre
