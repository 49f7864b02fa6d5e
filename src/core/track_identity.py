"""Parsing of external Spotify references into normalized identifiers."""

import re

_TRACK_PATTERNS = [
    re.compile(r"open\.spotify\.com/(?:intl-[a-z]+/)?track/([a-zA-Z0-9]+)(?:[?&#/]|$)"),
    re.compile(r"spotify\.com/track/([a-zA-Z0-9]+)(?:[?&#/]|$)"),
    re.compile(r"spotify:track:([a-zA-Z0-9]+)"),
]

_PLAYLIST_PATTERNS = [
    re.compile(r"spotify:playlist:([a-zA-Z0-9]+)"),
    re.compile(r"open\.spotify\.com/(?:intl-[a-z]+/)?playlist/([a-zA-Z0-9]+)"),
    re.compile(r"spotify\.com/playlist/([a-zA-Z0-9]+)"),
]


def _first_match(patterns: list[re.Pattern], value: str | None) -> str | None:
    if not value or not isinstance(value, str):
        return None
    for pattern in patterns:
        match = pattern.search(value.strip())
        if match and match.group(1):
            return match.group(1)
    return None


def extract_track_id(url: str | None) -> str | None:
    """Extract the Spotify track id from a track URL or URI.

    Returns None for anything that is not recognizably a track reference, in
    which case duplicate protection cannot be applied to the campaign.
    """
    return _first_match(_TRACK_PATTERNS, url)


def extract_playlist_id(url: str | None) -> str | None:
    """Extract the Spotify playlist id from a playlist URL or URI."""
    return _first_match(_PLAYLIST_PATTERNS, url)
