"""
Helper functions for formatting catalog data into human-readable strings.
"""

import math
from typing import Any


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def format_track_duration(seconds: Any) -> str:
    """
    Formats a duration in seconds as 'm:ss' (e.g., 185 -> '3:05').

    Returns 'Unknown' for None, NaN, negative or otherwise unparseable values.
    """
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return "Unknown"
    if math.isnan(value) or math.isinf(value) or value < 0:
        return "Unknown"
    minutes, secs = divmod(int(value), 60)
    return f"{minutes}:{secs:02d}"


def format_quality(bit_depth: Any, sample_rate: Any) -> str:
    """
    Builds a codec summary such as 'FLAC 24bit/96.0kHz' from the bit depth and
    the sample rate in Hz. Falls back to a generic label when either is missing.
    """
    if not bit_depth or not sample_rate:
        return "FLAC High Quality"
    try:
        return f"FLAC {int(bit_depth)}bit/{float(sample_rate) / 1000:.1f}kHz"
    except (TypeError, ValueError):
        return "FLAC High Quality"


def first_text(*candidates: Any, default: str) -> str:
    """Returns the first candidate that is a non-blank string, else ``default``."""
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return default


def extract_artist_name(item: dict[str, Any]) -> str:
    """
    Extracts an artist's name from the shapes a catalog track item may have.
    """
    performer = item.get("performer")
    if isinstance(performer, dict):
        performer = performer.get("name")
    artist = item.get("artist")
    if isinstance(artist, dict):
        artist = artist.get("name")
    album = item.get("album")
    album_artist = None
    if isinstance(album, dict) and isinstance(album.get("artist"), dict):
        album_artist = album["artist"].get("name")
    return first_text(performer, artist, album_artist, default="Unknown Artist")


def extract_album_title(item: dict[str, Any]) -> str:
    album = item.get("album")
    if isinstance(album, dict):
        album = album.get("title")
    return first_text(album, default="Unknown Album")
