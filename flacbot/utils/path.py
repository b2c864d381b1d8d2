"""
Utilities for building safe local file names for downloaded tracks.
"""

import re
from pathlib import Path
from typing import TYPE_CHECKING

from pathvalidate import sanitize_filename as platform_safe_filename

if TYPE_CHECKING:
    from flacbot.models.track import Track

_FORBIDDEN_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_filename(name: str) -> str:
    """
    Replaces characters that are hostile to common file systems with '_',
    collapses runs of whitespace to a single space and trims both ends.

    Applying it twice gives the same result as applying it once.
    """
    name = _FORBIDDEN_CHARS.sub("_", name)
    return _WHITESPACE_RUN.sub(" ", name).strip()


def track_filename(track: "Track", ext: str) -> str:
    """
    Builds the '{artist} - {title}.{ext}' file name for a track.

    pathvalidate takes care of what the character rule does not cover, such as
    control characters, reserved device names and over-long names.
    """
    name = sanitize_filename(f"{track.artist} - {track.title}.{ext}")
    return platform_safe_filename(name, replacement_text="_") or f"track.{ext}"


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)
