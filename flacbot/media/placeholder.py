"""
Builds the stand-in file delivered when a real download is not available.
"""

from flacbot.models.track import Track

# FLAC stream marker followed by a STREAMINFO metadata block header
# (type 0, length 34). Players recognise the file type from these 8 bytes.
PLACEHOLDER_SIGNATURE = b"fLaC\x00\x00\x00\x22"


def make_placeholder(track: Track) -> bytes:
    """Returns the deterministic placeholder bytes for a track."""
    body = (
        "FLACBOT PLACEHOLDER AUDIO FILE\n"
        f"Title: {track.title}\n"
        f"Artist: {track.artist}\n"
        f"Album: {track.album}\n"
        "This file is a placeholder and contains no audio. "
        "The real track could not be downloaded from the catalog.\n"
    )
    return PLACEHOLDER_SIGNATURE + body.encode("utf-8")
