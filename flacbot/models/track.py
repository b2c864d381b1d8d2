"""
Core records passed between the catalog client, the session store and the
workflow coordinator.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class Provenance(Enum):
    """Where a search result or a delivered file came from."""

    REMOTE = "remote"
    FALLBACK = "fallback"


STATUS_MESSAGES = {
    Provenance.REMOTE: (
        "✅ Connected to the Qobuz catalog\n"
        "🎧 Tracks are delivered as real FLAC downloads"
    ),
    Provenance.FALLBACK: (
        "⚠️ Qobuz catalog unavailable, showing demo results\n"
        "🚧 Selected tracks are delivered as placeholder files"
    ),
}


@dataclass(frozen=True)
class Track:
    """A canonical search result."""

    id: str
    title: str = "Unknown Title"
    artist: str = "Unknown Artist"
    album: str = "Unknown Album"
    duration_display: str = "Unknown"
    quality_display: str = "FLAC High Quality"
    is_fallback: bool = False
    # Upstream payload, only needed to request a download URL.
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def label(self) -> str:
        return f"{self.title} - {self.artist}"


@dataclass(frozen=True)
class SearchResult:
    """The tracks returned by one catalog search, tagged with their provenance."""

    query: str
    tracks: tuple[Track, ...]
    provenance: Provenance
    error: str | None = None

    @property
    def from_remote(self) -> bool:
        return self.provenance is Provenance.REMOTE

    @property
    def status_message(self) -> str:
        return STATUS_MESSAGES[self.provenance]


@dataclass(frozen=True)
class Session:
    """The most recent search of one chat, kept to resolve a later selection."""

    owner_id: int | str
    query: str
    results: tuple[Track, ...]
    created_at: float

    def find(self, track_id: str) -> Track | None:
        for track in self.results:
            if track.id == track_id:
                return track
        return None


@dataclass(frozen=True)
class DownloadResult:
    """A file written to disk and ready to be delivered, then cleaned up."""

    track: Track
    local_path: Path
    used_fallback: bool
    strategy: str
