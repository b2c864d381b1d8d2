"""
Data Models Layer.

This package contains the records that flow through the search and download
workflow, and the Pydantic model that validates the bot's configuration.
"""

from .config import BotConfig
from .track import DownloadResult, Provenance, SearchResult, Session, Track

__all__ = [
    "BotConfig",
    "DownloadResult",
    "Provenance",
    "SearchResult",
    "Session",
    "Track",
]
