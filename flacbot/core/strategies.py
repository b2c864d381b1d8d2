"""
Ways of producing the bytes for a selected track, tried in order by the
workflow coordinator until one succeeds.
"""

from flacbot.api.client import CatalogClient
from flacbot.media.downloader import Downloader
from flacbot.media.placeholder import make_placeholder
from flacbot.models.track import Track


class DownloadStrategy:
    """Base class. ``name`` is recorded on the resulting DownloadResult."""

    name = "base"
    is_fallback = False

    def applies_to(self, track: Track) -> bool:
        return True

    async def produce(self, track: Track, quality: str) -> bytes:
        raise NotImplementedError


class RemoteDownloadStrategy(DownloadStrategy):
    """Requests a download URL from the catalog and fetches the audio behind it."""

    name = "remote"

    def __init__(self, client: CatalogClient, downloader: Downloader):
        self.client = client
        self.downloader = downloader

    def applies_to(self, track: Track) -> bool:
        # Demo results have no counterpart in the catalog.
        return not track.is_fallback

    async def produce(self, track: Track, quality: str) -> bytes:
        url = await self.client.get_download_url(track.id, quality)
        return await self.downloader.fetch(url)


class PlaceholderStrategy(DownloadStrategy):
    """Synthesizes the placeholder file. Never fails."""

    name = "placeholder"
    is_fallback = True

    async def produce(self, track: Track, quality: str) -> bytes:
        return make_placeholder(track)
