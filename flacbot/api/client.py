"""
Async client for the Qobuz catalog proxy, with circuit breaker protection and
a demo fallback for searches.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

import aiohttp

from flacbot.exceptions import RemoteApiError, RemoteError, RemoteUnavailableError
from flacbot.models.config import DEFAULT_API_BASE_URL, LOSSLESS_QUALITY
from flacbot.models.track import STATUS_MESSAGES, Provenance, SearchResult, Track
from flacbot.utils.circuit_breaker import CircuitBreaker, CircuitBreakerError
from flacbot.utils.formatting import (
    extract_album_title,
    extract_artist_name,
    first_text,
    format_quality,
    format_track_duration,
)

log = logging.getLogger(__name__)

# (artist, album, duration, quality) of the demo results shown when the
# catalog cannot be reached.
FALLBACK_TEMPLATES = (
    ("Artist Name 1", "Album Name 1", "3:45", "FLAC 16bit/44.1kHz"),
    ("Artist Name 2", "Album Name 2", "4:12", "FLAC 24bit/96kHz"),
    ("Artist Name 3", "Album Name 3", "2:58", "FLAC 16bit/44.1kHz"),
)


def fallback_tracks(query: str) -> tuple[Track, ...]:
    """Builds the demo results for a query. Titles embed the query."""
    return tuple(
        Track(
            id=str(number),
            title=f"{query} - Song {number}",
            artist=artist,
            album=album,
            duration_display=duration,
            quality_display=quality,
            is_fallback=True,
        )
        for number, (artist, album, duration, quality) in enumerate(
            FALLBACK_TEMPLATES, start=1
        )
    )


def track_from_item(item: Dict[str, Any]) -> Track:
    """Normalizes one upstream track item into a canonical Track."""
    return Track(
        id=str(item["id"]),
        title=first_text(item.get("title"), default="Unknown Title"),
        artist=extract_artist_name(item),
        album=extract_album_title(item),
        duration_display=format_track_duration(item.get("duration")),
        quality_display=format_quality(
            item.get("maximum_bit_depth"), item.get("maximum_sampling_rate")
        ),
        is_fallback=False,
        raw=item,
    )


def tracks_from_items(items: Iterable[Any]) -> tuple[Track, ...]:
    """
    Normalizes upstream items in their original order. Items without an id and
    repeated ids are dropped so that ids stay unique within one result list.
    """
    tracks: List[Track] = []
    seen: set[str] = set()
    for item in items:
        if not isinstance(item, dict) or item.get("id") is None:
            log.debug(f"Skipping catalog item without an id: {item!r}")
            continue
        track = track_from_item(item)
        if track.id in seen:
            continue
        seen.add(track.id)
        tracks.append(track)
    return tuple(tracks)


class CatalogClient:
    """
    Async client for the catalog proxy's JSON API.

    Features:
    - Demo fallback for searches when the catalog is unreachable
    - Circuit breaker so a dead catalog fails fast
    - A single pooled aiohttp session
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 10.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        """
        Initializes the API client.

        Args:
            base_url: Root URL of the catalog proxy, without a trailing slash.
            timeout: Total timeout in seconds for each metadata call.
            circuit_breaker: Breaker shared by all calls. One is created if omitted.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=3,
            recovery_timeout=30,
            tracked_exceptions=(aiohttp.ClientError, asyncio.TimeoutError),
        )
        self._last_provenance = Provenance.REMOTE

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
                    "Accept": "application/json",
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def api_call(self, endpoint: str, **params: Any) -> Dict[str, Any]:
        """
        Makes a GET call to the catalog and returns the decoded payload.

        Raises:
            RemoteUnavailableError: Network failure, timeout, HTTP error status,
                undecodable body or open circuit.
            RemoteApiError: The payload's ``success`` flag is not true.
        """
        await self._initialize_session()
        url = f"{self.base_url}/{endpoint}"

        try:
            async with self._circuit_breaker:
                async with self._session.get(url, params=params) as r:
                    r.raise_for_status()
                    payload = await r.json(content_type=None)
        except CircuitBreakerError as e:
            raise RemoteUnavailableError(str(e)) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.debug(f"API call to {endpoint} failed: {e!r}")
            raise RemoteUnavailableError(
                f"Catalog request to '{endpoint}' failed: {e or type(e).__name__}"
            ) from e
        except ValueError as e:
            raise RemoteUnavailableError(
                f"Catalog returned an undecodable body for '{endpoint}'."
            ) from e

        if not isinstance(payload, dict) or payload.get("success") is not True:
            error = payload.get("error") if isinstance(payload, dict) else None
            raise RemoteApiError(
                error or f"Catalog reported a failure for '{endpoint}'."
            )
        return payload

    # Public API Methods
    async def search(self, query: str, offset: int = 0) -> SearchResult:
        """
        Searches the catalog. Never raises for remote failures: the demo
        results are returned instead, tagged with ``Provenance.FALLBACK``.
        """
        try:
            payload = await self.api_call("get-music", q=query, offset=offset)
            items = payload["data"]["tracks"]["items"]
            if not isinstance(items, list):
                raise TypeError("items is not a list")
        except RemoteError as e:
            return self._fallback(query, str(e))
        except (KeyError, TypeError) as e:
            return self._fallback(query, f"Malformed search payload: {e}")

        self._last_provenance = Provenance.REMOTE
        tracks = tracks_from_items(items)
        log.debug(f"Catalog returned {len(tracks)} track(s) for '{query}'")
        return SearchResult(query=query, tracks=tracks, provenance=Provenance.REMOTE)

    def _fallback(self, query: str, error: str) -> SearchResult:
        log.warning(f"[yellow]Catalog search failed, using demo results:[/] {error}")
        self._last_provenance = Provenance.FALLBACK
        return SearchResult(
            query=query,
            tracks=fallback_tracks(query),
            provenance=Provenance.FALLBACK,
            error=error,
        )

    async def get_download_url(
        self, track_id: str, quality: str = LOSSLESS_QUALITY
    ) -> str:
        """Asks the catalog for a short-lived download URL for a track."""
        payload = await self.api_call(
            "download-music", track_id=str(track_id), quality=str(quality)
        )
        data = payload.get("data")
        url = data.get("url") if isinstance(data, dict) else None
        if not isinstance(url, str) or not url:
            raise RemoteApiError(f"No download URL returned for track {track_id}.")
        return url

    async def get_album_details(self, album_id: str) -> Dict[str, Any]:
        payload = await self.api_call("get-album", album_id=str(album_id))
        data = payload.get("data")
        if not isinstance(data, dict):
            raise RemoteApiError(f"No album details returned for album {album_id}.")
        return data

    def is_using_real_source(self) -> bool:
        """Whether the most recent search was answered by the catalog."""
        return self._last_provenance is Provenance.REMOTE

    def get_status_message(self) -> str:
        """Two-line, display-only summary of the most recent search's source."""
        return STATUS_MESSAGES[self._last_provenance]
