"""
Coordinates one user's path from a search query to a delivered file.
"""

import asyncio
import logging
import tempfile
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Hashable, Optional, Sequence

import aiofiles
import aiofiles.os

from flacbot.api.client import CatalogClient
from flacbot.exceptions import (
    DownloadError,
    LocalIOError,
    RemoteError,
    SessionExpiredError,
)
from flacbot.media.downloader import Downloader
from flacbot.models.config import LOSSLESS_QUALITY, file_extension_for
from flacbot.models.track import DownloadResult, Provenance, SearchResult, Track
from flacbot.storage.session_store import SessionStore
from flacbot.utils.path import create_dir, sanitize_filename, track_filename
from flacbot.utils.structured_logger import (
    DownloadEventLogger,
    SearchEventLogger,
    StructuredLogger,
)

from .strategies import DownloadStrategy, PlaceholderStrategy, RemoteDownloadStrategy

log = logging.getLogger(__name__)


class WorkflowState(Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    RESULTS_SHOWN = "results_shown"
    DOWNLOADING = "downloading"
    DELIVERED = "delivered"


@dataclass(frozen=True)
class SearchOutcome:
    """What the transport needs to render a search answer."""

    query: str
    tracks: tuple[Track, ...]
    provenance: Provenance
    status_message: str

    @property
    def found(self) -> bool:
        return bool(self.tracks)

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchOutcome":
        return cls(
            query=result.query,
            tracks=result.tracks,
            provenance=result.provenance,
            status_message=result.status_message,
        )


class WorkflowCoordinator:
    """
    Orchestrates search, selection, download and cleanup for every chat.

    Remote failures never escape: searches degrade to demo results and
    downloads degrade to placeholder files. Only local file-system failures
    are raised, as ``LocalIOError``.
    """

    def __init__(
        self,
        client: CatalogClient,
        store: SessionStore,
        download_dir: Path,
        downloader: Optional[Downloader] = None,
        quality: str = LOSSLESS_QUALITY,
        strategies: Optional[Sequence[DownloadStrategy]] = None,
        events: Optional[StructuredLogger] = None,
    ):
        self.client = client
        self.store = store
        self.download_dir = Path(download_dir)
        self.quality = quality
        if strategies is None:
            strategies = (
                RemoteDownloadStrategy(client, downloader or Downloader()),
                PlaceholderStrategy(),
            )
        self.strategies = tuple(strategies)

        events = events or StructuredLogger("flacbot.events")
        self._search_events = SearchEventLogger(events)
        self._download_events = DownloadEventLogger(events)
        self._states: dict[Hashable, WorkflowState] = {}

    def state(self, owner_id: Hashable) -> WorkflowState:
        return self._states.get(owner_id, WorkflowState.IDLE)

    def reset(self, owner_id: Hashable) -> None:
        self._states.pop(owner_id, None)

    async def search(self, owner_id: Hashable, query: str) -> SearchOutcome:
        """
        Searches the catalog and, when anything was found, replaces the owner's
        session with the results.
        """
        query = query.strip()
        if not query:
            raise ValueError("Search query must not be empty.")

        self._states[owner_id] = WorkflowState.SEARCHING
        result = await self.client.search(query)
        if not result.from_remote:
            self._search_events.search_fallback(query, result.error)

        outcome = SearchOutcome.from_result(result)
        if not outcome.found:
            self.reset(owner_id)
        else:
            self.store.put(owner_id, query, result.tracks)
            self._states[owner_id] = WorkflowState.RESULTS_SHOWN

        self._search_events.search_completed(
            owner_id, query, len(result.tracks), result.provenance.value
        )
        return outcome

    def resolve(self, owner_id: Hashable, track_id: str) -> Track:
        """
        Looks a selected track up in the owner's session.

        Raises:
            SessionExpiredError: No session, or the track is not in it.
        """
        track_id = str(track_id)
        track = self.store.resolve_track(owner_id, track_id)
        if track is not None:
            return track

        self.reset(owner_id)
        reason = "session" if self.store.get(owner_id) is None else "track"
        self._search_events.session_expired(owner_id, track_id, reason)
        if reason == "session":
            raise SessionExpiredError(
                "Session expired. Please perform a new search.", reason
            )
        raise SessionExpiredError("Track not found. Please perform a new search.", reason)

    async def select_and_download(
        self,
        owner_id: Hashable,
        track_id: str,
        quality: Optional[str] = None,
    ) -> DownloadResult:
        """
        Resolves a selection against the owner's session and writes the track
        to disk, falling back to a placeholder when no real audio is available.

        Raises:
            SessionExpiredError: No session, or the track is not in it.
            LocalIOError: The file could not be written.
        """
        track = self.resolve(owner_id, track_id)
        quality = quality or self.quality
        self._states[owner_id] = WorkflowState.DOWNLOADING
        started = time.monotonic()

        data, strategy = await self._produce(track, quality)
        try:
            target = await self._write(
                owner_id, track_filename(track, file_extension_for(quality)), data
            )
        except LocalIOError:
            self.reset(owner_id)
            raise

        self._states[owner_id] = WorkflowState.DELIVERED
        self._download_events.download_completed(
            owner_id,
            track.id,
            strategy.name,
            size_bytes=len(data),
            duration_s=time.monotonic() - started,
        )
        return DownloadResult(
            track=track,
            local_path=target,
            used_fallback=strategy.is_fallback,
            strategy=strategy.name,
        )

    async def _produce(
        self, track: Track, quality: str
    ) -> tuple[bytes, DownloadStrategy]:
        """Runs the strategies in order and returns the first one's bytes."""
        for strategy in self.strategies:
            if not strategy.applies_to(track):
                continue
            try:
                return await strategy.produce(track, quality), strategy
            except (RemoteError, DownloadError) as e:
                log.warning(
                    f"[yellow]{strategy.name} download failed for track "
                    f"{track.id}:[/] {e}"
                )
                self._download_events.strategy_failed(track.id, strategy.name, str(e))
        # Reached only with a custom strategy list lacking a placeholder.
        raise DownloadError(f"No download strategy produced data for track {track.id}.")

    async def _write(self, owner_id: Hashable, filename: str, data: bytes) -> Path:
        """
        Writes ``data`` as ``filename`` inside a job directory of its own, so
        concurrent downloads of the same track never share a path.
        """
        job_dir: Optional[Path] = None
        try:
            await asyncio.to_thread(create_dir, self.download_dir)
            job_dir = Path(
                await asyncio.to_thread(
                    tempfile.mkdtemp,
                    prefix=f"{sanitize_filename(str(owner_id))}-",
                    dir=self.download_dir,
                )
            )
            path = job_dir / filename
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            if job_dir is not None:
                await self._remove_job_dir(job_dir)
            raise LocalIOError(f"Could not write '{filename}': {e}") from e
        log.debug(f"Wrote {len(data)} bytes to {path}")
        return path

    async def cleanup(self, path: Path) -> bool:
        """
        Removes a delivered file and its job directory. Returns False if the
        file was already gone.

        Raises:
            LocalIOError: The file exists but could not be removed.
        """
        path = Path(path)
        removed = True
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            log.debug(f"Cleanup skipped, file already gone: {path}")
            removed = False
        except OSError as e:
            raise LocalIOError(f"Could not remove '{path}': {e}") from e

        if path.parent.parent == self.download_dir:
            await self._remove_job_dir(path.parent)
        return removed

    async def _remove_job_dir(self, job_dir: Path) -> None:
        try:
            await aiofiles.os.rmdir(job_dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            log.warning(f"[yellow]Could not remove job directory {job_dir}:[/] {e}")
