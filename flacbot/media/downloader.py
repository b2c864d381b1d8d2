"""
Fetches audio bytes from the short-lived URLs handed out by the catalog.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from flacbot.exceptions import DownloadError

log = logging.getLogger(__name__)


class Downloader:
    """A low-level byte fetcher with retry logic and exponential backoff."""

    CHUNK_SIZE = 262144  # 256 KB

    def __init__(
        self,
        timeout: float = 60.0,
        max_attempts: int = 3,
        base_delay: float = 1.5,
    ):
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=self.timeout, sock_connect=15, sock_read=30
                ),
            )
        return self._session

    async def close(self) -> None:
        """Closes the underlying aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            log.debug("Downloader session closed.")

    async def fetch(self, url: str) -> bytes:
        """
        Downloads the whole body behind ``url``.

        Transport errors and timeouts are retried. HTTP error statuses are not.

        Raises:
            DownloadError: The body could not be fetched or was empty.
        """
        last_exception: Optional[BaseException] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                session = await self._get_session()
                async with session.get(url, allow_redirects=True) as response:
                    if response.status >= 400:
                        raise DownloadError(
                            f"Download URL answered with HTTP {response.status}."
                        )
                    buffer = bytearray()
                    async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                        buffer.extend(chunk)
                if not buffer:
                    raise DownloadError("Download URL returned an empty body.")
                return bytes(buffer)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_exception = e
                log.debug(
                    f"Download attempt {attempt}/{self.max_attempts} failed: {e!r}."
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.base_delay * (2 ** (attempt - 1)))

        raise DownloadError(
            f"Download failed after {self.max_attempts} attempts: {last_exception!r}"
        ) from last_exception
