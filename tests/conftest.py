import asyncio
from typing import Any

import pytest

from flacbot.api.client import CatalogClient
from flacbot.core.coordinator import WorkflowCoordinator
from flacbot.exceptions import DownloadError, RemoteApiError, RemoteUnavailableError
from flacbot.storage.session_store import SessionStore
from flacbot.utils.structured_logger import StructuredLogger


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDownloader:
    """Returns canned bytes, or raises, and records every URL it was asked for."""

    def __init__(self, payload: bytes | Exception = b"REAL AUDIO BYTES", delay: float = 0):
        self.payload = payload
        self.delay = delay
        self.urls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.urls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def close(self) -> None:
        pass


def make_catalog(responses: dict[str, Any]) -> CatalogClient:
    """
    A CatalogClient whose HTTP layer is replaced by canned payloads keyed by
    endpoint. A payload may be an exception instance to raise instead.
    """
    client = CatalogClient("http://catalog.test")
    client.calls = []

    async def api_call(endpoint: str, **params: Any) -> dict[str, Any]:
        client.calls.append((endpoint, params))
        outcome = responses.get(endpoint, RemoteUnavailableError("connection refused"))
        if isinstance(outcome, Exception):
            raise outcome
        if outcome.get("success") is not True:
            raise RemoteApiError(outcome.get("error") or "failed")
        return outcome

    client.api_call = api_call
    return client


def search_payload(*items: dict[str, Any]) -> dict[str, Any]:
    return {"success": True, "data": {"tracks": {"items": list(items)}}}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def offline_catalog():
    return make_catalog({})


@pytest.fixture
def coordinator_factory(tmp_path, clock):
    def _factory(client, downloader=None, quality="27"):
        return WorkflowCoordinator(
            client,
            SessionStore(clock=clock),
            tmp_path / "downloads",
            downloader=downloader or FakeDownloader(DownloadError("unused")),
            quality=quality,
            events=StructuredLogger("flacbot.tests"),
        )

    return _factory
