import asyncio

import pytest

from flacbot.core.coordinator import WorkflowState
from flacbot.core.strategies import RemoteDownloadStrategy
from flacbot.exceptions import (
    DownloadError,
    LocalIOError,
    RemoteApiError,
    SessionExpiredError,
)
from flacbot.media.placeholder import PLACEHOLDER_SIGNATURE
from flacbot.models.track import Provenance

from .conftest import FakeDownloader, make_catalog, search_payload

CATALOG_ITEM = {
    "id": 42,
    "title": "Around the World",
    "performer": {"name": "Daft Punk"},
    "album": {"title": "Homework"},
    "duration": 429,
}
DOWNLOAD_OK = {"success": True, "data": {"url": "https://cdn.test/42.flac"}}


@pytest.mark.asyncio
async def test_fallback_search_then_select_writes_placeholder(
    offline_catalog, coordinator_factory
):
    downloader = FakeDownloader()
    coordinator = coordinator_factory(offline_catalog, downloader)

    outcome = await coordinator.search(7, "Bohemian Rhapsody Queen")
    assert outcome.provenance is Provenance.FALLBACK
    assert outcome.tracks[0].title == "Bohemian Rhapsody Queen - Song 1"
    assert coordinator.state(7) is WorkflowState.RESULTS_SHOWN

    result = await coordinator.select_and_download(7, "1")

    assert result.used_fallback
    assert result.strategy == "placeholder"
    assert result.local_path.read_bytes().startswith(PLACEHOLDER_SIGNATURE)
    assert result.local_path.name == "Artist Name 1 - Bohemian Rhapsody Queen - Song 1.flac"
    assert coordinator.state(7) is WorkflowState.DELIVERED
    # Demo tracks never reach the download endpoint.
    assert "download-music" not in [call[0] for call in offline_catalog.calls]
    assert downloader.urls == []


@pytest.mark.asyncio
async def test_remote_track_is_downloaded(coordinator_factory):
    client = make_catalog(
        {"get-music": search_payload(CATALOG_ITEM), "download-music": DOWNLOAD_OK}
    )
    downloader = FakeDownloader(b"\x00REAL\x00")
    coordinator = coordinator_factory(client, downloader)

    await coordinator.search("chat", "around the world")
    result = await coordinator.select_and_download("chat", 42)

    assert not result.used_fallback
    assert result.strategy == "remote"
    assert result.local_path.read_bytes() == b"\x00REAL\x00"
    assert result.local_path.name == "Daft Punk - Around the World.flac"
    assert downloader.urls == ["https://cdn.test/42.flac"]


@pytest.mark.asyncio
async def test_lossy_quality_uses_mp3_extension(coordinator_factory):
    client = make_catalog(
        {"get-music": search_payload(CATALOG_ITEM), "download-music": DOWNLOAD_OK}
    )
    coordinator = coordinator_factory(client, FakeDownloader(), quality="5")

    await coordinator.search(1, "daft punk")
    result = await coordinator.select_and_download(1, "42")

    assert result.local_path.suffix == ".mp3"
    assert ("download-music", {"track_id": "42", "quality": "5"}) in client.calls


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "download_url, downloader",
    [
        (RemoteApiError("not streamable"), FakeDownloader()),
        (DOWNLOAD_OK, FakeDownloader(DownloadError("HTTP 403"))),
    ],
)
async def test_remote_failure_degrades_to_placeholder(
    coordinator_factory, download_url, downloader
):
    client = make_catalog(
        {"get-music": search_payload(CATALOG_ITEM), "download-music": download_url}
    )
    coordinator = coordinator_factory(client, downloader)

    await coordinator.search(1, "daft punk")
    result = await coordinator.select_and_download(1, "42")

    assert result.used_fallback
    data = result.local_path.read_bytes()
    assert data.startswith(PLACEHOLDER_SIGNATURE)
    assert "Around the World".encode() in data


@pytest.mark.asyncio
async def test_empty_query_is_rejected(offline_catalog, coordinator_factory):
    coordinator = coordinator_factory(offline_catalog)

    with pytest.raises(ValueError):
        await coordinator.search(1, "   ")
    assert offline_catalog.calls == []


@pytest.mark.asyncio
async def test_empty_results_leave_no_session(coordinator_factory):
    client = make_catalog({"get-music": search_payload()})
    coordinator = coordinator_factory(client)

    outcome = await coordinator.search(1, "nothing matches this")

    assert not outcome.found
    assert coordinator.store.get(1) is None
    assert coordinator.state(1) is WorkflowState.IDLE


@pytest.mark.asyncio
async def test_new_search_replaces_previous_session(coordinator_factory):
    client = make_catalog({"get-music": search_payload(CATALOG_ITEM)})
    coordinator = coordinator_factory(client)

    await coordinator.search(1, "first")
    client.api_call = make_catalog({}).api_call
    await coordinator.search(1, "second")

    session = coordinator.store.get(1)
    assert session.query == "second"
    assert coordinator.store.resolve_track(1, "42") is None


@pytest.mark.asyncio
async def test_select_without_session_is_expired(offline_catalog, coordinator_factory):
    coordinator = coordinator_factory(offline_catalog)

    with pytest.raises(SessionExpiredError, match="Session expired") as excinfo:
        await coordinator.select_and_download(99, "1")
    assert excinfo.value.reason == "session"
    assert coordinator.state(99) is WorkflowState.IDLE


@pytest.mark.asyncio
async def test_select_unknown_track_is_expired(offline_catalog, coordinator_factory):
    coordinator = coordinator_factory(offline_catalog)
    await coordinator.search(1, "daft punk")

    with pytest.raises(SessionExpiredError, match="Track not found") as excinfo:
        await coordinator.select_and_download(1, "999")
    assert excinfo.value.reason == "track"


@pytest.mark.asyncio
async def test_selection_after_sweep_is_expired(
    offline_catalog, coordinator_factory, clock
):
    coordinator = coordinator_factory(offline_catalog)
    await coordinator.search(1, "daft punk")

    clock.advance(31 * 60)
    assert coordinator.store.sweep_expired() == 1

    with pytest.raises(SessionExpiredError):
        await coordinator.select_and_download(1, "1")


@pytest.mark.asyncio
async def test_owners_are_isolated(offline_catalog, coordinator_factory):
    coordinator = coordinator_factory(offline_catalog)
    await coordinator.search("alice", "abbey road")

    with pytest.raises(SessionExpiredError):
        await coordinator.select_and_download("bob", "1")

    first = await coordinator.select_and_download("alice", "1")
    await coordinator.search("bob", "abbey road")
    second = await coordinator.select_and_download("bob", "1")

    assert first.local_path != second.local_path
    assert first.local_path.exists() and second.local_path.exists()


@pytest.mark.asyncio
async def test_unwritable_download_dir_raises_local_io_error(
    offline_catalog, coordinator_factory, tmp_path
):
    coordinator = coordinator_factory(offline_catalog)
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")
    coordinator.download_dir = blocker
    await coordinator.search(1, "daft punk")

    with pytest.raises(LocalIOError):
        await coordinator.select_and_download(1, "1")
    assert coordinator.state(1) is WorkflowState.IDLE


@pytest.mark.asyncio
async def test_no_strategy_producing_data_raises_download_error(
    coordinator_factory,
):
    client = make_catalog(
        {"get-music": search_payload(CATALOG_ITEM), "download-music": DOWNLOAD_OK}
    )
    coordinator = coordinator_factory(client)
    coordinator.strategies = (
        RemoteDownloadStrategy(client, FakeDownloader(DownloadError("boom"))),
    )
    await coordinator.search(1, "daft punk")

    with pytest.raises(DownloadError):
        await coordinator.select_and_download(1, "42")


@pytest.mark.asyncio
async def test_cleanup_is_idempotent(offline_catalog, coordinator_factory):
    coordinator = coordinator_factory(offline_catalog)
    await coordinator.search(1, "daft punk")
    result = await coordinator.select_and_download(1, "2")

    assert await coordinator.cleanup(result.local_path) is True
    assert not result.local_path.exists()
    assert await coordinator.cleanup(result.local_path) is False


@pytest.mark.asyncio
async def test_concurrent_downloads_of_one_track_do_not_collide(coordinator_factory):
    client = make_catalog(
        {"get-music": search_payload(CATALOG_ITEM), "download-music": DOWNLOAD_OK}
    )
    coordinator = coordinator_factory(client, FakeDownloader(b"AUDIO", delay=0.05))
    await coordinator.search(1, "daft punk")

    first, second = await asyncio.gather(
        coordinator.select_and_download(1, "42"),
        coordinator.select_and_download(1, "42"),
    )

    assert first.local_path != second.local_path
    assert first.local_path.name == second.local_path.name == "Daft Punk - Around the World.flac"

    await coordinator.cleanup(first.local_path)
    assert second.local_path.read_bytes() == b"AUDIO"


@pytest.mark.asyncio
async def test_cleanup_leaves_no_directories_behind(offline_catalog, coordinator_factory):
    coordinator = coordinator_factory(offline_catalog)
    await coordinator.search("alice", "abbey road")
    await coordinator.search("bob", "abbey road")

    results = [
        await coordinator.select_and_download("alice", "1"),
        await coordinator.select_and_download("bob", "2"),
    ]
    for result in results:
        await coordinator.cleanup(result.local_path)

    assert list(coordinator.download_dir.iterdir()) == []
