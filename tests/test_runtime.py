import asyncio
import json

import pytest
from typer.testing import CliRunner

from flacbot import __version__
from flacbot.bot.runner import SessionSweeper
from flacbot.cli.app import app
from flacbot.exceptions import DownloadError
from flacbot.media.downloader import Downloader
from flacbot.storage.session_store import SessionStore
from flacbot.utils.structured_logger import create_structured_logger

from .conftest import FakeClock

runner = CliRunner()


@pytest.mark.asyncio
async def test_downloader_gives_up_after_retries():
    downloader = Downloader(timeout=5, max_attempts=2, base_delay=0)
    try:
        with pytest.raises(DownloadError, match="after 2 attempts"):
            await downloader.fetch("http://127.0.0.1:1/track.flac")
    finally:
        await downloader.close()


@pytest.mark.asyncio
async def test_sweeper_removes_expired_sessions():
    clock = FakeClock()
    store = SessionStore(max_age=60, clock=clock)
    store.put(1, "q", [])
    clock.advance(120)

    sweeper = SessionSweeper(store, interval=0.01)
    await sweeper.start()
    assert sweeper.running
    for _ in range(100):
        if len(store) == 0:
            break
        await asyncio.sleep(0.01)
    await sweeper.stop()

    assert len(store) == 0
    assert not sweeper.running


def test_events_are_written_as_json_lines(tmp_path):
    base, search, download = create_structured_logger(tmp_path)
    base.set_context(catalog="http://catalog.test")
    with base:
        search.search_completed(1, "daft punk", 3, "fallback")
        download.download_completed(1, "2", "placeholder", size_bytes=120, duration_s=0.014)

    (log_file,) = tmp_path.glob("flacbot_*.jsonl")
    entries = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert [e["event"] for e in entries] == ["search_completed", "download_completed"]
    assert entries[0]["provenance"] == "fallback"
    assert all(e["catalog"] == "http://catalog.test" for e in entries)
    assert entries[1]["duration_s"] == 0.01
    assert not base.json_enabled


def test_cli_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_run_requires_token(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("BOT_TOKEN", raising=False)

    result = runner.invoke(app, ["run"])

    assert result.exit_code != 0
    assert "BOT_TOKEN" in str(result.exception)


def test_cli_demo_falls_back_offline(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("QOBUZ_BASE_URL", "http://127.0.0.1:1")
    monkeypatch.setenv("FLACBOT_DOWNLOAD_DIR", str(tmp_path / "dl"))

    result = runner.invoke(app, ["demo", "Daft Punk", "--keep"])

    assert result.exit_code == 0, result.output
    (delivered,) = (tmp_path / "dl").glob("demo-*/*.flac")
    assert delivered.name == "Artist Name 1 - Daft Punk - Song 1.flac"
