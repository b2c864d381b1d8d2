"""
Wires the bot together and runs the polling loop.
"""

import asyncio
import logging
from contextlib import suppress

from aiogram import Bot, Dispatcher

from flacbot import __version__
from flacbot.api.client import CatalogClient
from flacbot.core.coordinator import WorkflowCoordinator
from flacbot.media.downloader import Downloader
from flacbot.models.config import BotConfig
from flacbot.storage.session_store import SessionStore
from flacbot.utils.structured_logger import create_structured_logger

from .handlers import create_router

log = logging.getLogger(__name__)


class SessionSweeper:
    """Periodically removes expired sessions from a store in the background."""

    def __init__(self, store: SessionStore, interval: float, max_age: float | None = None):
        self.store = store
        self.interval = interval
        self.max_age = max_age
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Starts the periodic sweep task."""
        if not self.running:
            self._task = asyncio.create_task(self._sweep_loop())
            log.debug(f"Started session sweep every {self.interval:.0f}s.")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            removed = self.store.sweep_expired(max_age=self.max_age)
            if removed:
                log.info(f"Expired {removed} inactive session(s).")

    async def stop(self) -> None:
        """Stops the sweep task gracefully."""
        if self.running:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            log.debug("Stopped session sweep task.")
        self._task = None


async def run_bot(config: BotConfig) -> None:
    """Builds every component from ``config`` and polls Telegram until stopped."""
    events, _, _ = create_structured_logger(config.log_dir)
    events.set_context(version=__version__, catalog=config.api_base_url)
    client = CatalogClient(config.api_base_url, timeout=config.api_timeout)
    downloader = Downloader(timeout=config.download_timeout)
    store = SessionStore(max_age=config.session_max_age)
    coordinator = WorkflowCoordinator(
        client,
        store,
        config.download_dir,
        downloader=downloader,
        quality=config.quality,
        events=events,
    )
    sweeper = SessionSweeper(store, config.sweep_interval)

    bot = Bot(token=config.bot_token)
    dispatcher = Dispatcher(coordinator=coordinator)
    dispatcher.include_router(create_router())

    await sweeper.start()
    log.info("[bold green]🎵 FlacBot started successfully![/bold green]")
    log.info(f"Catalog: [cyan]{client.base_url}[/cyan]. Waiting for messages...")
    try:
        await dispatcher.start_polling(bot, allowed_updates=["message", "callback_query"])
    finally:
        await sweeper.stop()
        await client.close()
        await downloader.close()
        await bot.session.close()
        events.close()
