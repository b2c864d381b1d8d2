"""
aiogram handlers translating chat events into workflow coordinator calls.

The coordinator is injected by the dispatcher (``Dispatcher(coordinator=...)``),
so handlers can also be called directly with any coordinator.
"""

import logging
from contextlib import suppress

from aiogram import F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import CallbackQuery, FSInputFile, Message

from flacbot.core.coordinator import WorkflowCoordinator
from flacbot.exceptions import FlacBotError, LocalIOError, SessionExpiredError

from .keyboards import (
    DOWNLOAD_PREFIX,
    NEW_SEARCH,
    build_results_keyboard,
    parse_download_token,
)
from .messages import (
    CALLBACK_ERROR_TEXT,
    DOWNLOAD_FAILED_TEXT,
    HELP_TEXT,
    NEW_SEARCH_TEXT,
    NO_RESULTS_TEXT,
    SEARCH_FAILED_TEXT,
    SEARCH_USAGE_TEXT,
    SEARCHING_TEXT,
    WELCOME_TEXT,
    format_delivered_text,
    format_downloading_text,
    format_results_text,
    format_track_caption,
)

log = logging.getLogger(__name__)


async def cmd_start(message: Message) -> None:
    await message.answer(WELCOME_TEXT)


async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT)


async def cmd_search(
    message: Message, command: CommandObject, coordinator: WorkflowCoordinator
) -> None:
    query = (command.args or "").strip()
    if not query:
        await message.answer(SEARCH_USAGE_TEXT)
        return
    await perform_search(message, query, coordinator)


async def text_search(message: Message, coordinator: WorkflowCoordinator) -> None:
    query = (message.text or "").strip()
    if query:
        await perform_search(message, query, coordinator)


async def perform_search(
    message: Message, query: str, coordinator: WorkflowCoordinator
) -> None:
    """Shows a progress message, runs the search and edits in the results."""
    log.info(f"Search from chat {message.chat.id}: {query!r}")
    try:
        status = await message.answer(SEARCHING_TEXT)
        outcome = await coordinator.search(message.chat.id, query)
        if not outcome.found:
            await status.edit_text(NO_RESULTS_TEXT)
            return
        await status.edit_text(
            format_results_text(outcome),
            reply_markup=build_results_keyboard(outcome.tracks),
        )
    except TelegramAPIError as e:
        log.error(f"[red]Search reply failed for chat {message.chat.id}:[/] {e}")
        with suppress(TelegramAPIError):
            await message.answer(SEARCH_FAILED_TEXT)


async def on_new_search(callback: CallbackQuery) -> None:
    if isinstance(callback.message, Message):
        with suppress(TelegramAPIError):
            await callback.message.edit_text(NEW_SEARCH_TEXT)
    await callback.answer()


async def on_download(callback: CallbackQuery, coordinator: WorkflowCoordinator) -> None:
    track_id = parse_download_token(callback.data)
    message = callback.message
    if track_id is None or not isinstance(message, Message):
        await callback.answer()
        return

    failed = True
    try:
        await deliver_track(message, track_id, coordinator)
        failed = False
    except (FlacBotError, TelegramAPIError, OSError) as e:
        log.error(f"[red]Delivery failed for chat {message.chat.id}:[/] {e}")
    finally:
        # The button keeps spinning until the callback is answered.
        with suppress(TelegramAPIError):
            if failed:
                await callback.answer(CALLBACK_ERROR_TEXT, show_alert=True)
            else:
                await callback.answer()


async def deliver_track(
    message: Message, track_id: str, coordinator: WorkflowCoordinator
) -> None:
    """
    Downloads a selected track, sends it as a document and removes the local
    copy. Progress and failures are reported by editing ``message``.
    """
    chat_id = message.chat.id
    try:
        track = coordinator.resolve(chat_id, track_id)
        await message.edit_text(format_downloading_text(track))
        result = await coordinator.select_and_download(chat_id, track_id)
    except SessionExpiredError as e:
        await message.edit_text(f"❌ {e}")
        return
    except LocalIOError as e:
        log.error(f"[red]Could not store track {track_id}:[/] {e}")
        await message.edit_text(DOWNLOAD_FAILED_TEXT)
        return

    try:
        await message.answer_document(
            FSInputFile(result.local_path),
            caption=format_track_caption(result.track),
        )
        await message.edit_text(format_delivered_text(result))
    except (TelegramAPIError, OSError) as e:
        log.error(f"[red]Sending '{result.local_path.name}' failed:[/] {e}")
        with suppress(TelegramAPIError):
            await message.edit_text(DOWNLOAD_FAILED_TEXT)
    finally:
        try:
            await coordinator.cleanup(result.local_path)
        except LocalIOError as e:
            log.warning(f"[yellow]Cleanup failed:[/] {e}")


def create_router() -> Router:
    """Builds a router with every handler registered, commands first."""
    router = Router(name="flacbot")
    router.message.register(cmd_start, CommandStart())
    router.message.register(cmd_help, Command("help"))
    router.message.register(cmd_search, Command("search"))
    router.message.register(text_search, F.text, ~F.text.startswith("/"))
    router.callback_query.register(on_new_search, F.data == NEW_SEARCH)
    router.callback_query.register(on_download, F.data.startswith(DOWNLOAD_PREFIX))
    return router
