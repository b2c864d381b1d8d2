"""
Inline keyboards and the callback tokens carried by their buttons.
"""

from collections.abc import Iterable

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from flacbot.models.track import Track

DOWNLOAD_PREFIX = "download_"
NEW_SEARCH = "new_search"


def download_token(track: Track) -> str:
    return f"{DOWNLOAD_PREFIX}{track.id}"


def parse_download_token(data: str | None) -> str | None:
    """Returns the track id carried by a download button, or None."""
    if not data or not data.startswith(DOWNLOAD_PREFIX):
        return None
    return data[len(DOWNLOAD_PREFIX) :] or None


def build_results_keyboard(tracks: Iterable[Track]) -> InlineKeyboardMarkup:
    """One button per track, in result order, then a 'New Search' button."""
    kb = InlineKeyboardBuilder()
    for track in tracks:
        kb.button(text=f"🎵 {track.label}", callback_data=download_token(track))
    kb.button(text="🔍 New Search", callback_data=NEW_SEARCH)
    kb.adjust(1)
    return kb.as_markup()
