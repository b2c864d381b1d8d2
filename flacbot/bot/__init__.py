"""
Telegram Layer.

This package connects the workflow coordinator to Telegram through aiogram:
message and callback handlers, inline keyboards, user-facing texts and the
polling runner.
"""

from .handlers import create_router
from .runner import SessionSweeper, run_bot

__all__ = ["SessionSweeper", "create_router", "run_bot"]
