"""
Storage Layer.

This package holds the bot's state: the in-memory search sessions and the
configuration sources.
"""

from .config_manager import ConfigManager
from .session_store import SessionStore

__all__ = ["ConfigManager", "SessionStore"]
