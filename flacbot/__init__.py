"""
flacbot: a Telegram bot that searches a Qobuz catalog proxy and delivers tracks.
"""

__version__ = "1.0.0"
